"""
Wire commands and resource paths
"""

from .wire import WireCommand, RestVerb, serialize_body

__all__ = ["WireCommand", "RestVerb", "serialize_body"]
