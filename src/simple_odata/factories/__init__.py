"""
Factory classes for Dependency Injection

Provides factory methods to create implementations based on configuration.
"""

from .auth_factory import AuthProviderFactory, StaticTokenAuthProvider
from .transport_factory import TransportFactory, RecordingTransport

__all__ = [
    "AuthProviderFactory",
    "StaticTokenAuthProvider",
    "TransportFactory",
    "RecordingTransport",
]
