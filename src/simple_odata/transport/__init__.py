"""
Transport module

Executes wire commands against OData services.
"""

from .interface import ITransport, ODataResponse, BatchRequestError
from .http_transport import HttpTransport

__all__ = [
    "ITransport",
    "ODataResponse",
    "BatchRequestError",
    "HttpTransport",
]
