"""
Authentication module for the simple-odata client

Supplies bearer tokens for requests against the OData service.
"""

from .interface import IAuthProvider, AuthenticationError
from .azure_auth import AzureADAuthProvider

__all__ = [
    "IAuthProvider",
    "AuthenticationError",
    "AzureADAuthProvider"
]
