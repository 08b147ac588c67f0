"""
Authentication Provider Interface

Defines contract for authentication providers (Azure AD, static bearer token, etc.)
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional


class IAuthProvider(ABC):
    """Interface for authentication providers"""

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """
        Validate that credentials are properly configured and working.

        Returns:
            True if credentials are valid and can authenticate
        """
        pass

    @abstractmethod
    async def get_token(self, context: Dict[str, Any]) -> Optional[str]:
        """
        Get authentication token for OData requests.

        Args:
            context: Authentication context (user_id, scopes, etc.)

        Returns:
            Bearer token, or None when the service needs no authentication

        Raises:
            AuthenticationError: If authentication fails
        """
        pass

    @abstractmethod
    async def refresh_token_if_needed(self, context: Dict[str, Any]) -> Optional[str]:
        """
        Refresh token if it's expired or about to expire.

        Args:
            context: Authentication context

        Returns:
            New token if refreshed, None if no fresh token could be obtained
        """
        pass

    @abstractmethod
    def get_provider_info(self) -> Dict[str, Any]:
        """
        Get information about the auth provider.

        Returns:
            Provider metadata (type, settings, etc.)
        """
        pass


class AuthenticationError(Exception):
    """Authentication related errors"""
    pass
