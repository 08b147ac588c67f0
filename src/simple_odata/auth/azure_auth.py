"""
Azure AD Authentication Provider

Client-credentials implementation of IAuthProvider for OData services
protected by Azure AD (Dataverse, Dynamics 365, Graph-style endpoints).
"""

import time
from typing import Dict, Any, Optional
from azure.identity import ClientSecretCredential
import structlog

from ..config import Settings, ConfigurationError
from .interface import IAuthProvider, AuthenticationError

logger = structlog.get_logger(__name__)


class AzureADAuthProvider(IAuthProvider):
    """Acquires and caches Azure AD tokens for the configured OData service"""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.token_cache: Dict[str, Dict[str, Any]] = {}

        if not (settings.azure_tenant_id and settings.azure_client_id and settings.azure_client_secret):
            raise ConfigurationError(
                "azure_ad auth requires AZURE_TENANT_ID, AZURE_CLIENT_ID and AZURE_CLIENT_SECRET"
            )

        # Use client secret credential for service principal authentication
        self.credential = ClientSecretCredential(
            tenant_id=settings.azure_tenant_id,
            client_id=settings.azure_client_id,
            client_secret=settings.azure_client_secret,
        )

        logger.info(
            "Azure AD auth provider initialized",
            tenant_id=settings.azure_tenant_id,
            client_id=settings.azure_client_id,
            scope=settings.token_scope,
        )

    async def get_token(self, context: Dict[str, Any]) -> str:
        """
        Get access token using client credentials flow

        Args:
            context: Caller context; only 'user_id' is used, as cache key

        Returns:
            Valid access token for the OData service
        """
        cache_key = f"odata_{context.get('user_id', 'system')}"

        # Check cache first
        if cache_key in self.token_cache:
            token_data = self.token_cache[cache_key]
            if token_data["expires_at"] > time.time() + 60:  # 60 second buffer
                logger.debug("Using cached token", cache_key=cache_key)
                return str(token_data["token"])

        try:
            scope = self.settings.token_scope

            logger.debug("Requesting new token", scope=scope)
            token = self.credential.get_token(scope)

            self.token_cache[cache_key] = {"token": token.token, "expires_at": token.expires_on}

            logger.info(
                "Token acquired successfully", cache_key=cache_key, expires_at=token.expires_on
            )

            return str(token.token)

        except Exception as e:
            logger.error(
                "Failed to acquire token",
                error=str(e),
                tenant_id=self.settings.azure_tenant_id,
                client_id=self.settings.azure_client_id,
            )
            raise AuthenticationError(f"Failed to acquire token: {e}") from e

    def clear_token_cache(self) -> None:
        """Clear the token cache"""
        self.token_cache.clear()
        logger.info("Token cache cleared")

    async def validate_credentials(self) -> bool:
        """
        Validate that the credentials can successfully authenticate

        Returns:
            True if credentials are valid, False otherwise
        """
        try:
            token = await self.get_token({"user_id": "validation_test"})
            return bool(token)
        except AuthenticationError as e:
            logger.error("Credential validation failed", error=str(e))
            return False

    async def refresh_token_if_needed(self, context: Dict[str, Any]) -> Optional[str]:
        """Drop the cached token and acquire a new one"""
        self.token_cache.pop(f"odata_{context.get('user_id', 'system')}", None)
        try:
            return await self.get_token(context)
        except AuthenticationError:
            return None

    def get_provider_info(self) -> Dict[str, Any]:
        """Get provider information"""
        return {
            "type": "azure_ad",
            "tenant_id": self.settings.azure_tenant_id,
            "client_id": self.settings.azure_client_id,
            "cache_size": len(self.token_cache),
            "scope": self.settings.token_scope
        }
