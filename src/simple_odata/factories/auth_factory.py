"""
Authentication Provider Factory

Creates auth provider instances based on configuration.
"""

from typing import Dict, Any, Optional
import structlog

from ..config import Settings, ConfigurationError
from ..auth import IAuthProvider, AzureADAuthProvider

logger = structlog.get_logger(__name__)


class StaticTokenAuthProvider(IAuthProvider):
    """Fixed bearer token, or no authentication at all"""

    def __init__(self, token: Optional[str] = None):
        self.token = token

    async def validate_credentials(self) -> bool:
        """Nothing to validate for a fixed token"""
        return True

    async def get_token(self, context: Dict[str, Any]) -> Optional[str]:
        return self.token

    async def refresh_token_if_needed(self, context: Dict[str, Any]) -> Optional[str]:
        """A fixed token cannot be refreshed"""
        return None

    def get_provider_info(self) -> Dict[str, Any]:
        return {
            "type": "bearer" if self.token else "none",
            "has_token": self.token is not None,
        }


class AuthProviderFactory:
    """Factory for creating authentication providers"""

    @staticmethod
    def create(settings: Settings) -> IAuthProvider:
        """
        Create auth provider based on configuration.

        Args:
            settings: Client settings

        Returns:
            Configured auth provider instance

        Raises:
            ConfigurationError: If the provider is unsupported or misconfigured
        """
        provider_type = settings.auth_provider.lower()

        logger.info("Creating auth provider", provider_type=provider_type)

        if provider_type == "azure_ad":
            return AzureADAuthProvider(settings)
        elif provider_type == "bearer":
            if not settings.bearer_token:
                raise ConfigurationError("bearer auth requires BEARER_TOKEN")
            return StaticTokenAuthProvider(settings.bearer_token)
        elif provider_type == "none":
            return StaticTokenAuthProvider()
        else:
            raise ConfigurationError(f"Unsupported auth provider: {provider_type}")

    @staticmethod
    def get_available_providers() -> list[str]:
        """Get list of available auth provider types"""
        return ["none", "bearer", "azure_ad"]
