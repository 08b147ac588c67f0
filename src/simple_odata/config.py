"""
Configuration management for the simple-odata client
"""

import os
from pathlib import Path
from typing import Optional, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(ValueError):
    """Raised when required settings are missing or inconsistent"""
    pass


class Settings(BaseSettings):
    """Client settings loaded from environment variables"""

    # OData service (Required)
    odata_service_url: str

    # Optional offline metadata document (EDMX); skips the $metadata request
    metadata_file: Optional[str] = None

    # Authentication
    auth_provider: Literal["none", "bearer", "azure_ad"] = "none"
    bearer_token: Optional[str] = None
    azure_client_id: Optional[str] = None
    azure_client_secret: Optional[str] = None
    azure_tenant_id: Optional[str] = None
    azure_scope: Optional[str] = None

    # Wire behaviour
    transport: Literal["http", "recording"] = "http"
    merge_verb: Literal["PATCH", "MERGE"] = "PATCH"
    request_timeout: float = 30.0
    metadata_timeout: float = 60.0

    log_level: str = "info"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )

    @property
    def service_root(self) -> str:
        """Service URL without trailing slash"""
        return self.odata_service_url.rstrip("/")

    @property
    def metadata_path_resolved(self) -> Optional[Path]:
        """Resolved path of the offline metadata document, if configured"""
        if not self.metadata_file:
            return None
        return Path(self.metadata_file).resolve()

    @property
    def token_scope(self) -> str:
        """Scope requested from Azure AD; defaults to the service host"""
        if self.azure_scope:
            return self.azure_scope
        scheme, _, rest = self.service_root.partition("://")
        host = rest.split("/", 1)[0]
        return f"{scheme}://{host}/.default"


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get client settings singleton"""
    global _settings
    if _settings is None:
        # Ensure .env is loaded before creating settings
        load_dotenv_if_exists()

        import structlog
        logger = structlog.get_logger(__name__)
        logger.debug("Environment variables",
                     odata_service_url=os.getenv('ODATA_SERVICE_URL'),
                     cwd=os.getcwd())

        try:
            _settings = Settings()  # type: ignore[call-arg]
            logger.info("Settings loaded", service_url=_settings.service_root)
        except Exception as e:
            # Re-raise with more context
            raise ConfigurationError(
                "Required environment variables missing. Check your .env file."
            ) from e
    return _settings


def reset_settings() -> None:
    """Drop the cached settings instance"""
    global _settings
    _settings = None


def load_dotenv_if_exists() -> None:
    """Load .env file if it exists"""
    from dotenv import load_dotenv

    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)
    else:
        # Try to load from parent directories
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            env_path = parent / ".env"
            if env_path.exists():
                load_dotenv(env_path)
                break
