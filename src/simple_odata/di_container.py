"""
Dependency Injection Container

Centralized dependency resolution for clean separation of concerns.
"""

from typing import Dict, Any, Optional
import structlog

from .config import Settings, get_settings
from .factories import AuthProviderFactory, TransportFactory
from .auth.interface import IAuthProvider
from .transport.interface import ITransport
from .schema.service import SchemaService
from .client import ODataClient

logger = structlog.get_logger(__name__)


class DIContainer:
    """
    Dependency Injection Container for the client's collaborators.

    Builds each dependency on first use and caches it, so the schema is
    fetched once and shared by every client the container hands out.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._services: Dict[str, Any] = {}

        logger.info("DI Container initialized",
                    auth_provider=self.settings.auth_provider,
                    transport=self.settings.transport,
                    service_url=self.settings.service_root)

    def get_auth_provider(self) -> IAuthProvider:
        """Get auth provider instance (lazy initialization)"""
        if 'auth_provider' not in self._services:
            self._services['auth_provider'] = AuthProviderFactory.create(self.settings)
            logger.debug("Auth provider created", type=self.settings.auth_provider)
        return self._services['auth_provider']

    async def get_transport(self) -> ITransport:
        """Get transport instance (lazy initialization)"""
        if 'transport' not in self._services:
            auth_provider = self.get_auth_provider()
            self._services['transport'] = await TransportFactory.create(self.settings, auth_provider)
            logger.debug("Transport created", type=self.settings.transport)
        return self._services['transport']

    async def get_schema_service(self) -> SchemaService:
        """Get schema service instance (lazy initialization)"""
        if 'schema_service' not in self._services:
            transport = await self.get_transport()
            self._services['schema_service'] = SchemaService(transport, self.settings)
            logger.debug("Schema service created")
        return self._services['schema_service']

    async def get_client(self) -> ODataClient:
        """Get client bound to the cached schema (lazy initialization)"""
        if 'client' not in self._services:
            schema_service = await self.get_schema_service()
            schema = await schema_service.get_schema()
            self._services['client'] = ODataClient(
                schema, await self.get_transport(), merge_verb=self.settings.merge_verb
            )
            logger.debug("OData client created")
        return self._services['client']

    def get_container_info(self) -> Dict[str, Any]:
        """Get container status and dependency information"""
        info: Dict[str, Any] = {
            "cached_services": list(self._services.keys()),
            "settings": {
                "auth_provider": self.settings.auth_provider,
                "transport": self.settings.transport,
                "merge_verb": self.settings.merge_verb,
                "service_url": self.settings.service_root,
            },
        }
        if 'schema_service' in self._services:
            info["schema"] = self._services['schema_service'].get_service_info()
        return info
