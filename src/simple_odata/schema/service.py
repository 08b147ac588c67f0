"""
Schema Service

Loads the service schema once, from an offline metadata file or from the
service's $metadata endpoint, and hands the same read-only instance to
every caller.
"""

import asyncio
from typing import Dict, Any, Optional
import structlog

from ..config import Settings
from ..transport.interface import ITransport
from .edm_schema import EdmSchema
from .metadata_parser import MetadataParser

logger = structlog.get_logger(__name__)


class SchemaService:
    """Fetches, parses and caches the schema of one OData service"""

    def __init__(self, transport: ITransport, settings: Optional[Settings] = None):
        self.transport = transport
        self.settings = settings
        self.parser = MetadataParser()
        self._schema: Optional[EdmSchema] = None
        self._lock = asyncio.Lock()
        self._source: Optional[str] = None

    async def get_schema(self) -> EdmSchema:
        """Get the cached schema, loading it on first use"""
        if self._schema is not None:
            return self._schema

        async with self._lock:
            if self._schema is None:
                metadata_xml = await self._load_metadata()
                self._schema = self.parser.parse(metadata_xml)
                logger.info("Schema loaded", source=self._source,
                            collections=len(self._schema.collection_names))
        return self._schema

    def load_from_string(self, metadata_xml: str) -> EdmSchema:
        """Replace the cached schema with one parsed from ``metadata_xml``"""
        self._schema = self.parser.parse(metadata_xml)
        self._source = "string"
        return self._schema

    async def _load_metadata(self) -> str:
        metadata_path = self.settings.metadata_path_resolved if self.settings else None
        if metadata_path is not None:
            self._source = str(metadata_path)
            logger.info("Reading metadata file", path=self._source)
            return metadata_path.read_text(encoding="utf-8")

        self._source = "service"
        return await self.transport.get_metadata()

    def clear_cache(self) -> None:
        """Drop the cached schema; the next get_schema() reloads it"""
        self._schema = None
        self._source = None
        logger.info("Schema cache cleared")

    def get_service_info(self) -> Dict[str, Any]:
        """Get service implementation information"""
        info: Dict[str, Any] = {
            "type": "schema_service",
            "loaded": self._schema is not None,
            "source": self._source,
            "transport": self.transport.get_transport_info(),
        }
        if self._schema is not None:
            info["schema"] = self._schema.get_schema_info()
        return info
