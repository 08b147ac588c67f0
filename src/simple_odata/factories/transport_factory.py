"""
Transport Factory

Creates transport instances based on configuration.
"""

from typing import Dict, Any, List, Optional
import structlog

from ..config import Settings, ConfigurationError
from ..auth import IAuthProvider
from ..commands.wire import WireCommand
from ..transport import ITransport, HttpTransport, ODataResponse

logger = structlog.get_logger(__name__)


class RecordingTransport(ITransport):
    """
    Transport that records commands instead of sending them.

    Used for dry runs and tests. Inserts echo their body back as the
    created entry; reads return whatever was registered with
    :meth:`add_read_result`, or an empty collection.
    """

    def __init__(self, metadata_xml: Optional[str] = None):
        self.metadata_xml = metadata_xml
        self.commands: List[WireCommand] = []
        self.batches: List[List[WireCommand]] = []
        self.reads: List[str] = []
        self._read_results: Dict[str, Dict[str, Any]] = {}

    def add_read_result(self, path: str, payload: Dict[str, Any]) -> None:
        self._read_results[path] = payload

    def _respond(self, command: WireCommand) -> ODataResponse:
        if command.verb == "POST" and not command.omit_from_result:
            return ODataResponse(201, command.json_body, content_id=command.content_id)
        return ODataResponse(204, None, content_id=command.content_id)

    async def execute(self, command: WireCommand) -> ODataResponse:
        """Record command and return a canned response"""
        self.commands.append(command)
        return self._respond(command)

    async def execute_batch(self, commands: List[WireCommand]) -> List[ODataResponse]:
        """Record batch and return one canned response per command"""
        self.batches.append(list(commands))
        self.commands.extend(commands)
        return [self._respond(command) for command in commands]

    async def get(self, path: str) -> ODataResponse:
        """Return the registered read result"""
        self.reads.append(path)
        return ODataResponse(200, self._read_results.get(path, {"value": []}))

    async def get_metadata(self) -> str:
        """Return metadata given at construction"""
        if self.metadata_xml is None:
            raise ConfigurationError("Recording transport has no metadata; set METADATA_FILE")
        return self.metadata_xml

    def get_transport_info(self) -> Dict[str, Any]:
        """Returns recording transport info"""
        return {
            "type": "recording",
            "recorded_commands": len(self.commands),
            "recorded_batches": len(self.batches),
        }


class TransportFactory:
    """Factory for creating transports"""

    @staticmethod
    async def create(settings: Settings, auth_provider: IAuthProvider) -> ITransport:
        """
        Create transport based on configuration.

        Args:
            settings: Client settings
            auth_provider: Configured auth provider

        Returns:
            Configured transport instance

        Raises:
            ConfigurationError: If transport type is not supported
        """
        transport_type = settings.transport.lower()

        logger.info("Creating transport", transport_type=transport_type)

        if transport_type == "http":
            token = await auth_provider.get_token({"user_id": "system"})
            return HttpTransport(settings, token, auth_provider)
        elif transport_type == "recording":
            return RecordingTransport()
        else:
            raise ConfigurationError(f"Unsupported transport: {transport_type}")

    @staticmethod
    def get_available_transports() -> list[str]:
        """Get list of available transport types"""
        return ["http", "recording"]
