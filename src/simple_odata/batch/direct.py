"""
Direct request context

Sends each command to the transport as soon as it is run.
"""

from typing import Any, Optional
import structlog

from ..commands.wire import WireCommand
from ..transport.interface import ITransport, ODataResponse
from .interface import IRequestContext

logger = structlog.get_logger(__name__)


class DirectContext(IRequestContext):
    """Request context without batching; content-ids are never assigned"""

    def __init__(self, transport: ITransport):
        self.transport = transport

    @property
    def is_batch(self) -> bool:
        return False

    def content_id_for(self, value: Any) -> int:
        return 0

    def add_command(self, command: WireCommand) -> int:
        return 0

    def create_handle(self, command: WireCommand, collection: str) -> None:
        return None

    async def run(self, command: WireCommand) -> Optional[ODataResponse]:
        logger.debug("Running command", verb=command.verb, path=command.path)
        return await self.transport.execute(command)
