"""
OData batch

Queues commands in program order, assigns each a content-id, and sends
them to the transport as one batch. Content-ids start at 1 and increase
by one per queued command.
"""

from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING
import structlog

from ..commands.wire import WireCommand
from ..transport.interface import ITransport, ODataResponse
from .handles import EntryHandle
from .interface import IRequestContext

if TYPE_CHECKING:
    from ..client import ODataClient

logger = structlog.get_logger(__name__)


class BatchStateError(RuntimeError):
    """The batch was used after it executed"""
    pass


class ODataBatch(IRequestContext):
    """
    Batch request context.

    Commands queued through ``batch.client`` are not sent until
    :meth:`execute` runs, or until the ``async with`` block exits cleanly.
    The batch is single-writer state: queue from one task only.
    """

    def __init__(self, transport: ITransport):
        self.transport = transport
        self.client: Optional["ODataClient"] = None
        self._commands: List[WireCommand] = []
        self._handles: Dict[int, EntryHandle] = {}
        self._next_content_id = 1
        self._executed = False

    @property
    def is_batch(self) -> bool:
        return True

    @property
    def commands(self) -> Tuple[WireCommand, ...]:
        return tuple(self._commands)

    @property
    def executed(self) -> bool:
        return self._executed

    def content_id_for(self, value: Any) -> int:
        if isinstance(value, EntryHandle):
            if value.belongs_to(self):
                return value.content_id
            logger.warning("Entry handle from another batch ignored", handle=repr(value))
        return 0

    def add_command(self, command: WireCommand) -> int:
        if self._executed:
            raise BatchStateError("Cannot queue commands after the batch has executed")
        command.content_id = self._next_content_id
        self._next_content_id += 1
        self._commands.append(command)
        logger.debug("Command queued", content_id=command.content_id,
                     verb=command.verb, path=command.path)
        return command.content_id

    def create_handle(self, command: WireCommand, collection: str) -> EntryHandle:
        handle = EntryHandle(self, command.content_id, collection)
        self._handles[command.content_id] = handle
        return handle

    async def run(self, command: WireCommand) -> Optional[ODataResponse]:
        return None

    async def execute(self) -> List[ODataResponse]:
        """
        Send all queued commands.

        Returns:
            Responses of the queued commands in queue order, without the
            auxiliary link commands

        Raises:
            BatchRequestError: If the service rejected a request
            BatchStateError: If the batch already executed
        """
        if self._executed:
            raise BatchStateError("Batch has already executed")
        self._executed = True

        if not self._commands:
            logger.debug("Empty batch, nothing to send")
            return []

        logger.info("Executing batch", command_count=len(self._commands))
        responses = await self.transport.execute_batch(self._commands)

        results = []
        for command, response in zip(self._commands, responses):
            handle = self._handles.get(command.content_id)
            if handle is not None:
                handle.result = response.payload
            if not command.omit_from_result:
                results.append(response)
        return results

    async def __aenter__(self) -> "ODataBatch":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and not self._executed:
            await self.execute()
