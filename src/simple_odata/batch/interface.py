"""
Request Context Interface

A request context receives commands from the client in program order.
It assigns content-ids when commands are deferred into a batch and maps
entry handles from earlier inserts back to those content-ids.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, TYPE_CHECKING

from ..commands.wire import WireCommand
from ..transport.interface import ODataResponse

if TYPE_CHECKING:
    from .handles import EntryHandle


class IRequestContext(ABC):
    """Interface for request contexts"""

    @property
    @abstractmethod
    def is_batch(self) -> bool:
        """True if commands are deferred until the batch executes"""
        pass

    @abstractmethod
    def content_id_for(self, value: Any) -> int:
        """
        Look up the content-id of an entry queued earlier in this context.

        Args:
            value: An associated value from an entity payload

        Returns:
            Positive content-id if ``value`` is a handle issued by this
            context, otherwise 0
        """
        pass

    @abstractmethod
    def add_command(self, command: WireCommand) -> int:
        """
        Queue a command, assigning its content-id.

        Returns:
            The assigned content-id, or 0 where no ids are used
        """
        pass

    @abstractmethod
    def create_handle(self, command: WireCommand, collection: str) -> Optional["EntryHandle"]:
        """
        Issue a handle for a queued insert.

        The handle stands in for the new entry in later payloads of the
        same context.

        Returns:
            The handle, or None when commands are not deferred
        """
        pass

    @abstractmethod
    async def run(self, command: WireCommand) -> Optional[ODataResponse]:
        """
        Run a command that was added to this context.

        Returns:
            The service response, or None when execution is deferred
        """
        pass
