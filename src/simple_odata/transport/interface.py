"""
Transport Interface

Defines contract for executing wire commands against an OData service
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from ..commands.wire import WireCommand


@dataclass
class ODataResponse:
    """Outcome of one executed command"""

    status_code: int
    payload: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=dict)
    content_id: int = 0

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class BatchRequestError(Exception):
    """A request inside a batch was rejected by the service"""

    def __init__(self, response: ODataResponse):
        self.response = response
        self.content_id = response.content_id
        self.status_code = response.status_code
        message = f"Batch request {response.content_id} failed with status {response.status_code}"
        error = (response.payload or {}).get("error")
        if isinstance(error, dict) and error.get("message"):
            message = f"{message}: {error['message']}"
        super().__init__(message)


class ITransport(ABC):
    """Interface for OData transports"""

    @abstractmethod
    async def execute(self, command: WireCommand) -> ODataResponse:
        """
        Execute a single command.

        Args:
            command: Command addressed relative to the service root

        Returns:
            Response with decoded JSON payload, if any

        Raises:
            httpx.HTTPStatusError: If the service rejects the request
        """
        pass

    @abstractmethod
    async def execute_batch(self, commands: List[WireCommand]) -> List[ODataResponse]:
        """
        Execute queued commands as one batch, in queue order.

        Args:
            commands: Commands with assigned content-ids

        Returns:
            One response per command, ordered like ``commands``

        Raises:
            BatchRequestError: If any request in the batch failed
        """
        pass

    @abstractmethod
    async def get(self, path: str) -> ODataResponse:
        """
        Execute a read request.

        Args:
            path: Resource path and query, relative to the service root

        Returns:
            Response with decoded JSON payload
        """
        pass

    @abstractmethod
    async def get_metadata(self) -> str:
        """
        Get raw $metadata XML.

        Returns:
            Complete CSDL metadata document
        """
        pass

    @abstractmethod
    def get_transport_info(self) -> Dict[str, Any]:
        """
        Get transport implementation information.

        Returns:
            Transport metadata (type, service url, etc.)
        """
        pass
