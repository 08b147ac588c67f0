"""
HTTP transport

Executes wire commands against an OData v4 service with httpx. Requests
carry a bearer token when an auth provider is configured; a 401 triggers
one token refresh and retry. Batches use the JSON batch format.
"""

import re
from typing import Optional, Dict, Any, List
import httpx
import structlog

from ..auth import IAuthProvider
from ..config import Settings
from ..commands.wire import WireCommand
from .interface import ITransport, ODataResponse, BatchRequestError

logger = structlog.get_logger(__name__)

_INTEGER = re.compile(r"^[+-]?\d+$")


def _record_count(payload: Optional[Dict[str, Any]]) -> int:
    value = (payload or {}).get("value")
    return len(value) if isinstance(value, list) else 0


class HttpTransport(ITransport):
    """HTTP transport for OData v4 services with automatic token refresh"""

    def __init__(
        self,
        settings: Settings,
        token: Optional[str] = None,
        auth_provider: Optional[IAuthProvider] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.token = token
        self.auth_provider = auth_provider
        self.resource = settings.service_root
        # Injected by tests (httpx.MockTransport); None means real network
        self._http_transport = http_transport

    async def refresh_token_if_needed(self) -> bool:
        """
        Refresh the access token using the auth provider.

        Returns:
            True if token was refreshed, False if no auth provider available
        """
        if not self.auth_provider:
            logger.warning("No auth provider available for token refresh")
            return False

        new_token = await self.auth_provider.refresh_token_if_needed({"user_id": "system"})
        if new_token:
            self.token = new_token
            logger.info("Token refreshed successfully")
            return True
        return False

    def get_headers(self) -> Dict[str, str]:
        """Get standard HTTP headers for OData requests"""
        headers = {
            "Accept": "application/json",
            "OData-MaxVersion": "4.0",
            "OData-Version": "4.0",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, path: str) -> str:
        return f"{self.resource}/{path.lstrip('/')}"

    async def make_authenticated_request(
        self, method: str, url: str, **kwargs: Any
    ) -> httpx.Response:
        """
        Make an HTTP request with automatic token refresh on 401 errors.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Request URL
            **kwargs: Additional arguments for httpx request

        Returns:
            HTTP response

        Raises:
            httpx.HTTPStatusError: If request fails after token refresh attempt
        """
        timeout = kwargs.pop('timeout', self.settings.request_timeout)
        headers = self.get_headers()
        headers.update(kwargs.pop('headers', {}))

        max_retries = 2
        for attempt in range(max_retries):
            try:
                async with httpx.AsyncClient(timeout=timeout, transport=self._http_transport) as client:
                    response = await client.request(method, url, headers=headers, **kwargs)
                    response.raise_for_status()
                    return response

            except httpx.HTTPStatusError as e:
                if e.response.status_code == 401 and attempt < max_retries - 1:
                    logger.warning("Received 401 Unauthorized, attempting token refresh",
                                   attempt=attempt + 1, max_retries=max_retries)

                    if await self.refresh_token_if_needed():
                        headers['Authorization'] = f"Bearer {self.token}"
                        logger.info("Retrying request with refreshed token")
                        continue
                    else:
                        logger.error("Token refresh failed, cannot retry request")

                logger.error("HTTP request failed",
                             method=method, url=url, status_code=e.response.status_code,
                             response_text=e.response.text)
                raise

            except httpx.HTTPError as e:
                logger.error("Request error", method=method, url=url, error=str(e))
                raise

    @staticmethod
    def _decode(response: httpx.Response) -> Optional[Dict[str, Any]]:
        if not response.content:
            return None
        if "json" in response.headers.get("content-type", ""):
            payload = response.json()
            return payload if isinstance(payload, dict) else {"value": payload}
        # Raw values: $count, $value and single property reads
        text = response.text.strip()
        return {"value": int(text) if _INTEGER.match(text) else text}

    async def execute(self, command: WireCommand) -> ODataResponse:
        """Send one command"""
        url = self._url(command.path)
        headers = dict(command.headers)
        kwargs: Dict[str, Any] = {}
        if command.body is not None:
            headers["Content-Type"] = "application/json"
            kwargs["content"] = command.body

        logger.info("Executing OData command", verb=command.verb, url=url)

        response = await self.make_authenticated_request(
            command.verb, url, headers=headers, **kwargs
        )
        return ODataResponse(
            status_code=response.status_code,
            payload=self._decode(response),
            headers=dict(response.headers),
            content_id=command.content_id,
        )

    def build_batch_body(self, commands: List[WireCommand]) -> Dict[str, Any]:
        """JSON batch envelope; request ids are the content-ids"""
        requests = []
        for command in commands:
            request: Dict[str, Any] = {
                "id": str(command.content_id),
                "method": command.verb,
                "url": command.path,
                "headers": dict(command.headers),
            }
            if command.body is not None:
                request["headers"]["content-type"] = "application/json"
                request["body"] = command.json_body
            depends_on = [str(i) for i in command.depends_on if i != command.content_id]
            if depends_on:
                request["dependsOn"] = depends_on
            requests.append(request)
        return {"requests": requests}

    async def execute_batch(self, commands: List[WireCommand]) -> List[ODataResponse]:
        """Send commands as one JSON batch request"""
        url = self._url("$batch")
        logger.info("Executing OData batch", url=url, command_count=len(commands))

        response = await self.make_authenticated_request(
            "POST", url, json=self.build_batch_body(commands)
        )
        parts = {
            str(part.get("id")): part
            for part in (response.json().get("responses") or [])
        }

        results = []
        for command in commands:
            part = parts.get(str(command.content_id), {})
            body = part.get("body")
            result = ODataResponse(
                status_code=int(part.get("status", 0)),
                payload=body if isinstance(body, dict) else None,
                headers=dict(part.get("headers") or {}),
                content_id=command.content_id,
            )
            if not result.is_success:
                logger.error("Batch request failed", content_id=command.content_id,
                             status_code=result.status_code, verb=command.verb, path=command.path)
                raise BatchRequestError(result)
            results.append(result)

        logger.info("OData batch successful", command_count=len(results))
        return results

    async def get(self, path: str) -> ODataResponse:
        """Query a resource path"""
        url = self._url(path)
        logger.info("Querying OData resource", url=url)

        response = await self.make_authenticated_request("GET", url)
        payload = self._decode(response)
        logger.info("OData query successful", url=url,
                    record_count=_record_count(payload))
        return ODataResponse(response.status_code, payload, dict(response.headers))

    async def get_metadata(self) -> str:
        """
        Get OData metadata XML.

        Returns:
            Raw XML metadata from the service
        """
        url = self._url("$metadata")
        logger.info("Fetching OData metadata", url=url)

        response = await self.make_authenticated_request(
            "GET", url,
            headers={"Accept": "application/xml"},
            timeout=self.settings.metadata_timeout
        )
        metadata_xml = response.text

        logger.info("OData metadata retrieved", size_bytes=len(metadata_xml))
        return metadata_xml

    def get_transport_info(self) -> Dict[str, Any]:
        """
        Get transport implementation information.

        Returns:
            Transport metadata (type, service url, auth)
        """
        return {
            "type": "http",
            "service_url": self.resource,
            "authenticated": self.token is not None,
            "merge_verb": self.settings.merge_verb,
        }
