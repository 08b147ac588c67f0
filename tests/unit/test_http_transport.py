"""
Tests for the httpx transport
"""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from simple_odata.client import ODataClient
from simple_odata.commands.wire import WireCommand, serialize_body
from simple_odata.transport import BatchRequestError, HttpTransport


def make_transport(settings, handler, token="token-1", auth_provider=None):
    return HttpTransport(
        settings,
        token=token,
        auth_provider=auth_provider,
        http_transport=httpx.MockTransport(handler),
    )


@pytest.mark.unit
class TestExecute:
    async def test_request_shape(self, mock_settings):
        """Test the URL, headers and body of a request"""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, json={"OrderId": 5})

        transport = make_transport(mock_settings, handler)
        command = WireCommand("POST", "Orders", None, serialize_body({"OrderId": 5}))

        response = await transport.execute(command)

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://sales.example.com/odata/Orders"
        assert request.headers["Authorization"] == "Bearer token-1"
        assert request.headers["OData-Version"] == "4.0"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {"OrderId": 5}
        assert response.status_code == 201
        assert response.payload == {"OrderId": 5}

    async def test_no_content(self, mock_settings):
        """Test a 204 response has no payload"""
        transport = make_transport(mock_settings, lambda request: httpx.Response(204))

        response = await transport.execute(WireCommand.delete("Orders(5)"))

        assert response.is_success
        assert response.payload is None

    async def test_http_error_propagates(self, mock_settings):
        """Test http error propagates"""
        transport = make_transport(
            mock_settings, lambda request: httpx.Response(404, json={"error": {"message": "nope"}})
        )

        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await transport.execute(WireCommand.delete("Orders(5)"))

        assert exc_info.value.response.status_code == 404


@pytest.mark.unit
class TestTokenRefresh:
    async def test_401_refreshes_token_once(self, mock_settings):
        """Test a 401 triggers one token refresh and retry"""
        auth = AsyncMock()
        auth.refresh_token_if_needed.return_value = "token-2"
        tokens = []

        def handler(request):
            tokens.append(request.headers["Authorization"])
            if request.headers["Authorization"] != "Bearer token-2":
                return httpx.Response(401)
            return httpx.Response(200, json={"value": []})

        transport = make_transport(mock_settings, handler, auth_provider=auth)

        response = await transport.get("Orders")

        assert tokens == ["Bearer token-1", "Bearer token-2"]
        assert response.payload == {"value": []}
        assert transport.token == "token-2"

    async def test_401_without_provider_raises(self, mock_settings):
        """Test a 401 without an auth provider is raised"""
        transport = make_transport(mock_settings, lambda request: httpx.Response(401))

        with pytest.raises(httpx.HTTPStatusError):
            await transport.get("Orders")

    async def test_repeated_401_raises(self, mock_settings):
        """Test a second 401 after refresh is raised"""
        auth = AsyncMock()
        auth.refresh_token_if_needed.return_value = "token-2"
        transport = make_transport(
            mock_settings, lambda request: httpx.Response(401), auth_provider=auth
        )

        with pytest.raises(httpx.HTTPStatusError):
            await transport.get("Orders")

        auth.refresh_token_if_needed.assert_awaited_once()


@pytest.mark.unit
class TestBatch:
    def _commands(self):
        insert = WireCommand("POST", "Lines", None, serialize_body({"LineId": 1}), content_id=1)
        order = WireCommand("POST", "Orders", None, serialize_body({"OrderId": 5}), content_id=2)
        link = WireCommand(
            "POST", "$2/Lines/$ref", None, serialize_body({"@odata.id": "$1"}),
            content_id=3, omit_from_result=True, depends_on=(2, 1),
        )
        return [insert, order, link]

    def test_batch_envelope(self, mock_settings):
        """Test batch envelope"""
        transport = make_transport(mock_settings, lambda request: httpx.Response(200))

        envelope = transport.build_batch_body(self._commands())

        requests = envelope["requests"]
        assert [r["id"] for r in requests] == ["1", "2", "3"]
        assert requests[2] == {
            "id": "3",
            "method": "POST",
            "url": "$2/Lines/$ref",
            "headers": {"content-type": "application/json"},
            "body": {"@odata.id": "$1"},
            "dependsOn": ["2", "1"],
        }
        assert "dependsOn" not in requests[0]

    async def test_execute_batch(self, mock_settings):
        """Test execute batch"""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"responses": [
                {"id": "3", "status": 204},
                {"id": "1", "status": 201, "body": {"LineId": 1}},
                {"id": "2", "status": 201, "body": {"OrderId": 5}},
            ]})

        transport = make_transport(mock_settings, handler)

        responses = await transport.execute_batch(self._commands())

        assert str(seen[0].url) == "https://sales.example.com/odata/$batch"
        assert [r.content_id for r in responses] == [1, 2, 3]
        assert responses[1].payload == {"OrderId": 5}
        assert responses[2].payload is None

    async def test_failed_part_raises(self, mock_settings):
        """Test failed part raises"""
        def handler(request):
            return httpx.Response(200, json={"responses": [
                {"id": "1", "status": 201, "body": {"LineId": 1}},
                {"id": "2", "status": 400, "body": {"error": {"message": "Total is required"}}},
            ]})

        transport = make_transport(mock_settings, handler)

        with pytest.raises(BatchRequestError) as exc_info:
            await transport.execute_batch(self._commands())

        assert exc_info.value.content_id == 2
        assert exc_info.value.status_code == 400
        assert "Total is required" in str(exc_info.value)


@pytest.mark.unit
class TestMetadata:
    async def test_get_metadata(self, mock_settings, sample_metadata):
        """Test fetching metadata as XML"""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, text=sample_metadata,
                                  headers={"Content-Type": "application/xml"})

        transport = make_transport(mock_settings, handler)

        metadata = await transport.get_metadata()

        assert metadata == sample_metadata
        assert str(seen[0].url) == "https://sales.example.com/odata/$metadata"
        assert seen[0].headers["Accept"] == "application/xml"

    def test_transport_info(self, mock_settings):
        """Test transport info"""
        transport = make_transport(mock_settings, lambda request: httpx.Response(200))

        info = transport.get_transport_info()

        assert info["type"] == "http"
        assert info["authenticated"] is True


@pytest.mark.unit
class TestRawValues:
    async def test_count_is_decoded_as_integer(self, mock_settings, schema):
        """Test a text/plain $count response read through find_scalar"""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, text="42", headers={"Content-Type": "text/plain"})

        client = ODataClient(schema, make_transport(mock_settings, handler))

        count = await client.find_scalar("Orders/$count")

        assert count == 42
        assert str(seen[0].url) == "https://sales.example.com/odata/Orders/$count"

    async def test_plain_text_value(self, mock_settings):
        """Test a raw property value is returned as text"""
        transport = make_transport(
            mock_settings,
            lambda request: httpx.Response(200, text="Contoso", headers={"Content-Type": "text/plain"}),
        )

        response = await transport.get("Customers(9)/Name/$value")

        assert response.payload == {"value": "Contoso"}
