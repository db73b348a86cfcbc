import functools
import json

import httpx
import pytest

from openapi_executor import transport as transport_module
from openapi_executor.errors import ExecutionError, SpecFetchError
from openapi_executor.models import RequestDescription
from openapi_executor.transport import HttpTransport, fetch_spec


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestHttpTransport:
    @pytest.mark.asyncio
    async def test_sends_json_body_and_query(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            seen["accept"] = request.headers["accept"]
            return httpx.Response(201, json={"id": 1})

        request = RequestDescription(
            method="POST",
            url="https://api.example.com/v1/pets",
            headers={"Accept": "application/json"},
            query={"api_key": "k"},
            body={"name": "Fluffy"},
            json=True,
        )
        result = await HttpTransport(client=_client(handler)).send(request)

        assert result == {"id": 1}
        assert seen["method"] == "POST"
        assert seen["url"] == "https://api.example.com/v1/pets?api_key=k"
        assert seen["body"] == {"name": "Fluffy"}
        assert seen["accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_sends_form_body(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = request.content
            seen["content_type"] = request.headers["content-type"]
            return httpx.Response(200, json={"ok": True})

        request = RequestDescription(
            method="POST",
            url="https://api.example.com/form",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            body={"name": "Rex"},
        )
        await HttpTransport(client=_client(handler)).send(request)

        assert seen["body"] == b"name=Rex"
        assert seen["content_type"] == "application/x-www-form-urlencoded"

    @pytest.mark.asyncio
    async def test_wraps_non_object_responses(self):
        responses = iter(
            [
                httpx.Response(204),
                httpx.Response(200, text="plain text"),
                httpx.Response(200, json=[1, 2]),
            ]
        )
        transport = HttpTransport(client=_client(lambda request: next(responses)))
        request = RequestDescription(method="GET", url="https://api.example.com/x", headers={})

        assert await transport.send(request) == {"status": "ok"}
        assert await transport.send(request) == {"body": "plain text"}
        assert await transport.send(request) == {"data": [1, 2]}

    @pytest.mark.asyncio
    async def test_http_error_raises_execution_error(self):
        transport = HttpTransport(client=_client(lambda request: httpx.Response(500, text="boom")))
        request = RequestDescription(method="GET", url="https://api.example.com/x", headers={})
        with pytest.raises(ExecutionError):
            await transport.send(request)

    @pytest.mark.asyncio
    async def test_transport_failure_raises_execution_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        request = RequestDescription(method="GET", url="https://api.example.com/x", headers={})
        with pytest.raises(ExecutionError):
            await HttpTransport(client=_client(handler)).send(request)


class TestFetchSpec:
    @pytest.fixture()
    def mock_client(self, monkeypatch):
        def install(handler):
            patched = functools.partial(
                httpx.AsyncClient, transport=httpx.MockTransport(handler)
            )
            monkeypatch.setattr(transport_module.httpx, "AsyncClient", patched)

        return install

    @pytest.mark.asyncio
    async def test_returns_text_regardless_of_content_type(self, mock_client):
        mock_client(lambda request: httpx.Response(200, json={"openapi": "3.0.3"}))
        text = await fetch_spec("https://api.example.com/openapi.json")
        assert json.loads(text) == {"openapi": "3.0.3"}

    @pytest.mark.asyncio
    async def test_non_success_status_raises(self, mock_client):
        mock_client(lambda request: httpx.Response(404))
        with pytest.raises(SpecFetchError):
            await fetch_spec("https://api.example.com/missing.json")
