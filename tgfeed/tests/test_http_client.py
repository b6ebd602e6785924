import httpx
import pydantic
import pytest

from tgfeed.config import HTTPClientConfig
from tgfeed.exceptions import FetchError
from tgfeed.fetcher.http_client import AsyncHTTPClient


def _client(handler) -> AsyncHTTPClient:
    return AsyncHTTPClient(HTTPClientConfig(), transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_get_document_parses_page():
    def handler(request):
        assert request.headers["User-Agent"] == HTTPClientConfig().user_agent
        return httpx.Response(200, text="<html><body><h1>Hi</h1></body></html>")

    async with _client(handler) as client:
        document = await client.get_document("https://t.me/s/example")

    assert document.h1.get_text() == "Hi"


@pytest.mark.asyncio
async def test_error_status_raises_fetch_error():
    async with _client(lambda request: httpx.Response(404)) as client:
        with pytest.raises(FetchError) as exc_info:
            await client.get_text("https://t.me/s/missing")

    assert exc_info.value.url == "https://t.me/s/missing"
    assert "404" in str(exc_info.value)


@pytest.mark.asyncio
async def test_transport_error_raises_fetch_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(FetchError):
            await client.get_text("https://t.me/s/example")


@pytest.mark.asyncio
async def test_measure_counts_body_bytes():
    async with _client(lambda request: httpx.Response(200, content=b"x" * 150_000)) as client:
        assert await client.measure("https://cdn.example/one.jpg") == 150_000


@pytest.mark.asyncio
async def test_measure_propagates_status_errors():
    async with _client(lambda request: httpx.Response(500)) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await client.measure("https://cdn.example/one.jpg")


def test_config_is_immutable():
    config = HTTPClientConfig()
    with pytest.raises(pydantic.ValidationError):
        config.timeout_seconds = 1
