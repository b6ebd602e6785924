from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from tgfeed.config import Settings
from tgfeed.exceptions import DocumentError, FetchError, FormatError
from tgfeed.pipeline import FeedResponse
from tgfeed.web.app import create_app


@pytest.fixture
def service():
    service = MagicMock()
    service.serve = AsyncMock(return_value=FeedResponse(b"<rss/>", "MISS", "rss", 60))
    service.drain = AsyncMock()
    return service


@pytest.fixture
def client(service):
    app = create_app(Settings(), service=service)
    with TestClient(app) as client:
        yield client


def test_feed_response(client, service):
    response = client.get("/telegram/channel/example")

    assert response.status_code == 200
    assert response.content == b"<rss/>"
    assert response.headers["content-type"] == "application/rss+xml; charset=utf-8"
    assert response.headers["cache-control"] == "public, max-age=3600"
    assert response.headers["x-cache-status"] == "MISS"

    params = service.serve.await_args.args[0]
    assert params.username == "example"
    assert params.format == "rss"
    assert params.cache_ttl_minutes == 60


def test_query_parameters_reach_the_service(client, service):
    service.serve.return_value = FeedResponse(b"<feed/>", "HIT", "atom", 5)

    response = client.get(
        "/telegram/channel/example",
        params={"format": "atom", "exclude": "ads|promo", "exclude_case_sensitive": "1", "cache_ttl": "5"},
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/atom+xml; charset=utf-8"
    assert response.headers["x-cache-status"] == "HIT"
    params = service.serve.await_args.args[0]
    assert params.format == "atom"
    assert params.exclude_words == ["ads", "promo"]
    assert params.exclude_case_sensitive is True
    assert params.cache_ttl_minutes == 5


@pytest.mark.parametrize(
    "query,message",
    [
        ({"format": "json"}, "format must be rss or atom"),
        ({"cache_ttl": "soon"}, "cache_ttl must be a valid integer"),
        ({"cache_ttl": "-1"}, "cache_ttl must be non-negative"),
    ],
)
def test_invalid_parameters_are_400(client, service, query, message):
    response = client.get("/telegram/channel/example", params=query)

    assert response.status_code == 400
    assert response.json() == {"error": message}
    service.serve.assert_not_called()


def test_missing_username_is_404(client):
    assert client.get("/telegram/channel/").status_code == 404


@pytest.mark.parametrize(
    "error,status_code",
    [
        (FetchError("could not fetch", url="https://t.me/s/example"), 502),
        (DocumentError("channel example not found"), 502),
        (FormatError("unsupported feed format"), 500),
    ],
)
def test_pipeline_errors_map_to_status(client, service, error, status_code):
    service.serve.side_effect = error

    response = client.get("/telegram/channel/example")

    assert response.status_code == status_code
    assert response.json() == {"error": str(error)}


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_shutdown_drains_cache_writes(service):
    with TestClient(create_app(Settings(), service=service)):
        pass

    service.drain.assert_awaited_once()
