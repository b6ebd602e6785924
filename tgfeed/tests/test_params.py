import pytest

from tgfeed import DEFAULT_FEED_FORMAT
from tgfeed.exceptions import ValidationError
from tgfeed.models.params import FeedFormat, FeedParams


def test_defaults():
    params = FeedParams.from_query("example")

    assert params.username == "example"
    assert params.format == "rss"
    assert params.exclude_words == []
    assert params.exclude_case_sensitive is False
    assert params.cache_ttl_minutes == 60
    assert params.caching_enabled
    assert params.format == FeedParams(username="example").format == DEFAULT_FEED_FORMAT


def test_default_ttl_comes_from_settings():
    assert FeedParams.from_query("example", default_cache_ttl=15).cache_ttl_minutes == 15


def test_full_query():
    params = FeedParams.from_query(
        "example",
        format="atom",
        exclude="ads| sponsored ||promo",
        exclude_case_sensitive="TRUE",
        cache_ttl="0",
    )

    assert params.format == "atom"
    assert params.exclude_words == ["ads", "sponsored", "promo"]
    assert params.exclude_case_sensitive is True
    assert params.cache_ttl_minutes == 0
    assert not params.caching_enabled


@pytest.mark.parametrize("value,expected", [("1", True), ("true", True), ("0", False), ("yes", False)])
def test_exclude_case_sensitive_flag(value, expected):
    assert FeedParams.from_query("example", exclude_case_sensitive=value).exclude_case_sensitive is expected


@pytest.mark.parametrize(
    "kwargs,message",
    [
        ({"username": ""}, "username is required"),
        ({"username": "bad/name"}, "username may only contain"),
        ({"username": "example", "format": "json"}, "format must be rss or atom"),
        ({"username": "example", "cache_ttl": "soon"}, "cache_ttl must be a valid integer"),
        ({"username": "example", "cache_ttl": "-5"}, "cache_ttl must be non-negative"),
    ],
)
def test_invalid_values(kwargs, message):
    with pytest.raises(ValidationError, match=message):
        FeedParams.from_query(**kwargs)


def test_content_types():
    assert FeedFormat.RSS.content_type == "application/rss+xml"
    assert FeedFormat.ATOM.content_type == "application/atom+xml"
