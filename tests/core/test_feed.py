from datetime import UTC, datetime

import pytest

from inkwell.core.exceptions import InvalidConfigurationValue
from inkwell.core.feed import absolute_url, build_feed, excerpt
from inkwell.core.types import DocumentStatus

GENERATED = datetime(2024, 6, 1, tzinfo=UTC)


def test_excerpt_trims_to_length_and_trailing_space():
    assert excerpt("Hello world, again", 6) == "Hello"
    assert excerpt("short", 100) == "short"
    assert excerpt("anything", 0) == ""


@pytest.mark.parametrize(
    ("permalink", "site_url", "base_path", "expected"),
    [
        ("/a/", "", "/", "/a/"),
        ("/a/", "https://example.com/", "/", "https://example.com/a/"),
        ("/a/", "https://example.com", "/blog", "https://example.com/blog/a/"),
    ],
)
def test_absolute_url(permalink, site_url, base_path, expected):
    assert absolute_url(permalink, site_url=site_url, base_path=base_path) == expected


def test_feed_takes_newest_published_documents(make_resolved):
    docs = [make_resolved(f"p{day}", day=day, body=f"Body {day}") for day in range(1, 6)]
    docs.append(make_resolved("hidden", day=28, status=DocumentStatus.DRAFT))

    feed = build_feed(docs, title="Blog", generated_at=GENERATED, limit=3, site_url="https://example.com")

    assert [entry.identifier for entry in feed.entries] == ["p5", "p4", "p3"]
    assert feed.updated == docs[4].timestamp
    assert feed.entries[0].url == "https://example.com/p5/"
    assert feed.entries[0].summary == "Body 5"


def test_feed_limit_larger_than_input(make_resolved):
    feed = build_feed([make_resolved("only")], title="Blog", generated_at=GENERATED, limit=10)
    assert len(feed.entries) == 1


def test_empty_feed_is_updated_at_generation_time():
    feed = build_feed([], title="Blog", generated_at=GENERATED)
    assert feed.entries == ()
    assert feed.updated == GENERATED


def test_zero_limit_gives_empty_feed(make_resolved):
    assert build_feed([make_resolved("a")], title="Blog", generated_at=GENERATED, limit=0).entries == ()


@pytest.mark.parametrize(("field", "kwargs"), [("limit", {"limit": -1}), ("excerpt_length", {"excerpt_length": -5})])
def test_negative_settings_are_rejected(field, kwargs):
    with pytest.raises(InvalidConfigurationValue) as exc_info:
        build_feed([], title="Blog", generated_at=GENERATED, **kwargs)
    assert exc_info.value.field == field
