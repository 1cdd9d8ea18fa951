"""Syndication feed assembly.

Mirrors jekyll-feed: the most recent published documents, newest first,
each projected to a small entry with a trimmed summary.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from inkwell.core.exceptions import InvalidConfigurationValue
from inkwell.core.permalinks import normalize_permalink
from inkwell.core.types import Feed, FeedEntry, ResolvedDocument, newest_first

logger = logging.getLogger(__name__)

DEFAULT_FEED_LIMIT = 10
DEFAULT_EXCERPT_LENGTH = 280


def excerpt(body: str, length: int = DEFAULT_EXCERPT_LENGTH) -> str:
    """Return the first ``length`` characters of ``body`` without trailing whitespace."""
    return body[:length].rstrip()


def absolute_url(permalink: str, *, site_url: str = "", base_path: str = "/") -> str:
    """Join the site URL, base path and permalink the way Jekyll's ``absolute_url`` does."""
    path = normalize_permalink(f"{base_path}/{permalink}")
    return f"{site_url.rstrip('/')}{path}" if site_url else path


def to_feed_entry(
    doc: ResolvedDocument,
    *,
    excerpt_length: int = DEFAULT_EXCERPT_LENGTH,
    site_url: str = "",
    base_path: str = "/",
) -> FeedEntry:
    return FeedEntry(
        identifier=doc.identifier,
        title=doc.title,
        permalink=doc.permalink,
        url=absolute_url(doc.permalink, site_url=site_url, base_path=base_path),
        timestamp=doc.timestamp,
        summary=excerpt(doc.body, excerpt_length),
        tags=doc.tags,
    )


def build_feed(
    documents: Iterable[ResolvedDocument],
    *,
    title: str,
    generated_at: datetime,
    limit: int = DEFAULT_FEED_LIMIT,
    excerpt_length: int = DEFAULT_EXCERPT_LENGTH,
    site_url: str = "",
    base_path: str = "/",
    author: str | None = None,
) -> Feed:
    """Build the feed from the newest ``limit`` published documents.

    Args:
        documents: Resolved documents, in any order.
        title: Feed title (the site title).
        generated_at: Generation timestamp, passed in so the feed is reproducible.
        limit: Maximum number of entries.
        excerpt_length: Characters of body kept in each summary.
        site_url: Absolute site URL used to build entry URLs.
        base_path: Path prefix the site is served under.
        author: Feed-level author name.

    Raises:
        InvalidConfigurationValue: If ``limit`` or ``excerpt_length`` is negative.

    """
    if limit < 0:
        raise InvalidConfigurationValue("limit", limit, "must not be negative")
    if excerpt_length < 0:
        raise InvalidConfigurationValue("excerpt_length", excerpt_length, "must not be negative")

    recent = newest_first(doc for doc in documents if doc.is_published)[:limit]
    entries = tuple(
        to_feed_entry(doc, excerpt_length=excerpt_length, site_url=site_url, base_path=base_path)
        for doc in recent
    )

    logger.info("Assembled feed with %d entries", len(entries))
    return Feed(
        title=title,
        generated_at=generated_at,
        updated=entries[0].timestamp if entries else generated_at,
        site_url=site_url,
        author=author,
        entries=entries,
    )
