"""Permalink resolution for published documents.

Templates follow Jekyll's permalink placeholders (``:year``, ``:title`` ...)
and its named styles. A ``permalink`` field in a document's metadata always
wins over the template.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial

from inkwell.core.exceptions import BuildFailedError, PermalinkCollision
from inkwell.core.types import Document, ResolvedDocument
from inkwell.core.utils import slugify

logger = logging.getLogger(__name__)

STAGE = "resolve"

PERMALINK_STYLES: dict[str, str] = {
    "date": "/:categories/:year/:month/:day/:title.html",
    "pretty": "/:categories/:year/:month/:day/:title/",
    "ordinal": "/:categories/:year/:y_day/:title.html",
    "none": "/:categories/:title.html",
}

_PLACEHOLDER = re.compile(
    r":(short_year|y_day|year|i_month|month|i_day|day|hour|minute|second|title|slug|categories)"
)
_REPEATED_SLASHES = re.compile(r"/{2,}")


@dataclass(frozen=True)
class PermalinkAssignment:
    """Documents with permalinks, plus any collisions found among them."""

    documents: tuple[ResolvedDocument, ...]
    collisions: tuple[PermalinkCollision, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.collisions

    def raise_for_collisions(self) -> None:
        if self.collisions:
            raise BuildFailedError(STAGE, self.collisions)


def expand_style(template: str) -> str:
    """Return the template for a named style, or ``template`` itself."""
    return PERMALINK_STYLES.get(template, template)


def normalize_permalink(path: str) -> str:
    """Collapse repeated slashes and force a leading slash."""
    return _REPEATED_SLASHES.sub("/", "/" + path.strip())


def render_permalink(doc: Document, template: str = "date") -> str:
    """Compute the permalink of one published document.

    >>> from datetime import datetime, UTC
    >>> doc = Document(identifier="hello", status="published", title="Hello World",
    ...                timestamp=datetime(2021, 3, 4, tzinfo=UTC))
    >>> render_permalink(doc, "pretty")
    '/2021/03/04/hello-world/'
    """
    if doc.permalink_override:
        return normalize_permalink(doc.permalink_override)

    if doc.timestamp is None:
        msg = f"Document '{doc.identifier}' has no timestamp to build a permalink from."
        raise ValueError(msg)

    ts = doc.timestamp
    slug = slugify(doc.slug_override or doc.title)
    values = {
        "year": f"{ts.year:04d}",
        "short_year": f"{ts.year % 100:02d}",
        "month": f"{ts.month:02d}",
        "i_month": str(ts.month),
        "day": f"{ts.day:02d}",
        "i_day": str(ts.day),
        "y_day": f"{ts.timetuple().tm_yday:03d}",
        "hour": f"{ts.hour:02d}",
        "minute": f"{ts.minute:02d}",
        "second": f"{ts.second:02d}",
        "title": slug,
        "slug": slug,
        "categories": "/".join(slugify(category) for category in doc.categories),
    }
    path = _PLACEHOLDER.sub(lambda match: values[match.group(1)], expand_style(template))
    return normalize_permalink(path)


def assign_permalinks(
    documents: Iterable[Document],
    *,
    template: str = "date",
    max_workers: int | None = None,
) -> PermalinkAssignment:
    """Give every published document a permalink and detect collisions.

    Drafts are skipped. Documents are processed in identifier order so the
    assignment does not depend on the order they were loaded in.

    Args:
        documents: Loaded documents, drafts included.
        template: Named style (``date``, ``pretty``, ``ordinal``, ``none``) or a template.
        max_workers: Thread pool size; ``None`` uses the executor default.

    Returns:
        The resolved documents (sorted by identifier) and every collision.

    """
    published = sorted((doc for doc in documents if doc.is_published), key=lambda doc: doc.identifier)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        permalinks = list(executor.map(partial(render_permalink, template=template), published))

    resolved = tuple(
        ResolvedDocument.from_document(doc, permalink) for doc, permalink in zip(published, permalinks, strict=True)
    )

    claims: dict[str, list[str]] = defaultdict(list)
    for doc in resolved:
        claims[doc.permalink].append(doc.identifier)

    collisions = tuple(
        PermalinkCollision(permalink, identifiers)
        for permalink, identifiers in sorted(claims.items())
        if len(identifiers) > 1
    )
    if collisions:
        logger.debug("Found %d permalink collisions", len(collisions))

    logger.info("Assigned %d permalinks", len(resolved))
    return PermalinkAssignment(documents=resolved, collisions=collisions)
