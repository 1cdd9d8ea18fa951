"""Listing pagination in the style of jekyll-paginate.

The first page lives at the site base path; page ``n`` (1-based, n >= 2)
lives at ``paginate_path`` with ``:num`` replaced by ``n``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from inkwell.core.exceptions import InvalidPageSize
from inkwell.core.permalinks import normalize_permalink
from inkwell.core.types import Page, ResolvedDocument

logger = logging.getLogger(__name__)


def page_url(index: int, *, base_path: str = "/", paginate_path: str = "/page:num/") -> str:
    """Return the URL of the page at 0-based ``index``.

    >>> page_url(0)
    '/'
    >>> page_url(2, base_path="/blog")
    '/blog/page3/'
    """
    if index == 0:
        return normalize_permalink(f"{base_path}/")
    return normalize_permalink(f"{base_path}/{paginate_path.replace(':num', str(index + 1))}")


def paginate(
    documents: Iterable[ResolvedDocument],
    per_page: int,
    *,
    base_path: str = "/",
    paginate_path: str = "/page:num/",
) -> tuple[Page, ...]:
    """Split an ordered listing into consecutive pages of ``per_page`` items.

    The input order is kept as-is; callers pass an already ordered listing.
    An empty listing still yields a single empty first page, so the index
    page always exists.

    Raises:
        InvalidPageSize: If ``per_page`` is below one.

    """
    if per_page < 1:
        raise InvalidPageSize(per_page)

    items = tuple(doc for doc in documents if doc.is_published)
    total_pages = max(1, -(-len(items) // per_page))

    def url(index: int | None) -> str | None:
        if index is None:
            return None
        return page_url(index, base_path=base_path, paginate_path=paginate_path)

    pages = []
    for index in range(total_pages):
        offset = index * per_page
        previous = index - 1 if index > 0 else None
        following = index + 1 if index + 1 < total_pages else None
        pages.append(
            Page(
                index=index,
                offset=offset,
                size=per_page,
                total_pages=total_pages,
                items=items[offset : offset + per_page],
                url=url(index),
                previous=previous,
                next=following,
                previous_url=url(previous),
                next_url=url(following),
            )
        )

    logger.info("Paginated %d documents into %d pages", len(items), total_pages)
    return tuple(pages)
