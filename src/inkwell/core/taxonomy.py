"""Tag and category indexes."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Iterable

from inkwell.core.types import ResolvedDocument, TagIndex, newest_first

logger = logging.getLogger(__name__)


def build_index(
    documents: Iterable[ResolvedDocument],
    terms_of: Callable[[ResolvedDocument], Iterable[str]],
) -> TagIndex:
    """Group published documents by the terms ``terms_of`` returns.

    Each term's documents are ordered newest first (identifier breaks ties),
    regardless of insertion order. Terms without documents never appear.
    """
    buckets: dict[str, list[ResolvedDocument]] = defaultdict(list)
    for doc in documents:
        if not doc.is_published:
            continue
        for term in terms_of(doc):
            buckets[term].append(doc)

    return TagIndex(entries={term: newest_first(buckets[term]) for term in sorted(buckets)})


def build_tag_index(documents: Iterable[ResolvedDocument]) -> TagIndex:
    index = build_index(documents, lambda doc: doc.tags)
    logger.info("Indexed %d tags", len(index))
    return index


def build_category_index(documents: Iterable[ResolvedDocument]) -> TagIndex:
    index = build_index(documents, lambda doc: doc.categories)
    logger.info("Indexed %d categories", len(index))
    return index
