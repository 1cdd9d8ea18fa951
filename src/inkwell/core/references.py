"""Cross-reference resolution for `related` tokens.

Tokens name other documents by identifier. Resolution needs the complete
document set (a token may point at a document loaded later), so it is a
single join over everything the loader produced. Every broken token in the
run is collected before failing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from inkwell.core.exceptions import (
    BuildError,
    BuildFailedError,
    DanglingReference,
    ReferenceToDraft,
    SelfReference,
)
from inkwell.core.types import Document, DocumentStatus, ReferenceGraph, ResolvedDocument

logger = logging.getLogger(__name__)

STAGE = "cross-reference"


@dataclass(frozen=True)
class CrossReferenced:
    documents: tuple[ResolvedDocument, ...]
    graph: ReferenceGraph


def resolve_references(
    resolved: Iterable[ResolvedDocument],
    documents: Iterable[Document],
    *,
    prior_errors: Sequence[BuildError] = (),
) -> CrossReferenced:
    """Resolve each published document's `related` tokens.

    Args:
        resolved: Published documents with permalinks.
        documents: Every loaded document, drafts included, so that
            references to drafts can be told apart from dangling ones.
        prior_errors: Errors batched by earlier stages; reported first.

    Returns:
        New documents with ``references`` filled in, plus the edge graph.

    Raises:
        BuildFailedError: If any token is broken or ``prior_errors`` is non-empty.

    """
    resolved = tuple(resolved)
    statuses = {doc.identifier: doc.status for doc in documents}
    for doc in resolved:
        statuses.setdefault(doc.identifier, doc.status)

    errors: list[BuildError] = list(prior_errors)
    linked: list[ResolvedDocument] = []
    edges: list[tuple[str, str]] = []

    for doc in resolved:
        targets: list[str] = []
        seen: set[str] = set()
        for token in doc.related:
            if token in seen:
                continue
            seen.add(token)

            status = statuses.get(token)
            if token == doc.identifier:
                errors.append(SelfReference(doc.identifier, token))
            elif status is None:
                errors.append(DanglingReference(doc.identifier, token))
            elif status == DocumentStatus.DRAFT:
                errors.append(ReferenceToDraft(doc.identifier, token))
            else:
                targets.append(token)

        linked.append(doc.model_copy(update={"references": tuple(targets)}))
        edges.extend((doc.identifier, target) for target in targets)

    if errors:
        logger.debug("Cross-referencing found %d errors", len(errors) - len(prior_errors))
        raise BuildFailedError(STAGE, errors)

    logger.info("Resolved %d references across %d documents", len(edges), len(linked))
    return CrossReferenced(documents=tuple(linked), graph=ReferenceGraph(edges=tuple(edges)))
