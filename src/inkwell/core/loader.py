"""Document loader.

Turns raw sources (metadata block text plus body text) into validated
:class:`~inkwell.core.types.Document` values. Each source is validated on its
own; the only cross-document check is for duplicate identifiers.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, date, datetime
from typing import Any

import yaml
from pydantic import ValidationError

from inkwell.core.exceptions import BuildError, BuildFailedError, DuplicateIdentifier, MalformedDocument
from inkwell.core.types import Document, DocumentStatus, RawSource
from inkwell.core.utils import split_dated_name

logger = logging.getLogger(__name__)

STAGE = "load"

KNOWN_FIELDS = frozenset(
    {
        "status",
        "published",
        "title",
        "timestamp",
        "date",
        "tags",
        "categories",
        "category",
        "related",
        "permalink",
        "slug",
    }
)

# "2020-01-31 10:00:00 +0100" -> "2020-01-31 10:00:00+0100"
_SPACED_OFFSET = re.compile(r"^(?P<stamp>.*\d)\s+(?P<offset>[+-]\d{2}:?\d{2}|Z)$")


def parse_metadata_block(text: str, identifier: str = "<unknown>") -> dict[str, Any]:
    """Parse a YAML metadata block into a mapping.

    Args:
        text: The metadata block, without its ``---`` fences.
        identifier: Source identifier, used in error messages.

    Returns:
        The declared fields. Empty text yields an empty mapping.

    Raises:
        MalformedDocument: If the text is not valid YAML, holds an impossible
            date, or is not a mapping.

    """
    if not text.strip():
        return {}

    try:
        data = yaml.safe_load(text)
    except (yaml.YAMLError, ValueError) as exc:
        # PyYAML raises a bare ValueError for impossible dates like 2024-02-30.
        raise MalformedDocument(identifier, [f"invalid metadata block: {exc}"]) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedDocument(identifier, [f"metadata block must be a mapping, got {type(data).__name__}"])
    return {str(key): value for key, value in data.items()}


def parse_source(source: RawSource) -> Document:
    """Validate one raw source and build its Document.

    Every problem found in the source is collected into a single
    :class:`MalformedDocument` so the author sees them all at once.
    """
    identifier = source.identifier
    if source.read_error is not None:
        raise MalformedDocument(identifier, [source.read_error])

    metadata = parse_metadata_block(source.metadata, identifier)
    problems: list[str] = []

    status = _status(metadata, source.default_status, problems)
    title = _optional_text(metadata.get("title"))
    reported = len(problems)
    timestamp = _timestamp(metadata, identifier, problems)
    timestamp_invalid = len(problems) > reported
    tags = _terms(metadata.get("tags"), "tags", problems)
    categories = _terms(metadata.get("categories"), "categories", problems)
    if "category" in metadata:
        categories = tuple(dict.fromkeys(categories + _terms(metadata["category"], "category", problems)))
    related = _related(metadata.get("related"), problems)
    permalink_override = _override(metadata, "permalink", problems)
    slug_override = _override(metadata, "slug", problems)

    if status == DocumentStatus.PUBLISHED:
        if title is None:
            problems.append("missing required field 'title'")
        if timestamp is None and not timestamp_invalid:
            problems.append("missing required field 'timestamp'")

    if problems:
        raise MalformedDocument(identifier, problems)

    extra = {key: value for key, value in metadata.items() if key not in KNOWN_FIELDS}

    try:
        return Document(
            identifier=identifier,
            status=status,
            title=title or identifier,
            tags=tags,
            categories=categories,
            timestamp=timestamp,
            body=source.body,
            related=related,
            permalink_override=permalink_override,
            slug_override=slug_override,
            extra=extra,
        )
    except ValidationError as exc:
        raise MalformedDocument(identifier, [err["msg"] for err in exc.errors()]) from exc


def load_documents(sources: Iterable[RawSource], *, max_workers: int | None = None) -> tuple[Document, ...]:
    """Parse every source in parallel and validate the set.

    Args:
        sources: Raw content sources, already read from disk.
        max_workers: Thread pool size; ``None`` uses the executor default.

    Returns:
        Documents in the same order as ``sources``.

    Raises:
        BuildFailedError: With every MalformedDocument and DuplicateIdentifier found.

    """
    sources = tuple(sources)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        outcomes = list(executor.map(_parse_or_error, sources))

    errors: list[BuildError] = [outcome for outcome in outcomes if isinstance(outcome, MalformedDocument)]
    counts = Counter(source.identifier for source in sources)
    errors.extend(
        DuplicateIdentifier(identifier, count) for identifier, count in sorted(counts.items()) if count > 1
    )

    if errors:
        logger.debug("Loader rejected %d of %d sources", len(errors), len(sources))
        raise BuildFailedError(STAGE, errors)

    documents = tuple(outcome for outcome in outcomes if isinstance(outcome, Document))
    logger.info(
        "Loaded %d documents (%d published)",
        len(documents),
        sum(1 for doc in documents if doc.is_published),
    )
    return documents


def _parse_or_error(source: RawSource) -> Document | MalformedDocument:
    try:
        return parse_source(source)
    except MalformedDocument as exc:
        return exc


def _status(metadata: dict[str, Any], default: DocumentStatus, problems: list[str]) -> DocumentStatus:
    raw = metadata.get("status")
    if raw is None:
        # Jekyll's `published: false` keeps a post out of the site.
        if metadata.get("published") is False:
            return DocumentStatus.DRAFT
        return default
    try:
        return DocumentStatus(str(raw).strip().lower())
    except ValueError:
        problems.append(f"unknown status {raw!r} (expected 'draft' or 'published')")
        return default


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _timestamp(metadata: dict[str, Any], identifier: str, problems: list[str]) -> datetime | None:
    raw = metadata.get("timestamp", metadata.get("date"))
    if raw is None:
        dated = split_dated_name(identifier)
        if dated is None:
            return None
        year, month, day, _ = dated
        raw = f"{year}-{month}-{day}"

    try:
        return _coerce_timestamp(raw)
    except ValueError:
        problems.append(f"invalid timestamp {raw!r}")
        return None


def _coerce_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        stamp = value
    elif isinstance(value, date):
        stamp = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if match := _SPACED_OFFSET.match(text):
            text = f"{match['stamp']}{match['offset']}"
        stamp = datetime.fromisoformat(text)
    else:
        msg = f"unsupported timestamp type {type(value).__name__}"
        raise ValueError(msg)

    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=UTC)
    return stamp


def _terms(value: Any, field: str, problems: list[str]) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        items: Iterable[Any] = value.split()
    elif isinstance(value, list | tuple):
        items = value
    else:
        problems.append(f"'{field}' must be a list or a space-separated string")
        return ()

    cleaned = (str(item).strip() for item in items if item is not None)
    return tuple(dict.fromkeys(term for term in cleaned if term))


def _related(value: Any, problems: list[str]) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list | tuple):
        problems.append("'related' must be a list of identifiers")
        return ()
    return tuple(str(token).strip() for token in value if token is not None and str(token).strip())


def _override(metadata: dict[str, Any], field: str, problems: list[str]) -> str | None:
    value = metadata.get(field)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        problems.append(f"'{field}' must be a non-empty string")
        return None
    return value.strip()
