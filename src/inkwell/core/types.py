"""Core data types for Inkwell.

Every model is frozen: a stage never mutates the artifact it received, it
returns a new one. Cross-document links are kept as identifiers and resolved
on demand through :class:`SiteModel`, so reference cycles never become object
cycles.
"""

from collections.abc import Iterable, Iterator
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_EPOCH = datetime.min.replace(tzinfo=UTC)


def format_iso_utc(dt: datetime) -> str:
    """Provides a consistent ISO 8601 format with UTC timezone."""
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


class DocumentStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class RawSource(BaseModel):
    """One authored content unit before parsing: a metadata block and a body.

    ``read_error`` is set when the file could not be decoded; the loader
    reports it as a malformed document.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str
    metadata: str = ""
    body: str = ""
    default_status: DocumentStatus = DocumentStatus.PUBLISHED
    origin: str | None = None
    read_error: str | None = None


class Document(BaseModel):
    model_config = ConfigDict(frozen=True)

    identifier: str
    status: DocumentStatus
    title: str
    tags: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    timestamp: datetime | None = None
    body: str = ""
    related: tuple[str, ...] = ()
    permalink_override: str | None = None
    slug_override: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_published(self) -> bool:
        return self.status == DocumentStatus.PUBLISHED

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @model_validator(mode="after")
    def _published_needs_timestamp(self) -> "Document":
        if self.is_published and self.timestamp is None:
            msg = f"Published document '{self.identifier}' must have a timestamp."
            raise ValueError(msg)
        return self


class ResolvedDocument(Document):
    """A published document with its permalink and validated references.

    ``references`` holds target identifiers in declaration order; use
    :meth:`SiteModel.references_of` to turn them into documents.
    """

    permalink: str
    references: tuple[str, ...] = ()

    @classmethod
    def from_document(cls, doc: Document, permalink: str) -> "ResolvedDocument":
        return cls.model_validate({**dict(doc), "permalink": permalink})


_D = TypeVar("_D", bound=Document)


def newest_first(documents: Iterable[_D]) -> tuple[_D, ...]:
    """Order documents by timestamp descending, ties broken by identifier ascending.

    The result depends only on the documents themselves, never on the order
    in which they were supplied.
    """
    by_identifier = sorted(documents, key=lambda d: d.identifier)
    # sorted() is stable with reverse=True, so identifier order survives ties.
    return tuple(sorted(by_identifier, key=lambda d: d.timestamp or _EPOCH, reverse=True))


class ReferenceGraph(BaseModel):
    """Directed `related` edges stored as ``(source, target)`` identifier pairs."""

    model_config = ConfigDict(frozen=True)

    edges: tuple[tuple[str, str], ...] = ()

    def targets_of(self, identifier: str) -> tuple[str, ...]:
        return tuple(target for source, target in self.edges if source == identifier)

    def __len__(self) -> int:
        return len(self.edges)


class TagIndex(BaseModel):
    """Mapping of taxonomy term to its documents, newest first."""

    model_config = ConfigDict(frozen=True)

    entries: dict[str, tuple[ResolvedDocument, ...]] = Field(default_factory=dict)

    def __getitem__(self, term: str) -> tuple[ResolvedDocument, ...]:
        return self.entries[term]

    def __contains__(self, term: object) -> bool:
        return term in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def terms(self) -> tuple[str, ...]:
        return tuple(self.entries)

    def items(self) -> Iterator[tuple[str, tuple[ResolvedDocument, ...]]]:
        return iter(self.entries.items())

    def identifiers(self) -> dict[str, list[str]]:
        """Return the index as plain identifier lists, for serialisation."""
        return {term: [doc.identifier for doc in docs] for term, docs in self.entries.items()}


class Page(BaseModel):
    """A bounded window over an ordered listing, with neighbour links."""

    model_config = ConfigDict(frozen=True)

    index: int
    offset: int
    size: int
    total_pages: int
    items: tuple[ResolvedDocument, ...] = ()
    url: str
    previous: int | None = None
    next: int | None = None
    previous_url: str | None = None
    next_url: str | None = None

    @property
    def number(self) -> int:
        """1-based page number, as shown to readers."""
        return self.index + 1

    @property
    def has_previous(self) -> bool:
        return self.previous is not None

    @property
    def has_next(self) -> bool:
        return self.next is not None


class FeedEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    identifier: str
    title: str
    permalink: str
    url: str
    timestamp: datetime
    summary: str = ""
    tags: tuple[str, ...] = ()


class Feed(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    generated_at: datetime
    updated: datetime
    site_url: str = ""
    author: str | None = None
    entries: tuple[FeedEntry, ...] = ()


class SiteModel(BaseModel):
    """The complete, immutable result of one successful build run."""

    model_config = ConfigDict(frozen=True)

    documents: tuple[ResolvedDocument, ...] = ()
    graph: ReferenceGraph = Field(default_factory=ReferenceGraph)
    tags: TagIndex = Field(default_factory=TagIndex)
    categories: TagIndex = Field(default_factory=TagIndex)
    pages: tuple[Page, ...] = ()
    feed: Feed

    def get(self, identifier: str) -> ResolvedDocument | None:
        for doc in self.documents:
            if doc.identifier == identifier:
                return doc
        return None

    def references_of(self, doc: ResolvedDocument) -> tuple[ResolvedDocument, ...]:
        """Resolve a document's reference identifiers into documents."""
        by_identifier = {d.identifier: d for d in self.documents}
        return tuple(by_identifier[target] for target in doc.references)
