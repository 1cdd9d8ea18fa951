"""Reading content sources from the site directory.

This is the pipeline's I/O boundary: everything past it works on
already-materialised :class:`~inkwell.core.types.RawSource` values.
"""

from __future__ import annotations

import logging
from pathlib import Path

from frontmatter.default_handlers import YAMLHandler

from inkwell.core.config import PathsSettings
from inkwell.core.types import DocumentStatus, RawSource

logger = logging.getLogger(__name__)

CONTENT_SUFFIXES = frozenset({".md", ".markdown", ".html"})

_yaml_handler = YAMLHandler()


def split_front_matter(text: str) -> tuple[str, str]:
    """Split ``---`` fenced YAML front matter from the body.

    Returns:
        Tuple of (metadata block text, body). Text without front matter, or
        with an unterminated fence, yields an empty metadata block and the
        original text as body.

    """
    if not _yaml_handler.detect(text):
        return "", text
    try:
        metadata, body = _yaml_handler.split(text)
    except ValueError:
        logger.warning("Unterminated front matter block; treating the whole file as body")
        return "", text
    return metadata, body.lstrip("\n")


def identifier_for(path: Path, collection_dir: Path) -> str:
    """Identifier of a file: its POSIX path within the collection, without extension."""
    return path.relative_to(collection_dir).with_suffix("").as_posix()


def read_source(path: Path, collection_dir: Path, default_status: DocumentStatus) -> RawSource:
    """Read one content file into a RawSource.

    A file that is not valid UTF-8 yields a source carrying ``read_error``
    instead of text, so it is reported with the other load errors.

    Raises:
        OSError: If the file cannot be read.

    """
    identifier = identifier_for(path, collection_dir)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        logger.warning("Cannot decode %s as UTF-8", path)
        return RawSource(
            identifier=identifier,
            default_status=default_status,
            origin=str(path),
            read_error=f"not valid UTF-8 ({exc.reason} at byte {exc.start})",
        )

    metadata, body = split_front_matter(text)
    return RawSource(
        identifier=identifier,
        metadata=metadata,
        body=body,
        default_status=default_status,
        origin=str(path),
    )


def iter_content_files(directory: Path) -> list[Path]:
    """Content files under ``directory`` in sorted order, skipping hidden entries."""
    if not directory.is_dir():
        return []
    return sorted(
        path
        for path in directory.rglob("*")
        if path.is_file()
        and path.suffix.lower() in CONTENT_SUFFIXES
        and not any(part.startswith(".") for part in path.relative_to(directory).parts)
    )


def discover_sources(paths: PathsSettings, *, include_drafts: bool = True) -> tuple[RawSource, ...]:
    """Read every post and draft under the configured directories.

    Posts default to ``published`` and drafts to ``draft``; a ``status``
    field in a file's front matter overrides the default.
    """
    collections = [(paths.abs_posts_dir, DocumentStatus.PUBLISHED)]
    if include_drafts:
        collections.append((paths.abs_drafts_dir, DocumentStatus.DRAFT))

    sources: list[RawSource] = []
    for directory, default_status in collections:
        files = iter_content_files(directory)
        logger.debug("Found %d content files in %s", len(files), directory)
        sources.extend(read_source(path, directory, default_status) for path in files)

    logger.info("Discovered %d sources", len(sources))
    return tuple(sources)
