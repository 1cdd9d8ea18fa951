"""Authoring helpers modelled on jekyll-compose: create drafts, publish them."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import frontmatter

from inkwell.core.config import PathsSettings
from inkwell.core.exceptions import ComposeError
from inkwell.core.types import DocumentStatus
from inkwell.core.utils import slugify, split_dated_name
from inkwell.infra.reader import CONTENT_SUFFIXES

logger = logging.getLogger(__name__)


def create_draft(paths: PathsSettings, title: str) -> Path:
    """Create ``<drafts_dir>/<slug>.md`` with draft front matter.

    Raises:
        ComposeError: If the title is blank or the draft already exists.

    """
    if not title.strip():
        msg = "A draft needs a non-empty title."
        raise ComposeError(msg)

    target = paths.abs_drafts_dir / f"{slugify(title)}.md"
    if target.exists():
        msg = f"Draft already exists: {target}"
        raise ComposeError(msg)

    post = frontmatter.Post("", title=title.strip(), status=DocumentStatus.DRAFT.value, tags=[], related=[])
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(frontmatter.dumps(post, sort_keys=False) + "\n", encoding="utf-8")
    logger.info("Created draft %s", target)
    return target


def find_draft(paths: PathsSettings, identifier: str) -> Path:
    """Locate the file of a draft by identifier.

    Raises:
        ComposeError: If no content file matches.

    """
    for suffix in sorted(CONTENT_SUFFIXES):
        candidate = paths.abs_drafts_dir / f"{identifier}{suffix}"
        if candidate.is_file():
            return candidate
    msg = f"No draft named '{identifier}' in {paths.abs_drafts_dir}"
    raise ComposeError(msg)


def publish_draft(paths: PathsSettings, identifier: str, *, when: datetime) -> Path:
    """Move a draft into the posts directory as a dated, published post.

    The post file is named ``YYYY-MM-DD-<name>`` after ``when``; its front
    matter gets ``status: published`` and ``timestamp``.

    Raises:
        ComposeError: If the draft is missing or the post already exists.

    """
    source = find_draft(paths, identifier)
    post = frontmatter.load(source)
    post["status"] = DocumentStatus.PUBLISHED.value
    post["timestamp"] = when

    name = source.stem
    dated = split_dated_name(name)
    if dated is not None:
        name = dated[3]

    target = paths.abs_posts_dir / f"{when:%Y-%m-%d}-{name}{source.suffix}"
    if target.exists():
        msg = f"Post already exists: {target}"
        raise ComposeError(msg)

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(frontmatter.dumps(post, sort_keys=False) + "\n", encoding="utf-8")
    source.unlink()
    logger.info("Published %s as %s", source, target)
    return target
