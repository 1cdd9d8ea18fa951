"""Shared fixtures for the Inkwell test suite."""

from __future__ import annotations

import os
from datetime import UTC, datetime
from pathlib import Path

import pytest
import yaml

from inkwell.core.config import InkwellConfig, PathsSettings
from inkwell.core.context import PipelineContext
from inkwell.core.types import DocumentStatus, RawSource, ResolvedDocument

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _clean_inkwell_env(monkeypatch):
    """Keep INKWELL_* variables from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("INKWELL_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def make_source():
    """Build a RawSource from keyword metadata."""

    def _make(
        identifier: str,
        *,
        body: str = "",
        default_status: DocumentStatus = DocumentStatus.PUBLISHED,
        **fields,
    ) -> RawSource:
        metadata = yaml.safe_dump(fields, sort_keys=False) if fields else ""
        return RawSource(identifier=identifier, metadata=metadata, body=body, default_status=default_status)

    return _make


@pytest.fixture
def make_post(make_source):
    """A published source with a title and a timestamp on 2024-01-<day>."""

    def _make(identifier: str, day: int = 1, **fields) -> RawSource:
        fields.setdefault("title", identifier.replace("-", " ").title())
        fields.setdefault("timestamp", f"2024-01-{day:02d}T10:00:00+00:00")
        return make_source(identifier, **fields)

    return _make


@pytest.fixture
def make_resolved():
    """Build a ResolvedDocument directly, skipping the loader."""

    def _make(identifier: str, day: int = 1, **fields) -> ResolvedDocument:
        fields.setdefault("status", DocumentStatus.PUBLISHED)
        fields.setdefault("title", identifier)
        fields.setdefault("timestamp", datetime(2024, 1, day, 10, 0, tzinfo=UTC))
        fields.setdefault("permalink", f"/{identifier}/")
        return ResolvedDocument(identifier=identifier, **fields)

    return _make


@pytest.fixture
def config(tmp_path: Path) -> InkwellConfig:
    return InkwellConfig(paths=PathsSettings(site_root=tmp_path))


@pytest.fixture
def context(config: InkwellConfig) -> PipelineContext:
    return PipelineContext(config=config, run_id="test-run", started_at=FIXED_NOW)


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """A site directory with empty posts and drafts collections."""
    (tmp_path / "_posts").mkdir()
    (tmp_path / "_drafts").mkdir()
    return tmp_path


@pytest.fixture
def write_post():
    """Write a markdown file with YAML front matter."""

    def _write(directory: Path, name: str, body: str = "", **fields) -> Path:
        path = directory / f"{name}.md"
        path.parent.mkdir(parents=True, exist_ok=True)
        front = yaml.safe_dump(fields, sort_keys=False) if fields else ""
        path.write_text(f"---\n{front}---\n{body}", encoding="utf-8")
        return path

    return _write
