"""Atomic publication of build artifacts.

Artifacts are written into a staging directory beside the output directory,
which is then swapped into place with ``os.replace``. A failing sink leaves
the previous build untouched.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import uuid
from collections.abc import Sequence
from pathlib import Path

from inkwell.core.exceptions import OutputError
from inkwell.core.ports import OutputSink
from inkwell.core.types import SiteModel
from inkwell.infra.sinks.atom import AtomFeedSink
from inkwell.infra.sinks.site_json import SiteJSONSink

logger = logging.getLogger(__name__)


def default_sinks() -> list[OutputSink]:
    return [SiteJSONSink(), AtomFeedSink()]


def publish_site(
    model: SiteModel,
    output_dir: Path,
    sinks: Sequence[OutputSink] | None = None,
) -> list[Path]:
    """Write every artifact for ``model`` and swap them into ``output_dir``.

    Args:
        model: The assembled site model.
        output_dir: Final output directory; replaced as a whole.
        sinks: Artifact writers; defaults to ``site.json`` and ``feed.xml``.

    Returns:
        Paths of the written artifacts inside ``output_dir``.

    Raises:
        OutputError: If staging or swapping fails. ``output_dir`` keeps its
            previous contents in that case.

    """
    sinks = default_sinks() if sinks is None else list(sinks)
    output_dir = Path(output_dir)

    try:
        output_dir.parent.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=f".{output_dir.name}-staging-", dir=output_dir.parent))
    except OSError as exc:
        raise OutputError(str(output_dir), str(exc)) from exc

    try:
        staging.chmod(0o755)
        written = [sink.write(model, staging) for sink in sinks]
    except OSError as exc:
        shutil.rmtree(staging, ignore_errors=True)
        raise OutputError(str(output_dir), str(exc)) from exc
    except Exception:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    _swap_into_place(staging, output_dir)
    logger.info("Published %d artifacts to %s", len(written), output_dir)
    return [output_dir / path.relative_to(staging) for path in written]


def _swap_into_place(staging: Path, output_dir: Path) -> None:
    backup: Path | None = None
    try:
        if output_dir.exists():
            backup = output_dir.with_name(f".{output_dir.name}-previous-{uuid.uuid4().hex[:8]}")
            os.replace(output_dir, backup)
        os.replace(staging, output_dir)
    except OSError as exc:
        if backup is not None and backup.exists() and not output_dir.exists():
            os.replace(backup, output_dir)
        shutil.rmtree(staging, ignore_errors=True)
        raise OutputError(str(output_dir), str(exc)) from exc

    if backup is not None:
        shutil.rmtree(backup, ignore_errors=True)
