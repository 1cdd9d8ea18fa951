"""Logging for the Inkwell CLI: one rich handler on the root logger, on stderr."""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["console", "configure_logging"]

LOG_LEVEL_ENV = "INKWELL_LOG_LEVEL"

console = Console(stderr=True)


class _InkwellHandler(RichHandler):
    """Marker subclass so repeated configuration finds and reuses our handler."""


def _level_from(name: str | None) -> int:
    requested = (name or os.getenv(LOG_LEVEL_ENV) or "INFO").upper()
    level = logging.getLevelName(requested)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: str | None = None) -> None:
    """Route log records through rich; safe to call more than once.

    Args:
        level: Level name such as ``"DEBUG"``. Falls back to ``INKWELL_LOG_LEVEL``, then INFO.

    """
    root = logging.getLogger()

    if not any(isinstance(handler, _InkwellHandler) for handler in root.handlers):
        for handler in list(root.handlers):
            root.removeHandler(handler)
        handler = _InkwellHandler(console=console, show_path=False, rich_tracebacks=True, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)

    root.setLevel(_level_from(level))
    logging.captureWarnings(True)
