from pathlib import Path
from typing import Protocol, runtime_checkable

from inkwell.core.types import SiteModel


@runtime_checkable
class OutputSink(Protocol):
    """Serializes one artifact of a built site into a directory."""

    filename: str

    def write(self, model: SiteModel, directory: Path) -> Path:
        """Write the artifact under ``directory`` and return its path."""
        ...
