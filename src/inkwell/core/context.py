"""Build execution context.

Provides run-scoped state without using globals."""
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any

from inkwell.core.config import InkwellConfig


@dataclass(frozen=True)
class PipelineContext:
    """Run-scoped context for one build.

    Carries configuration and run metadata through every stage, so two
    builds in the same process never share state.

    Attributes:
        config: Inkwell configuration
        run_id: Unique identifier for this build run
        started_at: Build start time, used as the feed generation timestamp
        metadata: Additional run metadata (frozen dict)
    """

    config: InkwellConfig
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Ensure metadata is frozen (immutable)."""
        if not isinstance(self.metadata, MappingProxyType):
            object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def max_workers(self) -> int | None:
        return self.config.build.max_workers
