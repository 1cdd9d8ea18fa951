"""Build pipeline orchestration.

One run moves through ``discovered -> loaded -> resolved -> cross_referenced
-> indexed -> assembled -> done`` or ends in ``failed``. Every stage receives
the previous stage's immutable output and the run's :class:`PipelineContext`;
nothing is kept in module state, so runs in the same process are independent.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from inkwell.core.context import PipelineContext
from inkwell.core.exceptions import BuildError, BuildFailedError
from inkwell.core.feed import build_feed
from inkwell.core.loader import load_documents
from inkwell.core.pagination import paginate
from inkwell.core.permalinks import assign_permalinks
from inkwell.core.references import CrossReferenced, resolve_references
from inkwell.core.taxonomy import build_category_index, build_tag_index
from inkwell.core.types import RawSource, ResolvedDocument, SiteModel, newest_first

logger = logging.getLogger(__name__)


class BuildStage(str, Enum):
    DISCOVERED = "discovered"
    LOADED = "loaded"
    RESOLVED = "resolved"
    CROSS_REFERENCED = "cross_referenced"
    INDEXED = "indexed"
    ASSEMBLED = "assembled"
    DONE = "done"
    FAILED = "failed"


_ORDER = (
    BuildStage.DISCOVERED,
    BuildStage.LOADED,
    BuildStage.RESOLVED,
    BuildStage.CROSS_REFERENCED,
    BuildStage.INDEXED,
    BuildStage.ASSEMBLED,
    BuildStage.DONE,
)


@dataclass(frozen=True)
class BuildResult:
    """Outcome of one run: a site model on success, the error batch on failure."""

    run_id: str
    stage: BuildStage
    documents: tuple[ResolvedDocument, ...] = ()
    model: SiteModel | None = None
    errors: tuple[BuildError, ...] = field(default_factory=tuple)
    failed_stage: str | None = None

    @property
    def ok(self) -> bool:
        return self.stage != BuildStage.FAILED

    def raise_for_failure(self) -> None:
        if not self.ok:
            raise BuildFailedError(self.failed_stage or "unknown", self.errors)


def assemble_site(linked: CrossReferenced, context: PipelineContext) -> SiteModel:
    """Index and assemble the final site model from cross-referenced documents."""
    config = context.config
    ordered = newest_first(linked.documents)

    tags = build_tag_index(ordered)
    categories = build_category_index(ordered)
    logger.debug("Run %s reached stage %s", context.run_id, BuildStage.INDEXED.value)

    pages = paginate(
        ordered,
        config.build.paginate,
        base_path=config.site.base_path,
        paginate_path=config.build.paginate_path,
    )
    feed = build_feed(
        ordered,
        title=config.site.title,
        generated_at=context.started_at,
        limit=config.build.feed_limit,
        excerpt_length=config.build.excerpt_length,
        site_url=config.site.url,
        base_path=config.site.base_path,
        author=config.site.author,
    )
    logger.debug("Run %s reached stage %s", context.run_id, BuildStage.ASSEMBLED.value)

    return SiteModel(
        documents=ordered,
        graph=linked.graph,
        tags=tags,
        categories=categories,
        pages=pages,
        feed=feed,
    )


def run_build(
    sources: Iterable[RawSource],
    context: PipelineContext,
    *,
    until: BuildStage = BuildStage.DONE,
) -> BuildResult:
    """Run the pipeline over a fixed snapshot of sources.

    Configuration is validated before any stage runs; a bad configuration
    raises :class:`~inkwell.core.exceptions.ConfigError` instead of producing
    a failed result. Permalink collisions do not stop the run on their own:
    they are reported together with the cross-reference errors.

    Args:
        sources: Raw sources, already read from disk.
        context: The run's context (configuration, run id, start time).
        until: Last stage to run. ``CROSS_REFERENCED`` validates without assembling.

    Returns:
        A BuildResult in stage ``until`` (or ``DONE``), or ``FAILED`` with errors.

    """
    if until == BuildStage.FAILED:
        msg = "'failed' is not a stage that can be requested"
        raise ValueError(msg)

    config = context.config
    config.validate_for_build()

    def reached(stage: BuildStage) -> bool:
        return _ORDER.index(stage) >= _ORDER.index(until)

    if until == BuildStage.DISCOVERED:
        return BuildResult(run_id=context.run_id, stage=BuildStage.DISCOVERED)

    logger.info("Build %s started", context.run_id)
    try:
        documents = load_documents(sources, max_workers=context.max_workers)
        if reached(BuildStage.LOADED):
            return BuildResult(run_id=context.run_id, stage=BuildStage.LOADED)

        assignment = assign_permalinks(
            documents, template=config.build.permalink, max_workers=context.max_workers
        )
        if reached(BuildStage.RESOLVED):
            assignment.raise_for_collisions()
            return BuildResult(run_id=context.run_id, stage=BuildStage.RESOLVED, documents=assignment.documents)

        linked = resolve_references(assignment.documents, documents, prior_errors=assignment.collisions)
    except BuildFailedError as exc:
        logger.error("Build %s failed at stage '%s' with %d errors", context.run_id, exc.stage, len(exc.errors))
        return BuildResult(
            run_id=context.run_id,
            stage=BuildStage.FAILED,
            errors=exc.errors,
            failed_stage=exc.stage,
        )

    if reached(BuildStage.CROSS_REFERENCED):
        return BuildResult(run_id=context.run_id, stage=BuildStage.CROSS_REFERENCED, documents=linked.documents)

    model = assemble_site(linked, context)
    logger.info("Build %s done: %d documents, %d pages", context.run_id, len(model.documents), len(model.pages))
    return BuildResult(run_id=context.run_id, stage=BuildStage.DONE, documents=model.documents, model=model)


__all__ = ["BuildResult", "BuildStage", "assemble_site", "run_build"]
