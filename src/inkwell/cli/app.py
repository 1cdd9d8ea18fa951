from datetime import UTC, datetime
from pathlib import Path

import typer
from rich.console import Console

from inkwell.cli.errorhandler import handle_cli_errors
from inkwell.core.config import InkwellConfig
from inkwell.core.context import PipelineContext
from inkwell.core.pipeline import BuildStage, run_build
from inkwell.infra.compose import create_draft, publish_draft
from inkwell.infra.reader import discover_sources
from inkwell.infra.sinks import publish_site
from inkwell.logging_setup import configure_logging

app = typer.Typer(
    name="inkwell",
    help="Inkwell - build pipeline for markdown blogs.",
    no_args_is_help=True,
)

console = Console()

SITE_ROOT_HELP = "Root directory of the site (holds _config.yml, _posts and _drafts)."


def _build_context(site_root: Path) -> PipelineContext:
    config = InkwellConfig.load(site_root.resolve())
    config.validate_for_build()
    return PipelineContext(config=config)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log per-document detail.")):
    """
    Resolve posts and drafts into a linked, paginated site model.
    """
    configure_logging("DEBUG" if verbose else None)


@app.command()
def build(
    site_root: Path = typer.Option(Path("."), "--site-root", "-s", help=SITE_ROOT_HELP),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output directory (defaults to _site)."),
    debug: bool = typer.Option(False, "--debug", help="Show tracebacks instead of summaries."),
):
    """
    Run the full pipeline and write site.json and feed.xml.
    """
    with handle_cli_errors(debug=debug):
        ctx = _build_context(site_root)
        result = run_build(discover_sources(ctx.config.paths), ctx)
        result.raise_for_failure()

        output_dir = output if output is not None else ctx.config.paths.abs_output_dir
        written = publish_site(result.model, output_dir)

    model = result.model
    console.print(
        f"[bold green]Built[/bold green] {len(model.documents)} documents, "
        f"{len(model.tags)} tags, {len(model.pages)} pages."
    )
    for path in written:
        console.print(f"  wrote {path}")


@app.command()
def check(
    site_root: Path = typer.Option(Path("."), "--site-root", "-s", help=SITE_ROOT_HELP),
    debug: bool = typer.Option(False, "--debug", help="Show tracebacks instead of summaries."),
):
    """
    Validate documents, permalinks and references without writing output.
    """
    with handle_cli_errors(debug=debug):
        ctx = _build_context(site_root)
        result = run_build(discover_sources(ctx.config.paths), ctx, until=BuildStage.CROSS_REFERENCED)
        result.raise_for_failure()

    console.print(f"[bold green]OK[/bold green] {len(result.documents)} published documents, no broken references.")


@app.command()
def draft(
    title: str = typer.Argument(..., help="Title of the new draft."),
    site_root: Path = typer.Option(Path("."), "--site-root", "-s", help=SITE_ROOT_HELP),
):
    """
    Create a new draft in the drafts directory.
    """
    with handle_cli_errors():
        config = InkwellConfig.load(site_root.resolve())
        path = create_draft(config.paths, title)
    console.print(f"Created draft {path}")


@app.command()
def publish(
    identifier: str = typer.Argument(..., help="Draft identifier (file name without extension)."),
    date: datetime | None = typer.Option(
        None,
        "--date",
        formats=["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"],
        help="Publication time (defaults to now, UTC).",
    ),
    site_root: Path = typer.Option(Path("."), "--site-root", "-s", help=SITE_ROOT_HELP),
):
    """
    Move a draft into the posts directory as a published post.
    """
    when = date if date is not None else datetime.now(UTC)
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)

    with handle_cli_errors():
        config = InkwellConfig.load(site_root.resolve())
        path = publish_draft(config.paths, identifier, when=when)
    console.print(f"Published {path}")


if __name__ == "__main__":
    app()
