"""CLI error handling utilities."""

from collections.abc import Generator, Sequence
from contextlib import contextmanager

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from inkwell.core.exceptions import (
    BuildError,
    BuildFailedError,
    ComposeError,
    ConfigError,
    OutputError,
    PermalinkCollision,
)

console = Console()

EXIT_FAILED = 1
EXIT_INVALID_CONFIG = 2


def error_table(errors: Sequence[BuildError], *, title: str) -> Table:
    """Render a batch of build errors as a table."""
    table = Table(title=title, title_justify="left")
    table.add_column("Kind", style="bold red", no_wrap=True)
    table.add_column("Document", style="cyan", no_wrap=True)
    table.add_column("Detail")

    for error in errors:
        document = ", ".join(error.identifiers) if isinstance(error, PermalinkCollision) else error.identifier
        table.add_row(error.code, escape(document), escape(str(error)))
    return table


@contextmanager
def handle_cli_errors(*, debug: bool = False) -> Generator[None, None, None]:
    """Context manager to handle CLI errors gracefully.

    Args:
        debug: If True, re-raise after reporting. If False, exit with the mapped code.

    """
    try:
        yield
    except (KeyboardInterrupt, SystemExit, typer.Exit):
        raise
    except ConfigError as e:
        if debug:
            raise
        console.print(f"[bold red]Invalid configuration:[/bold red] {escape(str(e))}")
        raise typer.Exit(EXIT_INVALID_CONFIG) from e
    except BuildFailedError as e:
        if debug:
            raise
        console.print(error_table(e.errors, title=f"Build failed at stage '{e.stage}'"))
        console.print(f"[bold red]{len(e.errors)} error(s).[/bold red] Fix the content and run again.")
        raise typer.Exit(EXIT_FAILED) from e
    except OutputError as e:
        if debug:
            raise
        console.print(f"[bold red]Output error:[/bold red] {escape(str(e))}")
        raise typer.Exit(EXIT_FAILED) from e
    except ComposeError as e:
        if debug:
            raise
        console.print(f"[bold red]Compose error:[/bold red] {escape(str(e))}")
        raise typer.Exit(EXIT_FAILED) from e
    except OSError as e:
        if debug:
            raise
        console.print(f"[bold red]I/O error:[/bold red] {escape(str(e))}")
        raise typer.Exit(EXIT_FAILED) from e
