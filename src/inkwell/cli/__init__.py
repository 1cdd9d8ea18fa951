"""A module for Inkwell's command-line interface."""

from inkwell.cli.app import app

__all__ = ["app", "main"]


def main() -> None:
    """Entry point for the CLI."""
    app()
