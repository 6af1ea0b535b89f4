"""Main Typer application — imports and registers all CLI commands.

Entry point: ``modelbundle`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from modelbundle.cli.commands.install import install_cmd
from modelbundle.cli.commands.parts import parts_cmd, split_cmd
from modelbundle.cli.commands.status import list_cmd, status_cmd
from modelbundle.config import BundleConfig

app = typer.Typer(
    name="modelbundle",
    help="modelbundle: install bundled (optionally multi-part) model files exactly once.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="install", help="Install a bundled model spec if needed.")(install_cmd)
app.command(name="status", help="Check whether a model spec is installed.")(status_cmd)
app.command(name="list", help="List installed models.")(list_cmd)
app.command(name="parts", help="Show the part sequence of a bundled artifact.")(parts_cmd)
app.command(name="split", help="Split a large artifact into .partN files.")(split_cmd)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Configure logging from MODELBUNDLE_LOG_LEVEL (or --verbose)."""
    level = "DEBUG" if verbose else BundleConfig().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, rich_tracebacks=True)],
        force=True,
    )


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
