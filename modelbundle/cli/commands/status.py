"""``modelbundle status`` and ``modelbundle list`` — registry inspection."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from modelbundle.cli.commands._common import build_spec, load_config
from modelbundle.core.registry import SqliteInstallRegistry

console = Console()


def status_cmd(
    name: str = typer.Argument(..., help="Model spec name."),
    urls: list[str] = typer.Argument(..., help="asset:// URLs of the spec's files."),
    filename: list[str] = typer.Option(
        None,
        "--filename",
        "-f",
        help="Destination filename, once per URL, as given to install.",
    ),
    registry_path: Path = typer.Option(None, "--registry", "-r", help="Registry database."),
) -> None:
    """Report whether a model spec is installed."""
    config = load_config(registry_path=registry_path)
    try:
        spec = build_spec(name, urls, filename)
    except ValueError as exc:
        console.print(f"[bold red]Invalid spec:[/bold red] {exc}")
        raise typer.Exit(code=2)
    registry = SqliteInstallRegistry(config.registry_path)
    if registry.is_installed(spec):
        console.print(f"[green]{spec.name}: installed[/green]")
    else:
        console.print(f"[yellow]{spec.name}: not installed[/yellow]")
        raise typer.Exit(code=1)


def list_cmd(
    registry_path: Path = typer.Option(None, "--registry", "-r", help="Registry database."),
) -> None:
    """List every installed file recorded in the registry."""
    config = load_config(registry_path=registry_path)
    records = SqliteInstallRegistry(config.registry_path).records()
    if not records:
        console.print("[dim]No models installed.[/dim]")
        return

    table = Table(title="Installed Models")
    table.add_column("Spec", style="cyan")
    table.add_column("File")
    table.add_column("Size", justify="right", style="green")
    table.add_column("Installed at")
    for record in records:
        table.add_row(
            record.spec_name,
            record.filename,
            f"{record.size_bytes:,}",
            record.installed_at.strftime("%Y-%m-%d %H:%M:%S"),
        )
    console.print(table)
