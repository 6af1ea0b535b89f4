"""``modelbundle install NAME URL...`` — install a bundled model spec once.

Skips the copy when the registry already lists the spec; ``--force``
removes any existing installation first.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn

from modelbundle.cli.commands._common import build_spec, load_config
from modelbundle.core.errors import InstallationError
from modelbundle.core.factory import build_coordinator
from modelbundle.models.install import InstallState

console = Console()


def install_cmd(
    name: str = typer.Argument(..., help="Unique model spec name."),
    urls: list[str] = typer.Argument(..., help="asset:// URLs of the spec's files."),
    filename: list[str] = typer.Option(
        None,
        "--filename",
        "-f",
        help="Destination filename, once per URL (defaults to the URL basename).",
    ),
    force: bool = typer.Option(
        False, "--force", help="Reinstall even if already installed."
    ),
    asset_root: Path = typer.Option(None, "--assets", "-a", help="Bundle directory."),
    models_dir: Path = typer.Option(None, "--models", "-m", help="Destination directory."),
    registry_path: Path = typer.Option(None, "--registry", "-r", help="Registry database."),
) -> None:
    """Install a bundled model spec if it is not installed yet."""
    config = load_config(asset_root, models_dir, registry_path)
    try:
        spec = build_spec(name, urls, filename)
    except ValueError as exc:
        console.print(f"[bold red]Invalid spec:[/bold red] {exc}")
        raise typer.Exit(code=2)

    with Progress(
        TextColumn("[cyan]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total} parts"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(spec.name, total=None)

        def _on_part(index: int, total: int, size: int) -> None:
            progress.update(task, completed=index, total=total)

        coordinator = build_coordinator(config, on_part=_on_part)
        try:
            report = coordinator.reinstall(spec) if force else coordinator.install_if_needed(spec)
        except InstallationError as exc:
            console.print(f"[bold red]Installation failed:[/bold red] {exc}")
            if exc.__cause__ is not None:
                console.print(f"[dim]Cause: {exc.__cause__!r}[/dim]")
            raise typer.Exit(code=1)

    if report.state == InstallState.ALREADY_INSTALLED:
        console.print(f"[green]{spec.name}[/green] is already installed, nothing to do.")
        return

    console.print(
        Panel(
            "\n".join([
                f"[bold green]Installed {spec.name}[/bold green]",
                f"Copied: {', '.join(report.copied) or '-'}",
                f"Already present: {', '.join(report.skipped) or '-'}",
                f"Bytes written: {report.bytes_written:,}",
                f"Models directory: {coordinator.resolver.models_dir}",
            ]),
            title="modelbundle",
            border_style="green",
        )
    )
