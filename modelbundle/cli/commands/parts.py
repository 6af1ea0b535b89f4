"""``modelbundle parts`` and ``modelbundle split`` — part sequence tooling."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from modelbundle.cli.commands._common import load_config
from modelbundle.core.asset_store import DirectoryAssetStore
from modelbundle.core.part_probe import detect_parts
from modelbundle.core.splitter import split_file
from modelbundle.models.artifacts import ArtifactFile

console = Console()


def parts_cmd(
    url: str = typer.Argument(..., help="asset:// URL of the artifact."),
    asset_root: Path = typer.Option(None, "--assets", "-a", help="Bundle directory."),
) -> None:
    """Show how an artifact is stored in the bundle."""
    config = load_config(asset_root=asset_root)
    artifact = ArtifactFile.from_url(url)
    parts = detect_parts(DirectoryAssetStore(config.asset_root), artifact.asset_path)
    if not parts:
        console.print(f"{artifact.asset_path}: [cyan]single file[/cyan]")
        return
    console.print(f"{artifact.asset_path}: [cyan]{len(parts)} parts[/cyan]")
    for part in parts:
        console.print(f"  {part}")


def split_cmd(
    source: Path = typer.Argument(..., help="Artifact to split."),
    chunk_size_mb: int = typer.Option(
        None, "--chunk-size-mb", "-c", help="Part size in MB (default from config, 1900)."
    ),
    output_dir: Path = typer.Option(None, "--output-dir", "-o", help="Where parts are written."),
) -> None:
    """Split a large artifact into .partN files for bundling."""
    config = load_config()
    chunk = chunk_size_mb or config.chunk_size_mb
    try:
        parts = split_file(source, chunk, output_dir)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)

    if not parts:
        console.print("File is smaller than chunk size. No splitting needed.")
        return

    console.print(f"[bold green]Split {source.name} into {len(parts)} parts[/bold green]")
    console.print("Bundle these assets:")
    for part in parts:
        console.print(f"  - {part.name}")
    console.print(f"Reference the base URL in your spec: asset://<dir>/{source.name}")
