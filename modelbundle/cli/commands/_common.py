"""Helpers shared by the CLI commands."""

from __future__ import annotations

from pathlib import Path

from modelbundle.config import BundleConfig
from modelbundle.models.artifacts import ArtifactFile, ModelSpec


def load_config(
    asset_root: Path | None = None,
    models_dir: Path | None = None,
    registry_path: Path | None = None,
) -> BundleConfig:
    """Environment config with any explicit CLI paths applied on top."""
    overrides = {
        key: value
        for key, value in {
            "asset_root": asset_root,
            "models_dir": models_dir,
            "registry_path": registry_path,
        }.items()
        if value is not None
    }
    return BundleConfig(**overrides)


def build_spec(name: str, urls: list[str], filenames: list[str] | None = None) -> ModelSpec:
    """Build a spec from URLs; filenames default to each URL's basename."""
    filenames = filenames or []
    if filenames and len(filenames) != len(urls):
        raise ValueError("--filename must be given once per URL or not at all")
    if filenames:
        files = [ArtifactFile(url=url, filename=fn) for url, fn in zip(urls, filenames)]
        return ModelSpec(name=name, files=files)
    return ModelSpec(name=name, files=[ArtifactFile.from_url(url) for url in urls])
