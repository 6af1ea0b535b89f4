"""Wires a ready-to-use InstallationCoordinator from configuration."""

from __future__ import annotations

from modelbundle.config import BundleConfig
from modelbundle.core.assembler import PartCallback, StreamAssembler
from modelbundle.core.asset_store import DirectoryAssetStore
from modelbundle.core.coordinator import InstallationCoordinator
from modelbundle.core.paths import ModelPathResolver
from modelbundle.core.registry import SqliteInstallRegistry


def build_coordinator(
    config: BundleConfig | None = None,
    *,
    on_part: PartCallback | None = None,
) -> InstallationCoordinator:
    """Build a coordinator over a directory bundle and a SQLite registry."""
    config = config or BundleConfig()
    store = DirectoryAssetStore(config.asset_root)
    return InstallationCoordinator(
        store,
        SqliteInstallRegistry(config.registry_path),
        ModelPathResolver(config.models_dir),
        assembler=StreamAssembler(
            store, verify_checksums=config.verify_checksums, on_part=on_part
        ),
        allowed_scheme=config.asset_scheme,
    )
