"""Shared test fixtures for modelbundle."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from modelbundle.core.asset_store import InMemoryAssetStore
from modelbundle.core.coordinator import InstallationCoordinator
from modelbundle.core.paths import ModelPathResolver
from modelbundle.core.registry import SqliteInstallRegistry

from tests.helpers import CountingDirectoryStore


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def asset_root(tmp_dir: Path) -> Path:
    """Empty bundle directory."""
    root = tmp_dir / "bundle"
    root.mkdir()
    return root


@pytest.fixture
def write_asset(asset_root: Path) -> Callable[[str, bytes], Path]:
    """Factory fixture: place ``data`` at logical path ``path`` in the bundle."""

    def _factory(path: str, data: bytes) -> Path:
        target = asset_root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return target

    return _factory


@pytest.fixture
def directory_store(asset_root: Path) -> CountingDirectoryStore:
    """Directory-backed store over ``asset_root`` with a read spy."""
    return CountingDirectoryStore(asset_root)


@pytest.fixture
def memory_store() -> InMemoryAssetStore:
    """Empty in-memory asset store (records reads)."""
    return InMemoryAssetStore()


@pytest.fixture
def registry(tmp_dir: Path) -> SqliteInstallRegistry:
    """Provide a fresh registry backed by a temp SQLite database."""
    return SqliteInstallRegistry(tmp_dir / "state" / "registry.db")


@pytest.fixture
def models_dir(tmp_dir: Path) -> Path:
    return tmp_dir / "models"


@pytest.fixture
def resolver(models_dir: Path) -> ModelPathResolver:
    return ModelPathResolver(models_dir)


@pytest.fixture
def coordinator(
    memory_store: InMemoryAssetStore,
    registry: SqliteInstallRegistry,
    resolver: ModelPathResolver,
) -> InstallationCoordinator:
    """Coordinator wired to the in-memory store, temp registry and temp models dir."""
    return InstallationCoordinator(memory_store, registry, resolver)
