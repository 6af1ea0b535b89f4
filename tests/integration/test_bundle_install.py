"""End-to-end: split an artifact, bundle it as a directory, install it, restart.

These tests exercise the splitter, DirectoryAssetStore, part probing,
StreamAssembler, SqliteInstallRegistry and InstallationCoordinator together.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest

from modelbundle.config import BundleConfig
from modelbundle.core.coordinator import InstallationCoordinator
from modelbundle.core.errors import AssetNotFoundError
from modelbundle.core.factory import build_coordinator
from modelbundle.core.hasher import sha256_file
from modelbundle.core.paths import ModelPathResolver
from modelbundle.core.registry import SqliteInstallRegistry
from modelbundle.core.splitter import split_file
from modelbundle.models.artifacts import ArtifactFile, ModelSpec
from modelbundle.models.install import InstallState

from tests.helpers import MB, CountingDirectoryStore, blob


@pytest.fixture
def bundle_config(tmp_dir: Path, asset_root: Path) -> BundleConfig:
    return BundleConfig(
        asset_root=asset_root,
        models_dir=tmp_dir / "app-data" / "models",
        registry_path=tmp_dir / "app-data" / "registry.db",
    )


class TestSplitAndInstall:
    def test_split_bundle_install_matches_original(
        self, tmp_dir: Path, asset_root: Path, bundle_config: BundleConfig
    ):
        original = tmp_dir / "gemma-7b-it.bin"
        original.write_bytes(blob(5 * MB + 123, marker=11))
        parts = split_file(original, 2, asset_root / "models")
        assert len(parts) == 3

        spec = ModelSpec(
            name="gemma-7b",
            files=[
                ArtifactFile(
                    url="asset://models/gemma-7b-it.bin",
                    filename="gemma-7b-it.bin",
                    sha256=sha256_file(original),
                )
            ],
        )
        report = build_coordinator(bundle_config).install_if_needed(spec)

        installed = bundle_config.models_dir / "gemma-7b-it.bin"
        assert report.state == InstallState.INSTALLED
        assert installed.read_bytes() == original.read_bytes()
        assert report.bytes_written == original.stat().st_size

    def test_restart_is_a_no_op(self, asset_root: Path, write_asset, bundle_config: BundleConfig):
        write_asset("models/model.bin", blob(2 * MB))
        write_asset("models/tokenizer.json", b'{"vocab": []}' * 100)
        spec = ModelSpec(
            name="gemma",
            files=[
                ArtifactFile.from_url("asset://models/model.bin"),
                ArtifactFile.from_url("asset://models/tokenizer.json"),
            ],
        )
        build_coordinator(bundle_config).install_if_needed(spec)

        # simulated process restart: everything rebuilt from disk
        store = CountingDirectoryStore(asset_root)
        restarted = InstallationCoordinator(
            store,
            SqliteInstallRegistry(bundle_config.registry_path),
            ModelPathResolver(bundle_config.models_dir),
        )
        report = restarted.install_if_needed(spec)

        assert report.state == InstallState.ALREADY_INSTALLED
        assert store.reads == []

    def test_interrupted_install_resumes(
        self, asset_root: Path, write_asset, bundle_config: BundleConfig
    ):
        write_asset("models/model.bin", blob(2 * MB, 1))
        write_asset("models/adapter.bin", blob(MB, 2))
        spec = ModelSpec(
            name="gemma-lora",
            files=[
                ArtifactFile.from_url("asset://models/model.bin"),
                ArtifactFile.from_url("asset://models/adapter.bin"),
            ],
        )
        # a previous run copied model.bin and died before committing
        bundle_config.models_dir.mkdir(parents=True)
        (bundle_config.models_dir / "model.bin").write_bytes(blob(2 * MB, 1))

        store = CountingDirectoryStore(asset_root)
        coordinator = InstallationCoordinator(
            store,
            SqliteInstallRegistry(bundle_config.registry_path),
            ModelPathResolver(bundle_config.models_dir),
        )
        report = coordinator.install_if_needed(spec)

        assert report.skipped == ["model.bin"]
        assert report.copied == ["adapter.bin"]
        assert all("model.bin" not in r for r in store.reads)
        assert coordinator.is_installed(spec)


class _ZeroPartStore:
    """Serves zero-filled parts of fixed sizes, built on demand per read."""

    def __init__(self, sizes: dict[str, int]) -> None:
        self._sizes = sizes

    def read(self, logical_path: str) -> bytes:
        if logical_path not in self._sizes:
            raise AssetNotFoundError(logical_path)
        return bytes(self._sizes[logical_path])


@pytest.fixture
def large_parts() -> Iterator[dict[str, int]]:
    if not os.environ.get("MODELBUNDLE_RUN_SLOW"):
        pytest.skip("set MODELBUNDLE_RUN_SLOW=1 to assemble a 2.6 GB artifact")
    yield {
        "models/model.bin.part1": 1_992_294_400,
        "models/model.bin.part2": 681_574_400,
    }


@pytest.mark.slow
def test_two_part_scenario_exact_size(
    tmp_dir: Path, registry: SqliteInstallRegistry, large_parts: dict[str, int]
):
    models_dir = tmp_dir / "models"
    coordinator = InstallationCoordinator(
        _ZeroPartStore(large_parts), registry, ModelPathResolver(models_dir)
    )
    spec = ModelSpec.single("gemma-7b", "asset://models/model.bin")

    coordinator.install_if_needed(spec)

    assert (models_dir / "model.bin").stat().st_size == 2_673_868_800
    assert registry.is_installed(spec)
