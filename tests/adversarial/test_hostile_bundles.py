"""Adversarial tests: hostile specs and bundles must never yield a half install.

Covers path escapes, scheme smuggling, part gaps, corrupt leftovers and
digest-mismatched reassembly.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from modelbundle.core.asset_store import DirectoryAssetStore, InMemoryAssetStore
from modelbundle.core.coordinator import InstallationCoordinator
from modelbundle.core.errors import AssemblyError, BundleValidationError, InstallationError
from modelbundle.core.hasher import sha256_hex
from modelbundle.core.paths import ModelPathResolver
from modelbundle.models.artifacts import ArtifactFile, ModelSpec

from tests.helpers import MB, blob


class TestPathEscapes:
    def test_filename_cannot_traverse(self):
        with pytest.raises(ValidationError):
            ArtifactFile(url="asset://m/model.bin", filename="../../etc/passwd")

    def test_resolver_rejects_escape(self, resolver: ModelPathResolver):
        with pytest.raises(ValueError):
            resolver.resolve("..")

    def test_asset_url_with_dotdot_is_not_found(
        self, coordinator: InstallationCoordinator, asset_root: Path, models_dir: Path
    ):
        (asset_root.parent / "outside.bin").write_bytes(blob(MB))
        store = DirectoryAssetStore(asset_root)
        hostile = InstallationCoordinator(
            store, coordinator.registry, coordinator.resolver
        )
        with pytest.raises(InstallationError):
            hostile.install_if_needed(
                ModelSpec.single("escape", "asset:///../outside.bin", "outside.bin")
            )
        assert not (models_dir / "outside.bin").exists()


class TestSchemeSmuggling:
    @pytest.mark.parametrize(
        "url",
        [
            "file:///etc/hosts",
            "https://example.com/model.bin",
            "assets://models/model.bin",
            "models/model.bin",
        ],
    )
    def test_non_asset_urls_rejected(
        self, coordinator: InstallationCoordinator, memory_store: InMemoryAssetStore, url: str
    ):
        memory_store.add("models/model.bin", blob(MB))
        with pytest.raises(InstallationError) as exc_info:
            coordinator.install_if_needed(ModelSpec.single("smuggle", url, "model.bin"))
        assert isinstance(exc_info.value.__cause__, BundleValidationError)
        assert memory_store.reads == []

    def test_last_file_bad_scheme_blocks_whole_spec(
        self,
        coordinator: InstallationCoordinator,
        memory_store: InMemoryAssetStore,
        models_dir: Path,
    ):
        memory_store.add("models/model.bin", blob(MB))
        spec = ModelSpec(
            name="mixed",
            files=[
                ArtifactFile.from_url("asset://models/model.bin"),
                ArtifactFile.from_url("file:///tmp/tokenizer.json"),
            ],
        )
        with pytest.raises(InstallationError):
            coordinator.install_if_needed(spec)
        assert not (models_dir / "model.bin").exists()
        assert coordinator.is_installed(spec) is False


class TestCorruptReassembly:
    def test_reordered_parts_caught_by_digest(
        self,
        coordinator: InstallationCoordinator,
        memory_store: InMemoryAssetStore,
        models_dir: Path,
    ):
        a, b = blob(MB, 1), blob(MB, 2)
        memory_store.add("models/model.bin.part1", b)
        memory_store.add("models/model.bin.part2", a)
        spec = ModelSpec.single(
            "gemma", "asset://models/model.bin", sha256=sha256_hex(a + b)
        )

        with pytest.raises(InstallationError) as exc_info:
            coordinator.install_if_needed(spec)

        assert isinstance(exc_info.value.__cause__, AssemblyError)
        assert not (models_dir / "model.bin").exists()
        assert coordinator.is_installed(spec) is False

    def test_part_gap_truncates_and_digest_fails(
        self,
        coordinator: InstallationCoordinator,
        memory_store: InMemoryAssetStore,
        models_dir: Path,
    ):
        p1, p2, p3 = blob(MB, 1), blob(MB, 2), blob(MB, 3)
        memory_store.add("models/model.bin.part1", p1)
        memory_store.add("models/model.bin.part3", p3)  # part2 lost from the bundle
        spec = ModelSpec.single(
            "gemma", "asset://models/model.bin", sha256=sha256_hex(p1 + p2 + p3)
        )
        with pytest.raises(InstallationError):
            coordinator.install_if_needed(spec)
        assert not (models_dir / "model.bin").exists()

    def test_retry_after_failure_succeeds(
        self,
        coordinator: InstallationCoordinator,
        memory_store: InMemoryAssetStore,
        models_dir: Path,
    ):
        spec = ModelSpec.single("gemma", "asset://models/model.bin")
        with pytest.raises(InstallationError):
            coordinator.install_if_needed(spec)

        memory_store.add("models/model.bin", blob(MB))
        report = coordinator.install_if_needed(spec)
        assert report.copied == ["model.bin"]
        assert coordinator.is_installed(spec)
