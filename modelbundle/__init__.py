"""modelbundle: exactly-once installation of bundled model artifacts.

Copies model files from a read-only bundled asset store into a writable
models directory the first time they are needed:
  - Single blobs or ordered ``.part1..partN`` sequences, auto-detected
  - Streaming assembly with post-assembly size (and optional sha256) checks
  - All-or-nothing registry commit per model spec, rollback on failure
  - Idempotent: an installed spec costs one registry lookup
"""

__version__ = "0.1.0"

from modelbundle.core.assembler import StreamAssembler
from modelbundle.core.asset_store import AssetStore, DirectoryAssetStore, InMemoryAssetStore
from modelbundle.core.coordinator import InstallationCoordinator
from modelbundle.core.factory import build_coordinator
from modelbundle.core.part_probe import detect_parts
from modelbundle.core.registry import SqliteInstallRegistry
from modelbundle.models.artifacts import ArtifactFile, ModelSpec, ReplacePolicy

__all__ = [
    "ArtifactFile",
    "AssetStore",
    "DirectoryAssetStore",
    "InMemoryAssetStore",
    "InstallationCoordinator",
    "ModelSpec",
    "ReplacePolicy",
    "SqliteInstallRegistry",
    "StreamAssembler",
    "build_coordinator",
    "detect_parts",
    "__version__",
]
