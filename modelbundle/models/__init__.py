"""modelbundle data models — all Pydantic v2, all frozen (immutable)."""

from modelbundle.models.artifacts import (
    MIN_METADATA_SIZE,
    MIN_WEIGHTS_SIZE,
    ArtifactFile,
    ModelSpec,
    ReplacePolicy,
)
from modelbundle.models.install import (
    VALID_INSTALL_TRANSITIONS,
    InstalledFileRecord,
    InstallReport,
    InstallState,
)

__all__ = [
    # artifacts
    "ArtifactFile",
    "ModelSpec",
    "ReplacePolicy",
    "MIN_METADATA_SIZE",
    "MIN_WEIGHTS_SIZE",
    # install
    "InstallState",
    "VALID_INSTALL_TRANSITIONS",
    "InstallReport",
    "InstalledFileRecord",
]
