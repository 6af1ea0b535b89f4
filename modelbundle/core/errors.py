"""Exception taxonomy for bundled model installation.

Nothing here is retried internally. Callers retry by invoking
``install_if_needed`` again, which is safe because installation is
idempotent.
"""

from __future__ import annotations

from pathlib import Path


class ModelBundleError(RuntimeError):
    """Base class for every error raised by modelbundle."""


class BundleValidationError(ModelBundleError):
    """Raised when a spec cannot be installed as configured (e.g. wrong URL scheme)."""


class AssetNotFoundError(ModelBundleError):
    """Raised when the asset store has nothing at the requested logical path."""

    def __init__(self, logical_path: str) -> None:
        super().__init__(f"Asset not found: {logical_path}")
        self.logical_path = logical_path


class AssemblyError(ModelBundleError):
    """Raised when copying or assembling an artifact fails or fails verification."""

    def __init__(self, message: str, *, operation: str = "", path: Path | str = "") -> None:
        super().__init__(message)
        self.operation = operation
        self.path = str(path)


class RegistryError(ModelBundleError):
    """Raised when the installation registry cannot be read or written."""


class InstallationError(ModelBundleError):
    """Coordinator-level failure for a whole spec.

    The original exception is always chained as ``__cause__``.
    """

    def __init__(self, spec_name: str, operation: str, cause: BaseException) -> None:
        super().__init__(
            f"Failed to install bundled model {spec_name!r} during {operation}: {cause}"
        )
        self.spec_name = spec_name
        self.operation = operation
        self.cause = cause
