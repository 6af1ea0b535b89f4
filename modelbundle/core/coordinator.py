"""Installation coordinator: exactly-once installation of bundled model specs.

For each spec the coordinator:

1. Skips everything when the registry already reports the spec installed.
2. Rejects the spec before any I/O if a file is not a bundled-asset URL.
3. Installs files in spec order, trusting a pre-existing destination that
   meets the minimum plausible size (left over from an interrupted
   install) and deleting smaller ones.
4. Commits the whole spec to the registry once, after every file is in
   place. On any failure every file of the spec is deleted and nothing
   is committed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from modelbundle.core.asset_store import AssetStore
from modelbundle.core.assembler import StreamAssembler
from modelbundle.core.errors import (
    BundleValidationError,
    InstallationError,
    RegistryError,
)
from modelbundle.core.paths import ModelPathResolver
from modelbundle.core.registry import InstallRegistry
from modelbundle.models.artifacts import ArtifactFile, ModelSpec, ReplacePolicy
from modelbundle.models.install import (
    VALID_INSTALL_TRANSITIONS,
    InstallReport,
    InstallState,
)

logger = logging.getLogger(__name__)

DEFAULT_ASSET_SCHEME = "asset"


class InvalidInstallTransitionError(RuntimeError):
    """Raised when the coordinator attempts a state change the table does not allow."""


class InstallationCoordinator:
    """Installs model specs from a bundled asset store, at most once each.

    Calls must be serialized by the caller; typically the coordinator is
    invoked once at process start, before any model is loaded.

    Parameters
    ----------
    store:
        Read-only asset store holding the bundled artifacts.
    registry:
        Durable record of installed specs.
    resolver:
        Maps artifact filenames to destination paths.
    assembler:
        Copies one artifact. Defaults to a ``StreamAssembler`` over ``store``.
    allowed_scheme:
        The only URL scheme accepted for artifact sources.
    """

    def __init__(
        self,
        store: AssetStore,
        registry: InstallRegistry,
        resolver: ModelPathResolver,
        *,
        assembler: StreamAssembler | None = None,
        allowed_scheme: str = DEFAULT_ASSET_SCHEME,
    ) -> None:
        self._store = store
        self._registry = registry
        self._resolver = resolver
        self._assembler = assembler or StreamAssembler(store)
        self._allowed_scheme = allowed_scheme.lower()
        # spec name -> state reached by the most recent call
        self._states: dict[str, InstallState] = {}

    @property
    def registry(self) -> InstallRegistry:
        return self._registry

    @property
    def resolver(self) -> ModelPathResolver:
        return self._resolver

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def state_of(self, spec_name: str) -> InstallState:
        """State reached by the most recent call for ``spec_name``."""
        return self._states.get(spec_name, InstallState.NOT_CHECKED)

    def _begin(self, spec: ModelSpec) -> None:
        self._states[spec.name] = InstallState.NOT_CHECKED

    def _transition(self, spec: ModelSpec, target: InstallState) -> None:
        current = self.state_of(spec.name)
        if target not in VALID_INSTALL_TRANSITIONS.get(current, set()):
            raise InvalidInstallTransitionError(
                f"Cannot move {spec.name} from {current.value} to {target.value}"
            )
        self._states[spec.name] = target
        logger.debug("%s: %s -> %s", spec.name, current.value, target.value)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def is_installed(self, spec: ModelSpec) -> bool:
        """Whether the registry reports ``spec`` as installed."""
        return self._registry.is_installed(spec)

    def install_if_needed(self, spec: ModelSpec) -> InstallReport:
        """Install ``spec`` unless the registry already has it.

        Raises
        ------
        InstallationError
            Wrapping the ``BundleValidationError``, ``AssetNotFoundError``,
            ``AssemblyError`` or ``RegistryError`` that stopped the install.
        """
        if spec.replace_policy == ReplacePolicy.ALWAYS_REPLACE:
            return self.reinstall(spec)

        started_at = datetime.now(timezone.utc)
        self._begin(spec)
        logger.debug("Checking if %s needs installation", spec.name)

        try:
            installed = self.is_installed(spec)
        except RegistryError as exc:
            self._transition(spec, InstallState.FAILED)
            raise InstallationError(spec.name, "is_installed", exc) from exc

        if installed:
            self._transition(spec, InstallState.ALREADY_INSTALLED)
            logger.info("%s already installed, skipping", spec.name)
            return InstallReport(
                spec_name=spec.name,
                state=InstallState.ALREADY_INSTALLED,
                started_at=started_at,
            )

        logger.info("Installing %s from bundled assets", spec.name)
        return self._install(spec, started_at)

    def reinstall(self, spec: ModelSpec) -> InstallReport:
        """Remove any existing installation of ``spec`` and install it again."""
        started_at = datetime.now(timezone.utc)
        self._begin(spec)
        logger.info("Force reinstalling %s", spec.name)
        return self._install(spec, started_at, replace=True)

    def uninstall(self, spec: ModelSpec) -> int:
        """Unregister ``spec`` and delete its files. Returns the number of files deleted."""
        self._registry.remove(spec)
        deleted = 0
        for artifact in spec.files:
            if self._resolver.delete_model_file(artifact.filename):
                deleted += 1
        self._states.pop(spec.name, None)
        logger.info("Uninstalled %s (%d files deleted)", spec.name, deleted)
        return deleted

    # ------------------------------------------------------------------
    # Installation
    # ------------------------------------------------------------------

    def _validate(self, spec: ModelSpec) -> None:
        for artifact in spec.files:
            if artifact.scheme != self._allowed_scheme:
                raise BundleValidationError(
                    f"Bundled installation only accepts {self._allowed_scheme}:// URLs, "
                    f"got: {artifact.url}"
                )

    def _install(
        self, spec: ModelSpec, started_at: datetime, *, replace: bool = False
    ) -> InstallReport:
        """Validate, copy every file, then commit once.

        With ``replace`` the existing installation is removed first and
        every file is re-assembled even if a usable copy is still on disk.
        """
        self._transition(spec, InstallState.INSTALLING)
        try:
            self._validate(spec)
        except BundleValidationError as exc:
            self._transition(spec, InstallState.FAILED)
            logger.error("Rejected %s: %s", spec.name, exc)
            raise InstallationError(spec.name, "validate", exc) from exc

        if replace:
            self._remove_existing(spec)

        copied: list[str] = []
        skipped: list[str] = []
        sizes: dict[str, int] = {}
        bytes_written = 0
        operation = "assemble"
        try:
            for artifact in spec.files:
                operation = f"assemble {artifact.filename}"
                target = self._resolver.resolve(artifact.filename)
                existing = None if replace else self._existing_size(artifact, target)
                if existing is not None:
                    skipped.append(artifact.filename)
                    sizes[artifact.filename] = existing
                    continue
                written = self._assembler.assemble(artifact, target)
                copied.append(artifact.filename)
                sizes[artifact.filename] = written
                bytes_written += written

            operation = "commit"
            self._registry.commit(spec, sizes)
        except Exception as exc:
            self._rollback(spec)
            self._transition(spec, InstallState.FAILED)
            logger.error("Installation of %s failed during %s: %s", spec.name, operation, exc)
            raise InstallationError(spec.name, operation, exc) from exc

        self._transition(spec, InstallState.INSTALLED)
        logger.info(
            "Successfully installed %s (%d copied, %d already present, %d bytes)",
            spec.name,
            len(copied),
            len(skipped),
            bytes_written,
        )
        return InstallReport(
            spec_name=spec.name,
            state=InstallState.INSTALLED,
            copied=copied,
            skipped=skipped,
            bytes_written=bytes_written,
            started_at=started_at,
        )

    @staticmethod
    def _existing_size(artifact: ArtifactFile, target: Path) -> int | None:
        """Size of a usable pre-existing destination, or ``None`` if it must be copied.

        Files below ``artifact.min_valid_size`` are leftovers of a failed
        copy and are deleted here.
        """
        if not target.exists():
            return None
        size = target.stat().st_size
        if size >= artifact.min_valid_size:
            logger.info("%s already exists and is valid (%d bytes)", artifact.filename, size)
            return size
        logger.warning(
            "%s exists but is too small (%d < %d bytes), re-copying",
            artifact.filename,
            size,
            artifact.min_valid_size,
        )
        target.unlink()
        return None

    def _rollback(self, spec: ModelSpec) -> None:
        for artifact in spec.files:
            try:
                self._resolver.delete_model_file(artifact.filename)
            except (OSError, ValueError):
                logger.debug("Cleanup of %s failed", artifact.filename, exc_info=True)

    def _remove_existing(self, spec: ModelSpec) -> None:
        try:
            self._registry.remove(spec)
        except RegistryError as exc:
            logger.info("No existing registry record removed for %s: %s", spec.name, exc)
        for artifact in spec.files:
            try:
                self._resolver.delete_model_file(artifact.filename)
            except (OSError, ValueError) as exc:
                logger.info("Could not delete existing %s: %s", artifact.filename, exc)
