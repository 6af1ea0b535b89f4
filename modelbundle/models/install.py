"""Installation state models: per-spec state machine, reports and registry rows."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class InstallState(str, Enum):
    """State of one spec inside a single coordinator call."""

    NOT_CHECKED = "not_checked"
    ALREADY_INSTALLED = "already_installed"
    INSTALLING = "installing"
    INSTALLED = "installed"
    FAILED = "failed"


# Valid state transitions, enforced by the InstallationCoordinator.
# Every call starts again from NOT_CHECKED, so terminal states may only
# go back there.
VALID_INSTALL_TRANSITIONS: dict[InstallState, set[InstallState]] = {
    InstallState.NOT_CHECKED: {
        InstallState.ALREADY_INSTALLED,
        InstallState.INSTALLING,
        InstallState.FAILED,
    },
    InstallState.INSTALLING: {InstallState.INSTALLED, InstallState.FAILED},
    InstallState.ALREADY_INSTALLED: {InstallState.NOT_CHECKED},
    InstallState.INSTALLED: {InstallState.NOT_CHECKED},
    InstallState.FAILED: {InstallState.NOT_CHECKED},
}


class InstallReport(BaseModel):
    """Outcome of one ``install_if_needed`` / ``reinstall`` call."""

    model_config = ConfigDict(frozen=True)

    spec_name: str
    state: InstallState
    copied: list[str] = []
    skipped: list[str] = []  # pre-existing files that passed the size check
    bytes_written: int = 0
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    finished_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def performed_copy(self) -> bool:
        return bool(self.copied)


class InstalledFileRecord(BaseModel):
    """One row of the installation registry."""

    model_config = ConfigDict(frozen=True)

    spec_name: str
    filename: str
    size_bytes: int = 0
    installed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
