"""Runtime configuration, env-driven.

Centralized config using pydantic-settings. Reads from a .env file and
MODELBUNDLE_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class BundleConfig(BaseSettings):
    """Installer configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export MODELBUNDLE_ASSET_ROOT=/opt/app/assets
        export MODELBUNDLE_MODELS_DIR=~/.local/share/app/models
        export MODELBUNDLE_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MODELBUNDLE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"

    # Storage paths
    asset_root: Path = Path("assets")
    models_dir: Path = Path(".modelbundle/models")
    registry_path: Path = Path(".modelbundle/registry.db")

    # Installation
    asset_scheme: str = "asset"
    verify_checksums: bool = True

    # Splitting
    chunk_size_mb: int = 1900


# Module-level singleton: import as `from modelbundle.config import config`
config = BundleConfig()
