"""Bundled artifact models: the files a model spec installs."""

from __future__ import annotations

from enum import Enum
from pathlib import PurePosixPath
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Minimum size a pre-existing destination file must have to be trusted.
# Small metadata files (tokenizer config and the like) use the lower bound.
MIN_METADATA_SIZE = 1024
MIN_WEIGHTS_SIZE = 1024 * 1024
METADATA_EXTENSIONS = frozenset({".json"})


class ReplacePolicy(str, Enum):
    """What ``install_if_needed`` does with an existing installation."""

    KEEP_EXISTING = "keep_existing"
    ALWAYS_REPLACE = "always_replace"


class ArtifactFile(BaseModel):
    """One file of a model spec.

    ``url`` is scheme-qualified (``asset://models/model.bin``); only the
    scheme decides how the bytes are fetched. ``filename`` is where the
    file lands inside the models directory.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    filename: str
    sha256: str = ""  # optional expected digest, hex

    @field_validator("filename")
    @classmethod
    def check_plain_filename(cls, value: str) -> str:
        if not value or value in (".", ".."):
            raise ValueError("filename must not be empty")
        if "/" in value or "\\" in value:
            raise ValueError(f"filename must not contain a path separator: {value!r}")
        return value

    @field_validator("sha256")
    @classmethod
    def normalise_digest(cls, value: str) -> str:
        return value.removeprefix("sha256:").lower()

    @classmethod
    def from_url(cls, url: str, *, sha256: str = "") -> ArtifactFile:
        """Build an artifact whose filename is the URL basename."""
        return cls(url=url, filename=PurePosixPath(urlsplit(url).path).name, sha256=sha256)

    @property
    def scheme(self) -> str:
        return urlsplit(self.url).scheme.lower()

    @property
    def asset_path(self) -> str:
        """Logical path inside the asset store (URL minus its scheme)."""
        parts = urlsplit(self.url)
        path = f"{parts.netloc}{parts.path}" if parts.netloc else parts.path
        return path.lstrip("/")

    @property
    def extension(self) -> str:
        return PurePosixPath(self.filename).suffix.lower()

    @property
    def min_valid_size(self) -> int:
        """Smallest size at which an existing destination file counts as present."""
        if self.extension in METADATA_EXTENSIONS:
            return MIN_METADATA_SIZE
        return MIN_WEIGHTS_SIZE


class ModelSpec(BaseModel):
    """A named set of artifact files installed and registered as one unit.

    Examples
    --------
    >>> spec = ModelSpec.single("gemma-2b", "asset://models/gemma-2b-it.bin")
    >>> spec.files[0].filename
    'gemma-2b-it.bin'
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    files: list[ArtifactFile] = Field(min_length=1)
    replace_policy: ReplacePolicy = ReplacePolicy.KEEP_EXISTING

    @model_validator(mode="after")
    def check_unique_filenames(self) -> ModelSpec:
        seen: set[str] = set()
        for artifact in self.files:
            if artifact.filename in seen:
                raise ValueError(
                    f"Duplicate filename {artifact.filename!r} in spec {self.name!r}"
                )
            seen.add(artifact.filename)
        return self

    @property
    def filenames(self) -> list[str]:
        return [artifact.filename for artifact in self.files]

    @classmethod
    def single(
        cls,
        name: str,
        url: str,
        filename: str | None = None,
        *,
        sha256: str = "",
        replace_policy: ReplacePolicy = ReplacePolicy.KEEP_EXISTING,
    ) -> ModelSpec:
        """Build a one-file spec, deriving the filename from the URL basename."""
        if filename:
            artifact = ArtifactFile(url=url, filename=filename, sha256=sha256)
        else:
            artifact = ArtifactFile.from_url(url, sha256=sha256)
        return cls(name=name, files=[artifact], replace_policy=replace_policy)
