"""Pydantic models for ``cargo metadata`` output.

Only the fields the bake pipeline reads are modelled; everything else in
the metadata document is ignored.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Package metadata table that marks a package as a guest package.
GUEST_METADATA_KEY = "risc0"


class Target(BaseModel):
    """A build target of a package (lib, bin, example, ...)."""

    model_config = ConfigDict(extra="ignore")

    name: str
    kind: list[str] = Field(default_factory=list)
    src_path: Path | None = None

    def is_bin(self) -> bool:
        """Return True if this is a binary target."""
        return "bin" in self.kind


class Package(BaseModel):
    """A package as reported by ``cargo metadata``.

    Attributes:
        id: Opaque package ID, unique within the metadata document.
        name: Package name.
        version: Package version.
        manifest_path: Absolute path to the package's Cargo.toml.
        metadata: The ``[package.metadata]`` table, or None if absent.
        targets: Build targets declared by the package.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    version: str = "0.0.0"
    manifest_path: Path
    metadata: dict[str, Any] | None = None
    targets: list[Target] = Field(default_factory=list)

    @property
    def manifest_dir(self) -> Path:
        return self.manifest_path.parent

    def has_guest_metadata(self) -> bool:
        """Return True if the package declares the guest build annotation."""
        return self.metadata is not None and GUEST_METADATA_KEY in self.metadata

    def has_bin_target(self) -> bool:
        return any(t.is_bin() for t in self.targets)


class WorkspaceMetadata(BaseModel):
    """Top-level ``cargo metadata --format-version 1`` document."""

    model_config = ConfigDict(extra="ignore")

    packages: list[Package] = Field(default_factory=list)
    workspace_members: list[str] = Field(default_factory=list)
    # Only reported by cargo 1.71+
    workspace_default_members: list[str] | None = None
    target_directory: Path
    workspace_root: Path


__all__ = ["GUEST_METADATA_KEY", "Package", "Target", "WorkspaceMetadata"]
