"""Bake service module.

This module provides the high-level bake API:
- bake(): scan the workspace, build each guest package and publish its
  binaries and image identifiers

Packages are processed one at a time in workspace order. The first error
stops the run; packages published before it keep their files.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from guest_bake.builds.digests import write_digests
from guest_bake.builds.orchestrator import (
    build_guests,
    guest_target_dir,
    make_guest_options,
)
from guest_bake.builds.publisher import elfs_dir_for, publish_base_path, publish_elf
from guest_bake.types import BuildConfiguration, BuiltGuest, ImageIdKind
from guest_bake.workspace.scanner import WorkspaceSelection, scan_guest_packages

if TYPE_CHECKING:
    from guest_bake.builds.builder import Builder
    from guest_bake.workspace.models import Package, WorkspaceMetadata

logger = logging.getLogger(__name__)


class PublishedGuest(BaseModel):
    """Files written for one built guest."""

    package: str
    elf_path: Path
    image_id_kind: ImageIdKind
    image_id_path: Path
    image_id: str = Field(description="Hex v2 image ID")
    legacy_image_id_path: Path | None = None


class BakeResult(BaseModel):
    """Result of a bake run."""

    target_dir: Path
    packages: list[str] = Field(default_factory=list)
    guests: list[PublishedGuest] = Field(default_factory=list)


def publish_guest(package: Package, guest: BuiltGuest) -> PublishedGuest:
    """Publish one built guest and write its identifier files."""
    elfs_dir = elfs_dir_for(package)
    elf_path = publish_elf(guest, elfs_dir)
    legacy_path, id_path = write_digests(guest, publish_base_path(elfs_dir, guest))

    return PublishedGuest(
        package=package.name,
        elf_path=elf_path,
        image_id_kind=guest.v2_image_id.kind,
        image_id_path=id_path,
        image_id=guest.v2_image_id.digest.hex(),
        legacy_image_id_path=legacy_path,
    )


def bake(
    metadata: WorkspaceMetadata,
    builder: Builder,
    config: BuildConfiguration | None = None,
    selection: WorkspaceSelection | None = None,
    cwd: Path | None = None,
) -> BakeResult:
    """Build and publish every guest package in the workspace.

    Args:
        metadata: Resolved workspace metadata.
        builder: Builder to compile with.
        config: Build configuration; defaults to no features, no docker.
        selection: Workspace partition flags; defaults to default members.
        cwd: Container root for docker builds; defaults to the current
            working directory.

    Returns:
        BakeResult listing the baked packages and published files.

    Raises:
        BakeError: On the first build or filesystem failure.
    """
    config = config or BuildConfiguration()
    target_dir = guest_target_dir(metadata)
    options = make_guest_options(config, cwd=cwd)

    result = BakeResult(target_dir=target_dir)
    for package in scan_guest_packages(metadata, selection):
        for guest in build_guests(builder, package, target_dir, options):
            result.guests.append(publish_guest(package, guest))
        result.packages.append(package.name)

    logger.info(
        "Baked %d guest(s) from %d package(s)",
        len(result.guests),
        len(result.packages),
    )
    return result


__all__ = ["BakeResult", "PublishedGuest", "bake", "publish_guest"]
