"""Guest package selection.

This module handles:
- Partitioning workspace packages by ``--package``/``--workspace``/``--exclude``
- Filtering the included packages down to buildable guest packages

A guest package declares the ``risc0`` metadata table and at least one
binary target. Packages failing either check are skipped without error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from fnmatch import fnmatchcase

from guest_bake.workspace.models import Package, WorkspaceMetadata

logger = logging.getLogger(__name__)


class SelectionMode(str, Enum):
    """How the workspace selection flags pick the base package set."""

    DEFAULT = "default"
    ALL = "all"
    OPT_OUT = "opt-out"
    PACKAGES = "packages"


@dataclass(frozen=True)
class WorkspaceSelection:
    """Workspace partition flags.

    Attributes:
        package: Package name patterns to include (``-p``).
        workspace: Select every workspace member (``--workspace``/``--all``).
        exclude: Package name patterns to exclude (``--exclude``).
    """

    package: tuple[str, ...] = ()
    workspace: bool = False
    exclude: tuple[str, ...] = ()

    @property
    def mode(self) -> SelectionMode:
        if self.workspace:
            return SelectionMode.OPT_OUT if self.exclude else SelectionMode.ALL
        if self.package:
            return SelectionMode.PACKAGES
        if self.exclude:
            return SelectionMode.OPT_OUT
        return SelectionMode.DEFAULT


def _matches(name: str, patterns: tuple[str, ...]) -> bool:
    return any(fnmatchcase(name, pattern) for pattern in patterns)


def partition_packages(
    metadata: WorkspaceMetadata,
    selection: WorkspaceSelection,
) -> tuple[list[Package], list[Package]]:
    """Split packages into included and excluded by the selection flags.

    Args:
        metadata: Resolved workspace metadata.
        selection: Workspace partition flags.

    Returns:
        Tuple of (included, excluded), each in metadata order.
    """
    mode = selection.mode

    if mode is SelectionMode.PACKAGES:
        base_ids = {
            p.id for p in metadata.packages if _matches(p.name, selection.package)
        }
    elif mode is SelectionMode.DEFAULT and metadata.workspace_default_members:
        base_ids = set(metadata.workspace_default_members)
    else:
        base_ids = set(metadata.workspace_members)

    included: list[Package] = []
    excluded: list[Package] = []
    for package in metadata.packages:
        is_excluded = mode is SelectionMode.OPT_OUT and _matches(
            package.name, selection.exclude
        )
        if package.id in base_ids and not is_excluded:
            included.append(package)
        else:
            excluded.append(package)

    return included, excluded


def is_guest_package(package: Package) -> bool:
    """Return True if the package should be baked.

    Args:
        package: Package to check.

    Returns:
        True if it declares the guest metadata table and a binary target.
    """
    return package.has_guest_metadata() and package.has_bin_target()


def scan_guest_packages(
    metadata: WorkspaceMetadata,
    selection: WorkspaceSelection | None = None,
) -> list[Package]:
    """Select the guest packages to bake, in metadata order."""
    included, _excluded = partition_packages(
        metadata, selection or WorkspaceSelection()
    )

    guests: list[Package] = []
    for package in included:
        if is_guest_package(package):
            guests.append(package)
        else:
            logger.debug("Skipping non-guest package: %s", package.name)

    logger.info("Found %d guest package(s)", len(guests))
    return guests


__all__ = [
    "SelectionMode",
    "WorkspaceSelection",
    "is_guest_package",
    "partition_packages",
    "scan_guest_packages",
]
