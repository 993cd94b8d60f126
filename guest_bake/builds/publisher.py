"""Publishing of built guest binaries.

Each guest package gets an ``elfs`` directory next to its Cargo.toml.
Binaries are copied there under the file name the builder produced, with
the extension replaced by ``.elf``.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from guest_bake.errors import FilesystemError

if TYPE_CHECKING:
    from guest_bake.types import BuiltGuest
    from guest_bake.workspace.models import Package

logger = logging.getLogger(__name__)

ELFS_DIR_NAME = "elfs"
ELF_SUFFIX = ".elf"


def elfs_dir_for(package: Package) -> Path:
    """Return the publish directory of a package."""
    return package.manifest_dir / ELFS_DIR_NAME


def with_extension(path: Path, suffix: str) -> Path:
    """Replace the last extension of ``path``, or add one if it has none.

    A leading dot does not start an extension, so ``.hidden`` becomes
    ``.hidden.elf``.
    """
    name = path.name
    stem, dot, ext = name.rpartition(".")
    if dot and stem:
        name = stem
    return path.with_name(name + suffix)


def publish_base_path(elfs_dir: Path, guest: BuiltGuest) -> Path:
    """Return the publish path a guest's files are derived from.

    The base keeps the builder's file name; sibling files are produced by
    replacing its extension.
    """
    return elfs_dir / guest.path.name


def publish_elf(guest: BuiltGuest, elfs_dir: Path) -> Path:
    """Copy a built guest binary into the publish directory.

    Existing files are overwritten.

    Args:
        guest: Built guest reported by the builder.
        elfs_dir: Publish directory of the package.

    Returns:
        Path to the published ``.elf`` file.

    Raises:
        FilesystemError: If the directory cannot be created or the copy fails.
    """
    target = with_extension(publish_base_path(elfs_dir, guest), ELF_SUFFIX)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(
            f"Failed to create directory {target.parent}: {e}", path=target.parent
        ) from e

    try:
        shutil.copyfile(guest.path, target)
    except OSError as e:
        raise FilesystemError(
            f"Failed to copy {guest.path} to {target}: {e}", path=target
        ) from e

    logger.info("Published %s", target)
    return target


__all__ = [
    "ELFS_DIR_NAME",
    "ELF_SUFFIX",
    "elfs_dir_for",
    "publish_base_path",
    "publish_elf",
    "with_extension",
]
