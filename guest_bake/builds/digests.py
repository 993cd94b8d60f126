"""Image identifier files for published guests.

For a published ``<name>.elf`` this writes:
- ``<name>.iid`` with the legacy image ID, unless it is the zero digest
- ``<name>.uid`` or ``<name>.kid`` with the v2 image ID, depending on
  whether the guest is a user-space or kernel-space image

Files contain the raw digest bytes and are replaced on every run. Identifier
files left over from an earlier bake that no longer apply are removed, so a
guest never has both a ``.uid`` and a ``.kid``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from guest_bake.builds.publisher import with_extension
from guest_bake.errors import FilesystemError
from guest_bake.types import BuiltGuest, Digest, KernelImageId, UserImageId

logger = logging.getLogger(__name__)

LEGACY_IMAGE_ID_SUFFIX = ".iid"


def write_digest(path: Path, digest: Digest) -> Path:
    """Write a digest's raw bytes to ``path``, truncating any existing file.

    Raises:
        FilesystemError: If the file cannot be written.
    """
    try:
        path.write_bytes(digest.as_bytes())
    except OSError as e:
        raise FilesystemError(f"Failed to write {path}: {e}", path=path) from e
    logger.debug("Wrote %s (%s)", path.name, digest.hex())
    return path


def _remove_stale(path: Path) -> None:
    try:
        if path.exists():
            path.unlink()
            logger.debug("Removed stale %s", path.name)
    except OSError as e:
        raise FilesystemError(f"Failed to remove {path}: {e}", path=path) from e


def image_id_paths(base_path: Path, guest: BuiltGuest) -> tuple[Path, Path]:
    """Return the v2 image ID path to write and the one that must not exist.

    Returns:
        Tuple of (path for the reported variant, path for the other variant).
    """
    uid_path = with_extension(base_path, UserImageId.suffix)
    kid_path = with_extension(base_path, KernelImageId.suffix)

    match guest.v2_image_id:
        case UserImageId():
            return uid_path, kid_path
        case KernelImageId():
            return kid_path, uid_path
    raise TypeError(f"Unknown image ID variant: {guest.v2_image_id!r}")


def write_digests(guest: BuiltGuest, base_path: Path) -> tuple[Path | None, Path]:
    """Write the identifier files of a published guest.

    Args:
        guest: Built guest reported by the builder.
        base_path: Publish path the sibling files are derived from.

    Returns:
        Tuple of (legacy ``.iid`` path or None, ``.uid``/``.kid`` path).

    Raises:
        FilesystemError: If any file cannot be written.
    """
    legacy_path: Path | None = with_extension(base_path, LEGACY_IMAGE_ID_SUFFIX)
    if guest.image_id != Digest.ZERO:
        write_digest(legacy_path, guest.image_id)
    else:
        _remove_stale(legacy_path)
        legacy_path = None

    id_path, other_path = image_id_paths(base_path, guest)
    write_digest(id_path, guest.v2_image_id.digest)
    _remove_stale(other_path)

    return legacy_path, id_path


__all__ = [
    "LEGACY_IMAGE_ID_SUFFIX",
    "image_id_paths",
    "write_digest",
    "write_digests",
]
