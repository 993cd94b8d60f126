"""Shared type definitions for guest_bake.

This module contains the digest and image identifier types, the build
options handed to a builder and the build result it reports back.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import ClassVar

DIGEST_LEN = 32


@dataclass(frozen=True)
class Digest:
    """Fixed-length content hash of a guest binary.

    Equality is byte-wise equality of the underlying value.
    """

    value: bytes

    ZERO: ClassVar[Digest]

    def __post_init__(self) -> None:
        if len(self.value) != DIGEST_LEN:
            raise ValueError(
                f"digest must be {DIGEST_LEN} bytes, got {len(self.value)}"
            )

    @classmethod
    def from_hex(cls, text: str) -> Digest:
        """Parse a digest from its hex representation."""
        return cls(bytes.fromhex(text))

    def as_bytes(self) -> bytes:
        return self.value

    def hex(self) -> str:
        return self.value.hex()

    def __str__(self) -> str:
        return self.hex()


# Legacy image IDs use the all-zero digest to mean "not applicable".
Digest.ZERO = Digest(bytes(DIGEST_LEN))


class ImageIdKind(str, Enum):
    """Execution context an image identifier applies to."""

    USER = "user"
    KERNEL = "kernel"


@dataclass(frozen=True)
class UserImageId:
    """Image identifier of a user-space guest."""

    digest: Digest

    kind: ClassVar[ImageIdKind] = ImageIdKind.USER
    suffix: ClassVar[str] = ".uid"


@dataclass(frozen=True)
class KernelImageId:
    """Image identifier of a kernel-space guest."""

    digest: Digest

    kind: ClassVar[ImageIdKind] = ImageIdKind.KERNEL
    suffix: ClassVar[str] = ".kid"


ImageId = UserImageId | KernelImageId


def make_image_id(kind: ImageIdKind | str, digest: Digest) -> ImageId:
    """Build the image identifier case matching ``kind``.

    Raises:
        ValueError: If kind is not a known image identifier kind.
    """
    kind = ImageIdKind(kind)
    if kind is ImageIdKind.USER:
        return UserImageId(digest)
    return KernelImageId(digest)


@dataclass(frozen=True)
class DockerOptions:
    """Containerized build settings.

    Attributes:
        root_dir: Directory mounted as the root of the build container.
    """

    root_dir: Path


@dataclass(frozen=True)
class GuestOptions:
    """Options passed to the builder for one package."""

    features: tuple[str, ...] = ()
    use_docker: DockerOptions | None = None


@dataclass(frozen=True)
class BuildConfiguration:
    """Per-invocation build configuration, built once from CLI input.

    Attributes:
        features: Selected cargo feature flags.
        all_features: Activate all available features.
        no_default_features: Do not activate the default feature.
        docker: Compile inside a container for reproducible output.
    """

    features: tuple[str, ...] = ()
    all_features: bool = False
    no_default_features: bool = False
    docker: bool = False


@dataclass(frozen=True)
class BuiltGuest:
    """A guest binary reported by the builder.

    Attributes:
        path: Location of the produced binary in the scratch directory.
        image_id: Legacy image ID, ``Digest.ZERO`` when not applicable.
        v2_image_id: User-space or kernel-space image identifier.
    """

    path: Path
    image_id: Digest
    v2_image_id: ImageId


__all__ = [
    "BuildConfiguration",
    "BuiltGuest",
    "DIGEST_LEN",
    "Digest",
    "DockerOptions",
    "GuestOptions",
    "ImageId",
    "ImageIdKind",
    "KernelImageId",
    "UserImageId",
    "make_image_id",
]
