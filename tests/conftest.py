"""Shared fixtures for guest_bake tests."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from guest_bake.types import (
    BuiltGuest,
    Digest,
    GuestOptions,
    KernelImageId,
    UserImageId,
)
from guest_bake.workspace.models import Package, Target, WorkspaceMetadata


def digest_of(byte: int) -> Digest:
    """Create a digest filled with a single byte value."""
    return Digest(bytes([byte]) * 32)


class FakeBuilder:
    """Builder that writes canned binaries instead of compiling."""

    def __init__(
        self,
        outputs: dict[str, list[tuple[str, bytes, Digest, Any]]] | None = None,
        fail_for: set[str] | None = None,
    ) -> None:
        self.outputs = outputs or {}
        self.fail_for = fail_for or set()
        self.calls: list[tuple[str, Path, GuestOptions]] = []

    def build_package(
        self,
        package: Package,
        target_dir: Path,
        options: GuestOptions,
    ) -> list[BuiltGuest]:
        self.calls.append((package.name, target_dir, options))
        if package.name in self.fail_for:
            raise RuntimeError(f"toolchain exploded for {package.name}")

        out_dir = target_dir / package.name / "release"
        out_dir.mkdir(parents=True, exist_ok=True)
        guests: list[BuiltGuest] = []
        for file_name, data, image_id, v2_image_id in self.outputs.get(
            package.name, []
        ):
            path = out_dir / file_name
            path.write_bytes(data)
            guests.append(
                BuiltGuest(path=path, image_id=image_id, v2_image_id=v2_image_id)
            )
        return guests


@pytest.fixture
def make_package(tmp_path: Path) -> Callable[..., Package]:
    """Factory for packages with a real manifest directory under tmp_path."""

    def _make(
        name: str,
        metadata: dict[str, Any] | None = None,
        target_kinds: list[list[str]] | None = None,
    ) -> Package:
        pkg_dir = tmp_path / "ws" / name
        pkg_dir.mkdir(parents=True, exist_ok=True)
        manifest = pkg_dir / "Cargo.toml"
        manifest.write_text(f'[package]\nname = "{name}"\n')
        kinds = target_kinds if target_kinds is not None else [["bin"]]
        return Package(
            id=f"{name} 0.1.0 (path+file://{pkg_dir})",
            name=name,
            version="0.1.0",
            manifest_path=manifest,
            metadata=metadata,
            targets=[Target(name=f"{name}-{i}", kind=k) for i, k in enumerate(kinds)],
        )

    return _make


@pytest.fixture
def make_metadata(tmp_path: Path) -> Callable[..., WorkspaceMetadata]:
    """Factory for workspace metadata over a list of packages."""

    def _make(
        packages: list[Package],
        default_members: list[str] | None = None,
    ) -> WorkspaceMetadata:
        return WorkspaceMetadata(
            packages=packages,
            workspace_members=[p.id for p in packages],
            workspace_default_members=default_members,
            target_directory=tmp_path / "ws" / "target",
            workspace_root=tmp_path / "ws",
        )

    return _make


@pytest.fixture
def user_id() -> UserImageId:
    return UserImageId(digest_of(0xAA))


@pytest.fixture
def kernel_id() -> KernelImageId:
    return KernelImageId(digest_of(0xBB))
