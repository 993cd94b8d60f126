"""Tests for builds/digests.py module."""

from unittest.mock import patch

import pytest

from conftest import digest_of
from guest_bake.builds.digests import image_id_paths, write_digest, write_digests
from guest_bake.errors import FilesystemError
from guest_bake.types import BuiltGuest, Digest, KernelImageId, UserImageId


def built(tmp_path, image_id, v2_image_id) -> BuiltGuest:
    return BuiltGuest(
        path=tmp_path / "scratch" / "guest",
        image_id=image_id,
        v2_image_id=v2_image_id,
    )


class TestWriteDigest:
    """Tests for write_digest function."""

    def test_writes_raw_bytes(self, tmp_path):
        path = write_digest(tmp_path / "g.uid", digest_of(0x42))
        assert path.read_bytes() == b"\x42" * 32

    def test_truncates(self, tmp_path):
        path = tmp_path / "g.uid"
        path.write_bytes(b"\xff" * 64)

        write_digest(path, digest_of(0x01))

        assert path.read_bytes() == b"\x01" * 32

    def test_write_failure(self, tmp_path):
        path = tmp_path / "missing-dir" / "g.uid"
        with pytest.raises(FilesystemError) as exc_info:
            write_digest(path, digest_of(0x01))
        assert exc_info.value.path == path


class TestImageIdPaths:
    """Tests for image_id_paths function."""

    def test_user(self, tmp_path, user_id):
        guest = built(tmp_path, Digest.ZERO, user_id)
        assert image_id_paths(tmp_path / "g", guest) == (
            tmp_path / "g.uid",
            tmp_path / "g.kid",
        )

    def test_kernel(self, tmp_path, kernel_id):
        guest = built(tmp_path, Digest.ZERO, kernel_id)
        assert image_id_paths(tmp_path / "g", guest) == (
            tmp_path / "g.kid",
            tmp_path / "g.uid",
        )


class TestWriteDigests:
    """Tests for write_digests function."""

    def test_legacy_and_user(self, tmp_path, user_id):
        guest = built(tmp_path, digest_of(0x11), user_id)

        legacy, id_path = write_digests(guest, tmp_path / "guest")

        assert legacy == tmp_path / "guest.iid"
        assert legacy.read_bytes() == b"\x11" * 32
        assert id_path == tmp_path / "guest.uid"
        assert id_path.read_bytes() == user_id.digest.as_bytes()
        assert not (tmp_path / "guest.kid").exists()

    def test_zero_legacy_and_kernel(self, tmp_path):
        """Zero legacy ID and kernel ID K yield only a .kid with K's bytes."""
        k = KernelImageId(digest_of(0x4B))
        guest = built(tmp_path, Digest.ZERO, k)

        legacy, id_path = write_digests(guest, tmp_path / "guest")

        assert legacy is None
        assert id_path == tmp_path / "guest.kid"
        assert id_path.read_bytes() == b"\x4b" * 32
        assert sorted(p.name for p in tmp_path.iterdir()) == ["guest.kid"]

    def test_variant_switch_removes_other_file(self, tmp_path, user_id, kernel_id):
        """A guest never ends up with both .uid and .kid."""
        write_digests(built(tmp_path, Digest.ZERO, user_id), tmp_path / "guest")
        write_digests(built(tmp_path, Digest.ZERO, kernel_id), tmp_path / "guest")

        assert (tmp_path / "guest.kid").exists()
        assert not (tmp_path / "guest.uid").exists()

    def test_zero_legacy_removes_stale_iid(self, tmp_path, user_id):
        write_digests(built(tmp_path, digest_of(0x11), user_id), tmp_path / "guest")
        write_digests(built(tmp_path, Digest.ZERO, user_id), tmp_path / "guest")

        assert not (tmp_path / "guest.iid").exists()

    def test_base_with_extension(self, tmp_path, user_id):
        """Sibling files replace the base name's extension."""
        guest = built(tmp_path, digest_of(0x11), user_id)

        legacy, id_path = write_digests(guest, tmp_path / "guest.bin")

        assert legacy == tmp_path / "guest.iid"
        assert id_path == tmp_path / "guest.uid"

    def test_idempotent(self, tmp_path, kernel_id):
        guest = built(tmp_path, digest_of(0x11), kernel_id)

        write_digests(guest, tmp_path / "guest")
        first = {p.name: p.read_bytes() for p in tmp_path.iterdir()}
        write_digests(guest, tmp_path / "guest")
        second = {p.name: p.read_bytes() for p in tmp_path.iterdir()}

        assert first == second

    def test_write_failure_propagates(self, tmp_path, user_id):
        guest = built(tmp_path, Digest.ZERO, user_id)
        with patch("pathlib.Path.write_bytes", side_effect=OSError("read-only")):
            with pytest.raises(FilesystemError, match="read-only"):
                write_digests(guest, tmp_path / "guest")
