"""Precompiled v1 compatibility guest.

The binary and its kernel image ID are shipped as package data and loaded
once at import. They are produced by baking the compatibility guest, so the
files follow the usual ``elfs/<name>.elf`` / ``elfs/<name>.kid`` layout.
"""

from importlib.resources import files

_ELFS = files(__package__) / "elfs"

V1COMPAT_ELF: bytes = (_ELFS / "v1compat.elf").read_bytes()
V1COMPAT_V2_KERNEL_ID: bytes = (_ELFS / "v1compat.kid").read_bytes()

__all__ = ["V1COMPAT_ELF", "V1COMPAT_V2_KERNEL_ID"]
