"""Build orchestration module.

This module handles:
- Invoking the guest builder per package
- Publishing built binaries into the package's ``elfs`` directory
- Writing legacy and v2 image identifier files
"""

from guest_bake.builds.service import BakeResult, PublishedGuest, bake

__all__ = ["BakeResult", "PublishedGuest", "bake"]
