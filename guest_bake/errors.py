"""Error types for guest_bake.

Every error carries a stable ``code`` so callers (and ``--json`` output)
can handle failures programmatically. All of them are fatal to a bake run.
"""

from pathlib import Path
from typing import Any

# Error code constants
METADATA_ERROR = "metadata_error"
BUILD_ERROR = "build_failed"
FILESYSTEM_ERROR = "filesystem_error"


class BakeError(Exception):
    """Base error for bake operations."""

    def __init__(self, message: str, code: str = "bake_error") -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"code": self.code, "message": self.message}


class MetadataResolutionError(BakeError):
    """Raised when the workspace package graph cannot be resolved."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code=METADATA_ERROR)


class BuildError(BakeError):
    """Raised when the builder fails for a specific package."""

    def __init__(
        self,
        message: str,
        package: str | None = None,
        exit_code: int | None = None,
        log_path: Path | None = None,
    ) -> None:
        super().__init__(message, code=BUILD_ERROR)
        self.package = package
        self.exit_code = exit_code
        self.log_path = log_path

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.package is not None:
            result["package"] = self.package
        if self.exit_code is not None:
            result["exit_code"] = self.exit_code
        if self.log_path is not None:
            result["log_path"] = str(self.log_path)
        return result


class FilesystemError(BakeError):
    """Raised when a directory, copy or file write operation fails."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(message, code=FILESYSTEM_ERROR)
        self.path = path

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["path"] = str(self.path)
        return result


__all__ = [
    "BUILD_ERROR",
    "BakeError",
    "BuildError",
    "FILESYSTEM_ERROR",
    "FilesystemError",
    "METADATA_ERROR",
    "MetadataResolutionError",
]
