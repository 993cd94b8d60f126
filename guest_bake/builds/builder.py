"""Builder capability for compiling guest packages.

This module handles:
- The Builder protocol the bake pipeline compiles through
- Composing the external guest builder command
- Executing it with subprocess, capturing diagnostics to a log file
- Parsing the JSON build report into BuiltGuest values

The external builder prints a JSON array on stdout, one entry per produced
binary::

    [{"path": "...", "image_id": "<hex>",
      "v2_image_id": {"kind": "user" | "kernel", "digest": "<hex>"}}]

``image_id`` may be omitted, meaning the legacy ID is not applicable.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from pydantic import (
    BaseModel,
    ConfigDict,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from guest_bake.errors import BuildError
from guest_bake.types import (
    DIGEST_LEN,
    BuiltGuest,
    Digest,
    GuestOptions,
    ImageIdKind,
    make_image_id,
)
from guest_bake.workspace.models import Package

logger = logging.getLogger(__name__)


class Builder(Protocol):
    """Compiles one package into guest binaries."""

    def build_package(
        self,
        package: Package,
        target_dir: Path,
        options: GuestOptions,
    ) -> list[BuiltGuest]: ...


def _validate_hex_digest(v: str) -> str:
    try:
        raw = bytes.fromhex(v)
    except ValueError:
        raise ValueError(f"digest is not valid hex: {v!r}") from None
    if len(raw) != DIGEST_LEN:
        raise ValueError(f"digest must be {DIGEST_LEN} bytes, got {len(raw)}")
    return v


class ImageIdReport(BaseModel):
    """Image identifier entry of a build report."""

    model_config = ConfigDict(extra="ignore")

    kind: ImageIdKind
    digest: str

    @field_validator("digest")
    @classmethod
    def validate_digest(cls, v: str) -> str:
        """Validate digest is a hex string of the right length."""
        return _validate_hex_digest(v)


class GuestReport(BaseModel):
    """One built binary in a build report."""

    model_config = ConfigDict(extra="ignore")

    path: Path
    image_id: str | None = None
    v2_image_id: ImageIdReport

    @field_validator("image_id")
    @classmethod
    def validate_image_id(cls, v: str | None) -> str | None:
        """Validate legacy image ID is a hex string of the right length."""
        if v is None:
            return v
        return _validate_hex_digest(v)

    def to_built_guest(self) -> BuiltGuest:
        image_id = Digest.from_hex(self.image_id) if self.image_id else Digest.ZERO
        return BuiltGuest(
            path=self.path,
            image_id=image_id,
            v2_image_id=make_image_id(
                self.v2_image_id.kind, Digest.from_hex(self.v2_image_id.digest)
            ),
        )


_report_adapter = TypeAdapter(list[GuestReport])


def parse_build_report(raw: str, package: str | None = None) -> list[BuiltGuest]:
    """Parse the builder's JSON report.

    Args:
        raw: JSON text printed by the builder.
        package: Package name, for error context.

    Returns:
        BuiltGuest values in report order.

    Raises:
        BuildError: If the report is malformed.
    """
    try:
        entries = _report_adapter.validate_json(raw)
    except ValidationError as e:
        raise BuildError(
            f"Invalid build report for {package or 'package'}: "
            f"{e.errors()[0]['msg']}",
            package=package,
        ) from e
    return [entry.to_built_guest() for entry in entries]


def compose_builder_command(
    builder_command: str,
    package: Package,
    target_dir: Path,
    options: GuestOptions,
) -> list[str]:
    """Compose the external builder command for one package.

    Args:
        builder_command: Builder executable (may include extra words).
        package: Package to build.
        target_dir: Scratch directory for build outputs.
        options: Feature and container options.

    Returns:
        Command as list of strings suitable for subprocess.
    """
    cmd = [*shlex.split(builder_command), "build"]
    cmd.extend(["--manifest-path", str(package.manifest_path)])
    cmd.extend(["--target-dir", str(target_dir)])

    if options.features:
        cmd.extend(["--features", ",".join(options.features)])

    if options.use_docker is not None:
        cmd.append("--docker")
        cmd.extend(["--docker-root", str(options.use_docker.root_dir)])

    cmd.extend(["--message-format", "json"])
    return cmd


class SubprocessBuilder:
    """Builder that runs an external guest builder executable.

    Attributes:
        builder_command: Builder executable.
        env: Optional environment for the builder process.
    """

    def __init__(
        self,
        builder_command: str = "r0-guest-builder",
        env: dict[str, str] | None = None,
    ) -> None:
        self.builder_command = builder_command
        self.env = env

    def build_package(
        self,
        package: Package,
        target_dir: Path,
        options: GuestOptions,
    ) -> list[BuiltGuest]:
        """Build a package, blocking until the builder exits.

        Raises:
            BuildError: If the builder cannot be started, fails, or reports
                an invalid result.
        """
        log_path = target_dir / "logs" / f"{package.name}.log"

        cmd = compose_builder_command(
            self.builder_command, package, target_dir, options
        )
        cmd_str = shlex.join(cmd)
        logger.info("Building %s: %s", package.name, cmd_str)

        started_at = datetime.now(timezone.utc)

        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            with log_path.open("w") as log_file:
                log_file.write(f"# Command: {cmd_str}\n")
                log_file.write(f"# Started: {started_at.isoformat()}\n")
                log_file.write("# " + "=" * 70 + "\n\n")
                log_file.flush()

                result = subprocess.run(
                    cmd,
                    cwd=package.manifest_dir,
                    stdout=subprocess.PIPE,
                    stderr=log_file,
                    text=True,
                    env=self.env,
                    check=False,
                )
        except OSError as e:
            raise BuildError(
                f"Failed to execute builder for {package.name}: {e}",
                package=package.name,
                log_path=log_path,
            ) from e

        finished_at = datetime.now(timezone.utc)
        with log_path.open("a") as log_file:
            log_file.write(f"\n# Finished: {finished_at.isoformat()}\n")
            log_file.write(f"# Exit code: {result.returncode}\n")

        if result.returncode != 0:
            message = (
                f"Build of {package.name} failed with exit code {result.returncode}"
            )
            logger.error("%s. See log: %s", message, log_path)
            raise BuildError(
                message,
                package=package.name,
                exit_code=result.returncode,
                log_path=log_path,
            )

        return parse_build_report(result.stdout, package=package.name)


__all__ = [
    "Builder",
    "GuestReport",
    "ImageIdReport",
    "SubprocessBuilder",
    "compose_builder_command",
    "parse_build_report",
]
