"""Workspace metadata resolution via ``cargo metadata``.

This module handles:
- Composing the ``cargo metadata`` command from the CLI selection
- Executing it with subprocess
- Parsing its JSON output into WorkspaceMetadata
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path

from pydantic import ValidationError

from guest_bake.errors import MetadataResolutionError
from guest_bake.types import BuildConfiguration
from guest_bake.workspace.models import WorkspaceMetadata

logger = logging.getLogger(__name__)


def compose_metadata_command(
    cargo_command: str = "cargo",
    manifest_path: Path | None = None,
    config: BuildConfiguration | None = None,
) -> list[str]:
    """Compose the ``cargo metadata`` command.

    Feature selection is forwarded so that cargo resolves the same
    dependency graph the guests will be built with.

    Args:
        cargo_command: Cargo executable (may include extra words, e.g. a
            toolchain override such as ``cargo +nightly``).
        manifest_path: Optional path to the workspace or package Cargo.toml.
        config: Optional build configuration carrying the feature flags.

    Returns:
        Command as list of strings suitable for subprocess.
    """
    cmd = [*shlex.split(cargo_command), "metadata", "--format-version", "1"]

    if manifest_path is not None:
        cmd.extend(["--manifest-path", str(manifest_path)])

    if config is not None:
        if config.features:
            cmd.extend(["--features", ",".join(config.features)])
        if config.all_features:
            cmd.append("--all-features")
        if config.no_default_features:
            cmd.append("--no-default-features")

    return cmd


def parse_metadata(raw: str) -> WorkspaceMetadata:
    """Parse ``cargo metadata`` JSON output.

    Raises:
        MetadataResolutionError: If the output is not a valid metadata document.
    """
    try:
        return WorkspaceMetadata.model_validate_json(raw)
    except ValidationError as e:
        raise MetadataResolutionError(
            f"Invalid cargo metadata output: {e.error_count()} error(s), "
            f"first: {e.errors()[0]['msg']}"
        ) from e


def resolve_metadata(
    manifest_path: Path | None = None,
    config: BuildConfiguration | None = None,
    cargo_command: str = "cargo",
) -> WorkspaceMetadata:
    """Resolve the workspace package graph.

    Args:
        manifest_path: Optional path to the workspace or package Cargo.toml.
        config: Optional build configuration carrying the feature flags.
        cargo_command: Cargo executable.

    Returns:
        Parsed WorkspaceMetadata.

    Raises:
        MetadataResolutionError: If cargo cannot be run, fails, or reports
            output that cannot be parsed.
    """
    cmd = compose_metadata_command(cargo_command, manifest_path, config)
    logger.debug("Resolving workspace metadata: %s", shlex.join(cmd))

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        raise MetadataResolutionError(
            f"cargo metadata failed with exit code {e.returncode}: "
            f"{(e.stderr or '').strip()}"
        ) from e
    except OSError as e:
        raise MetadataResolutionError(f"Failed to run cargo metadata: {e}") from e

    metadata = parse_metadata(result.stdout)
    logger.info(
        "Resolved workspace %s (%d packages)",
        metadata.workspace_root,
        len(metadata.packages),
    )
    return metadata


__all__ = ["compose_metadata_command", "parse_metadata", "resolve_metadata"]
