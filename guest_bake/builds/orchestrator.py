"""Guest build invocation.

Runs the builder for one guest package with the options derived from the
invocation's BuildConfiguration. Builds are never retried: the first
failure is propagated to the caller.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from guest_bake.errors import BakeError, BuildError
from guest_bake.types import (
    BuildConfiguration,
    BuiltGuest,
    DockerOptions,
    GuestOptions,
)

if TYPE_CHECKING:
    from guest_bake.builds.builder import Builder
    from guest_bake.workspace.models import Package, WorkspaceMetadata

logger = logging.getLogger(__name__)

# Scratch subdirectory of the cargo target directory shared by all guest builds
GUEST_TARGET_SUBDIR = "guest"


def guest_target_dir(metadata: WorkspaceMetadata) -> Path:
    """Return the scratch directory shared by every guest build of a run."""
    return metadata.target_directory / GUEST_TARGET_SUBDIR


def make_guest_options(
    config: BuildConfiguration,
    cwd: Path | None = None,
) -> GuestOptions:
    """Derive builder options from the build configuration.

    Args:
        config: Build configuration.
        cwd: Container root directory; defaults to the current working
            directory. Only used when containerized builds are requested.

    Returns:
        GuestOptions with the docker descriptor set only in docker mode.
    """
    use_docker: DockerOptions | None = None
    if config.docker:
        root_dir = cwd if cwd is not None else Path.cwd()
        use_docker = DockerOptions(root_dir=root_dir)

    return GuestOptions(features=config.features, use_docker=use_docker)


def build_guests(
    builder: Builder,
    package: Package,
    target_dir: Path,
    options: GuestOptions,
) -> list[BuiltGuest]:
    """Build one guest package.

    Args:
        builder: Builder to compile with.
        package: Guest package to build.
        target_dir: Scratch directory shared by the run.
        options: Builder options.

    Returns:
        BuiltGuest values in the order the builder reported them.

    Raises:
        BakeError: Builder errors are propagated unchanged.
        BuildError: Any other builder failure, tagged with the package name.
    """
    logger.info(
        "Baking %s (docker=%s)", package.name, options.use_docker is not None
    )
    try:
        guests = builder.build_package(package, target_dir, options)
    except BakeError:
        raise
    except Exception as e:
        raise BuildError(
            f"Failed to build {package.name}: {e}", package=package.name
        ) from e

    logger.info("Built %d guest(s) for %s", len(guests), package.name)
    return list(guests)


__all__ = [
    "GUEST_TARGET_SUBDIR",
    "build_guests",
    "guest_target_dir",
    "make_guest_options",
]
