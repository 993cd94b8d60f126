"""Thin CLI wrapper for guest_bake.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
import logging
import re
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from guest_bake import __version__
from guest_bake.config import get_settings, print_settings_json

app = typer.Typer(
    name="guest-bake",
    help="Guest Bake - build guest programs and publish their image IDs",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"guest-bake version {__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    """Send log records to stderr through Rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def split_features(values: list[str] | None) -> tuple[str, ...]:
    """Split ``--features`` values given as comma or space separated lists."""
    features: list[str] = []
    for value in values or []:
        features.extend(f for f in re.split(r"[,\s]+", value) if f)
    return tuple(features)


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Override the configured log level"),
    ] = None,
) -> None:
    """Guest Bake - build guest programs and publish their image IDs."""
    settings = get_settings()
    configure_logging((log_level or settings.log_level).upper())


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        typer.echo(print_settings_json(settings))
    else:
        console.print("[bold]Effective Configuration:[/bold]")
        console.print()
        console.print("[bold]Tools:[/bold]")
        console.print(f"  Cargo command:       {settings.cargo_command}")
        console.print(f"  Builder command:     {settings.builder_command}")
        console.print()
        console.print("[bold]Operational:[/bold]")
        console.print(f"  Log level:           {settings.log_level}")


@app.command()
def bake(
    manifest_path: Annotated[
        Path | None,
        typer.Option("--manifest-path", help="Path to Cargo.toml"),
    ] = None,
    package: Annotated[
        list[str] | None,
        typer.Option("--package", "-p", help="Package to bake (can be repeated)"),
    ] = None,
    workspace: Annotated[
        bool,
        typer.Option("--workspace", "--all", help="Bake all workspace members"),
    ] = False,
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", help="Exclude packages (can be repeated)"),
    ] = None,
    features: Annotated[
        list[str] | None,
        typer.Option(
            "--features", "-F", help="Comma or space separated list of features"
        ),
    ] = None,
    all_features: Annotated[
        bool,
        typer.Option("--all-features", help="Activate all available features"),
    ] = False,
    no_default_features: Annotated[
        bool,
        typer.Option(
            "--no-default-features", help="Do not activate the default feature"
        ),
    ] = False,
    docker: Annotated[
        bool,
        typer.Option(
            "--docker",
            help="Run compilation using a Docker container for reproducible builds",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Build guest packages and publish their ELFs and image IDs.

    Each guest package's binaries are written to an ``elfs`` directory next
    to its Cargo.toml, together with ``.iid`` and ``.uid``/``.kid`` files.
    """
    from guest_bake.builds.builder import SubprocessBuilder
    from guest_bake.builds.service import bake as bake_workspace
    from guest_bake.errors import BakeError
    from guest_bake.types import BuildConfiguration
    from guest_bake.workspace.metadata import resolve_metadata
    from guest_bake.workspace.scanner import WorkspaceSelection

    settings = get_settings()
    build_config = BuildConfiguration(
        features=split_features(features),
        all_features=all_features,
        no_default_features=no_default_features,
        docker=docker,
    )
    selection = WorkspaceSelection(
        package=tuple(package or ()),
        workspace=workspace,
        exclude=tuple(exclude or ()),
    )

    try:
        metadata = resolve_metadata(
            manifest_path=manifest_path,
            config=build_config,
            cargo_command=settings.cargo_command,
        )
        result = bake_workspace(
            metadata,
            SubprocessBuilder(settings.builder_command),
            config=build_config,
            selection=selection,
        )
    except BakeError as e:
        if json_output:
            typer.echo(json.dumps({"error": e.to_dict()}, indent=2))
        else:
            console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(code=1) from None

    if json_output:
        typer.echo(result.model_dump_json(indent=2))
        return

    if not result.packages:
        console.print("[yellow]No guest packages found[/yellow]")
        return

    console.print(
        f"[bold]Baked {len(result.guests)} guest(s) "
        f"from {len(result.packages)} package(s):[/bold]"
    )
    for g in result.guests:
        console.print(f"  [green]{g.elf_path}[/green]")
        console.print(f"    {g.image_id_kind.value} ID: {g.image_id}")


@app.command()
def compat(
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the bundle files to a directory"),
    ] = None,
) -> None:
    """Show or export the precompiled v1 compatibility guest."""
    from guest_bake.v1compat import V1COMPAT_ELF, V1COMPAT_V2_KERNEL_ID

    console.print(f"v1compat.elf: {len(V1COMPAT_ELF)} bytes")
    console.print(f"kernel ID:    {V1COMPAT_V2_KERNEL_ID.hex()}")

    if output is None:
        return

    try:
        output.mkdir(parents=True, exist_ok=True)
        (output / "v1compat.elf").write_bytes(V1COMPAT_ELF)
        (output / "v1compat.kid").write_bytes(V1COMPAT_V2_KERNEL_ID)
    except OSError as e:
        console.print(f"[red]Error: Failed to write {output}: {e}[/red]")
        raise typer.Exit(code=1) from None
    console.print(f"[green]Wrote v1compat bundle to {output}[/green]")
