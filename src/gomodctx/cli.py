"""Command-line front end.

Results go to stdout (one line, empty when nothing could be determined);
logs and user notifications go to stderr.
"""

from __future__ import annotations

import asyncio
import os
from typing import TYPE_CHECKING, Annotated

import typer

from gomodctx import __version__
from gomodctx.config import Settings
from gomodctx.host import LogNotifier, TerminalNotifier
from gomodctx.logs import configure_logging
from gomodctx.session import open_session

if TYPE_CHECKING:
    from gomodctx.models.resolution import Resolution

app = typer.Typer(
    name="gomodctx",
    help="Resolve Go module roots and package import paths.",
    no_args_is_help=True,
    add_completion=False,
)

InteractiveOption = Annotated[
    bool,
    typer.Option("--interactive/--no-interactive", help="Ask before changing tooling."),
]
DetailOption = Annotated[
    bool,
    typer.Option("--detail", help="Also print how the answer was found."),
]


def _settings() -> Settings:
    settings = Settings()
    configure_logging(settings.logging)
    return settings


def _emit(resolution: Resolution, detail: bool) -> None:
    value = resolution.value or ""
    typer.echo(f"{value}\t{resolution.outcome}" if detail else value)
    if not resolution.found:
        raise typer.Exit(code=1)


@app.command("module")
def module_command(
    file: Annotated[str, typer.Argument(help="Go source file.")],
    interactive: InteractiveOption = False,
    detail: DetailOption = False,
) -> None:
    """Print the module root of FILE."""
    settings = _settings()
    notifier = TerminalNotifier() if interactive else LogNotifier()

    async def run() -> Resolution:
        async with open_session(settings, notifier=notifier) as session:
            return await session.modules.resolve(os.path.abspath(file))

    _emit(asyncio.run(run()), detail)


@app.command("package")
def package_command(
    directory: Annotated[str, typer.Argument(help="Package directory.")] = ".",
    detail: DetailOption = False,
) -> None:
    """Print the import path of the package in DIRECTORY."""
    settings = _settings()

    async def run() -> Resolution:
        async with open_session(settings) as session:
            return await session.packages.resolve(os.path.abspath(directory))

    _emit(asyncio.run(run()), detail)


@app.command("go-version")
def go_version_command() -> None:
    """Print the toolchain version used for module detection."""
    settings = _settings()

    async def run() -> str | None:
        async with open_session(settings) as session:
            version = await session.toolchain.go_version()
            return str(version) if version else None

    version = asyncio.run(run())
    if version is None:
        typer.echo("unknown", err=True)
        raise typer.Exit(code=1)
    typer.echo(version)


@app.command("version")
def version_command() -> None:
    """Print the gomodctx version."""
    typer.echo(__version__)
