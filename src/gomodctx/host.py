"""Collaborators supplied by the embedding host.

An editor integration passes its own notifier, telemetry sink and installer.
The implementations here are what the CLI and headless callers use.
"""

from __future__ import annotations

import asyncio
import tempfile
from typing import TYPE_CHECKING, Protocol

import structlog
import typer

from gomodctx.errors import toolchain_not_found_message

if TYPE_CHECKING:
    from gomodctx.models.toolchain import ToolchainVersion
    from gomodctx.toolchain import Toolchain

log = structlog.get_logger()

# tool name → import path installed by `go install`
TOOL_IMPORT_PATHS: dict[str, str] = {
    "gopls": "golang.org/x/tools/gopls",
    "goimports": "golang.org/x/tools/cmd/goimports",
    "goreturns": "github.com/sqs/goreturns",
}


class Notifier(Protocol):
    async def show_information(self, message: str, *items: str) -> str | None:
        """Show ``message`` with ``items`` as choices; return the chosen item."""
        ...


class Telemetry(Protocol):
    def send_event(self, name: str, **properties: str) -> None: ...


class ToolInstaller(Protocol):
    async def install_tools(
        self, tools: list[str], go_version: ToolchainVersion | None
    ) -> None: ...


class LogNotifier:
    """Headless notifier: logs every message and never picks a choice."""

    async def show_information(self, message: str, *items: str) -> str | None:
        log.info("user_notification", message=message, choices=list(items))
        return None


class TerminalNotifier:
    """Interactive notifier for the command line."""

    async def show_information(self, message: str, *items: str) -> str | None:
        typer.echo(message, err=True)
        if not items:
            return None
        return await asyncio.to_thread(self._choose, items)

    @staticmethod
    def _choose(items: tuple[str, ...]) -> str | None:
        for number, item in enumerate(items, start=1):
            typer.echo(f"  {number}) {item}", err=True)
        answer = typer.prompt("Choice (blank to dismiss)", default="", show_default=False, err=True)
        if answer.isdigit() and 1 <= int(answer) <= len(items):
            return items[int(answer) - 1]
        return None


class LogTelemetry:
    def send_event(self, name: str, **properties: str) -> None:
        log.info("telemetry_event", event_name=name, **properties)


class GoToolInstaller:
    """Installs Go tools with the session's own toolchain."""

    def __init__(self, toolchain: Toolchain) -> None:
        self._toolchain = toolchain

    async def install_tools(self, tools: list[str], go_version: ToolchainVersion | None) -> None:
        # `go install pkg@version` exists from go1.16 on
        use_install = go_version is None or (go_version.major, go_version.minor) >= (1, 16)
        with tempfile.TemporaryDirectory(prefix="gomodctx-install-") as workdir:
            for tool in tools:
                import_path = TOOL_IMPORT_PATHS.get(tool)
                if import_path is None:
                    log.warning("tool_install_unknown", tool=tool)
                    continue
                if use_install:
                    args = ["install", f"{import_path}@latest"]
                else:
                    args = ["get", "-u", import_path]
                result = await self._toolchain.run(args, cwd=workdir)
                if result.toolchain_missing:
                    log.warning(
                        "tool_install_failed", tool=tool, error=toolchain_not_found_message()
                    )
                    return
                if result.succeeded:
                    log.info("tool_installed", tool=tool, import_path=import_path)
                else:
                    log.warning("tool_install_failed", tool=tool, import_path=import_path)
