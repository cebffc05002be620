"""Module root detection for Go source files.

A lookup walks a fixed sequence of strategies until one produces a
``Resolution``:

    cache → module cache prefix → toolchain version gate → ``go env GOMOD``

The result, whichever strategy produced it, is stored for the file's
directory and never replaced for the rest of the session. A missing `go`
binary is the only outcome left unstored. Concurrent lookups
for the same directory are not merged; each may probe, and the first write
wins.
"""

from __future__ import annotations

import os
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

import structlog

from gomodctx.errors import toolchain_not_found_message
from gomodctx.models.resolution import Resolution, ResolutionOutcome
from gomodctx.toolchain import fix_drive_casing
from gomodctx.workspace import (
    FORMAT_TOOL,
    INFER_GOPATH,
    USE_LANGUAGE_SERVER,
    ConfigurationTarget,
)

if TYPE_CHECKING:
    from gomodctx.host import Notifier, Telemetry
    from gomodctx.prompts import ToolPromptGate
    from gomodctx.tasks import BackgroundTasks
    from gomodctx.toolchain import Toolchain
    from gomodctx.workspace import WorkspaceConfiguration

log = structlog.get_logger()

MODULES_TELEMETRY_EVENT = "modules"

INFER_GOPATH_DISABLED_MESSAGE = (
    'The "inferGopath" setting is disabled for this workspace because Go modules are being used.'
)
FORMAT_TOOL_SWITCHED_MESSAGE = (
    "`goreturns` doesn't support auto-importing missing imports when using Go modules yet. "
    'So updating the "formatTool" setting to `goimports` for this workspace.'
)
LANGUAGE_SERVER_PROMPT = (
    "To get better performance during code completion, "
    "please update to use the language server from Google"
)

Strategy = Callable[[str, str], Awaitable[Resolution | None]]

# A cache hit is already stored; a missing binary may be fixed mid-session.
_UNCACHED = (ResolutionOutcome.CACHED, ResolutionOutcome.TOOLCHAIN_NOT_FOUND)


class ModuleResolver:
    def __init__(
        self,
        toolchain: Toolchain,
        configuration: WorkspaceConfiguration,
        notifier: Notifier,
        telemetry: Telemetry,
        prompts: ToolPromptGate,
        background: BackgroundTasks,
    ) -> None:
        self._toolchain = toolchain
        self._configuration = configuration
        self._notifier = notifier
        self._telemetry = telemetry
        self._prompts = prompts
        self._cache: dict[str, str | None] = {}
        self._usage_logged = False
        self._background = background
        self._strategies: list[tuple[str, Strategy]] = [
            ("cache", self._from_cache),
            ("module_cache", self._from_module_cache),
            ("version_gate", self._check_version),
            ("probe", self._probe),
        ]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def resolve(self, file_path: str) -> Resolution:
        """Resolve the module root of the module containing ``file_path``."""
        pkg_path = os.path.dirname(file_path)
        resolution = Resolution(value=None, outcome=ResolutionOutcome.PROBE_FAILED)
        for name, strategy in self._strategies:
            found = await strategy(file_path, pkg_path)
            if found is not None:
                log.debug(
                    "module_resolved", path=pkg_path, strategy=name, outcome=str(found.outcome)
                )
                resolution = found
                break

        if resolution.outcome not in _UNCACHED:
            self._cache.setdefault(pkg_path, resolution.value)
        return resolution

    async def get_mod_folder_path(self, file_path: str) -> str | None:
        resolution = await self.resolve(file_path)
        return resolution.value or None

    async def is_mod_supported(self, file_path: str) -> bool:
        return (await self.resolve(file_path)).found

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    async def _from_cache(self, file_path: str, pkg_path: str) -> Resolution | None:
        if pkg_path in self._cache:
            return Resolution(value=self._cache[pkg_path], outcome=ResolutionOutcome.CACHED)
        return None

    async def _from_module_cache(self, file_path: str, pkg_path: str) -> Resolution | None:
        # Sources under the module cache are read-only dependencies; no need
        # to find their go.mod.
        module_cache = self._toolchain.module_cache_root()
        if fix_drive_casing(file_path).startswith(module_cache):
            return Resolution(value=module_cache, outcome=ResolutionOutcome.MODULE_CACHE)
        return None

    async def _check_version(self, file_path: str, pkg_path: str) -> Resolution | None:
        version = await self._toolchain.go_version()
        if version is not None and not version.supports_modules:
            return Resolution(value="", outcome=ResolutionOutcome.UNSUPPORTED_VERSION)
        return None

    async def _probe(self, file_path: str, pkg_path: str) -> Resolution | None:
        result = await self._toolchain.run(["env", "GOMOD"], cwd=pkg_path)
        if result.toolchain_missing:
            self._background.spawn(
                self._notifier.show_information(toolchain_not_found_message()),
                name="toolchain_not_found",
            )
            return Resolution(value=None, outcome=ResolutionOutcome.TOOLCHAIN_NOT_FOUND)
        if not result.succeeded:
            return Resolution(value=None, outcome=ResolutionOutcome.PROBE_FAILED)

        go_mod = result.stdout.split("\n", 1)[0].strip()
        # With GO111MODULE=on, go reports os.DevNull outside any module.
        if not go_mod or go_mod == os.devnull:
            return Resolution(value="", outcome=ResolutionOutcome.NOT_A_MODULE)

        self._log_module_usage()
        self._apply_advisories()
        return Resolution(value=os.path.dirname(go_mod), outcome=ResolutionOutcome.RESOLVED)

    # ------------------------------------------------------------------
    # Side effects of a positive probe
    # ------------------------------------------------------------------

    def _log_module_usage(self) -> None:
        if self._usage_logged:
            return
        self._usage_logged = True
        self._telemetry.send_event(MODULES_TELEMETRY_EVENT)

    def _apply_advisories(self) -> None:
        config = self._configuration
        if config.get(INFER_GOPATH) is True:
            config.update(INFER_GOPATH, False, ConfigurationTarget.WORKSPACE_FOLDER)
            self._background.spawn(
                self._notifier.show_information(INFER_GOPATH_DISABLED_MESSAGE),
                name="infer_gopath_disabled",
            )
        if config.get(FORMAT_TOOL) == "goreturns":
            config.update(FORMAT_TOOL, "goimports", ConfigurationTarget.WORKSPACE_FOLDER)
            self._background.spawn(
                self._notifier.show_information(FORMAT_TOOL_SWITCHED_MESSAGE),
                name="format_tool_switched",
            )
        if config.get(USE_LANGUAGE_SERVER) is False:
            self._background.spawn(
                self._prompts.offer_tool_update("gopls", LANGUAGE_SERVER_PROMPT),
                name="offer_gopls",
            )
