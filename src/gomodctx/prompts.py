"""Update prompts for tools that work better with Go modules.

A prompt for a given tool is shown at most once per session and, once the
user picks Update or Don't show again, never again. The persisted record only
ever gains tools.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from gomodctx.models.prompts import PROMPT_CHOICES, PromptChoice
from gomodctx.workspace import USE_LANGUAGE_SERVER, ConfigurationTarget

if TYPE_CHECKING:
    from gomodctx.global_state import GlobalState
    from gomodctx.host import Notifier, ToolInstaller
    from gomodctx.models.toolchain import ToolchainVersion
    from gomodctx.toolchain import Toolchain
    from gomodctx.workspace import WorkspaceConfiguration

log = structlog.get_logger()

PROMPTED_TOOLS_KEY = "promptedToolsForModules"
LANGUAGE_SERVER_TOOL = "gopls"
RELOAD_MESSAGE = "Reload the editor window to enable the use of Go language server"


class ToolPromptGate:
    def __init__(
        self,
        state: GlobalState,
        configuration: WorkspaceConfiguration,
        notifier: Notifier,
        installer: ToolInstaller,
        toolchain: Toolchain,
    ) -> None:
        self._state = state
        self._configuration = configuration
        self._notifier = notifier
        self._installer = installer
        self._toolchain = toolchain
        self._session_prompted: set[str] = set()
        self._pending: set[str] = set()

    async def prompted_tools(self) -> dict[str, bool]:
        stored = await self._state.get(PROMPTED_TOOLS_KEY, {})
        return stored if isinstance(stored, dict) else {}

    async def offer_tool_update(self, tool: str, message: str) -> PromptChoice | None:
        """Offer to update ``tool``; returns the choice, or ``None`` if not shown or dismissed."""
        if tool in self._session_prompted or tool in self._pending:
            return None

        self._pending.add(tool)
        try:
            if (await self.prompted_tools()).get(tool):
                return None

            go_version = await self._toolchain.go_version()
            selected = await self._notifier.show_information(message, *PROMPT_CHOICES)
            choice = PromptChoice(selected) if selected in PROMPT_CHOICES else None
            log.info("tool_prompt_answered", tool=tool, choice=str(choice) if choice else None)

            # Holds even when the persisted write below is dropped.
            self._session_prompted.add(tool)
            if choice is PromptChoice.UPDATE:
                await self._mark_prompted(tool)
                await self._install(tool, go_version)
            elif choice is PromptChoice.NEVER:
                await self._mark_prompted(tool)
            return choice
        finally:
            self._pending.discard(tool)

    async def _mark_prompted(self, tool: str) -> None:
        # Merge into the latest record so concurrent prompts never un-mark a tool.
        prompted = await self.prompted_tools()
        prompted[tool] = True
        await self._state.update(PROMPTED_TOOLS_KEY, prompted)

    async def _install(self, tool: str, go_version: ToolchainVersion | None) -> None:
        try:
            await self._installer.install_tools([tool], go_version)
        except Exception:
            log.warning("tool_install_error", tool=tool, exc_info=True)
            return

        if tool != LANGUAGE_SERVER_TOOL:
            return
        if self._configuration.get(USE_LANGUAGE_SERVER) is False:
            self._configuration.update(USE_LANGUAGE_SERVER, True, ConfigurationTarget.GLOBAL)
        if self._configuration.inspect(USE_LANGUAGE_SERVER).workspace_folder_value is False:
            self._configuration.update(
                USE_LANGUAGE_SERVER, True, ConfigurationTarget.WORKSPACE_FOLDER
            )
        await self._notifier.show_information(RELOAD_MESSAGE)
