"""Per-session wiring.

One ``Session`` owns everything whose lifetime is "this editor session":
the lookup caches, the prompted-this-session set, the fire-once telemetry
flag and the connection to the persisted state. Hosts create one with
``open_session`` and pass it to whatever needs module information.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from gomodctx.global_state import GlobalState, open_state_db
from gomodctx.host import GoToolInstaller, LogNotifier, LogTelemetry
from gomodctx.modules import ModuleResolver
from gomodctx.packages import PackageResolver
from gomodctx.prompts import ToolPromptGate
from gomodctx.tasks import BackgroundTasks
from gomodctx.toolchain import Toolchain
from gomodctx.workspace import WorkspaceConfiguration

if TYPE_CHECKING:
    from gomodctx.config import Settings
    from gomodctx.host import Notifier, Telemetry, ToolInstaller

log = structlog.get_logger()


@dataclass
class Session:
    settings: Settings
    toolchain: Toolchain
    state: GlobalState
    configuration: WorkspaceConfiguration
    prompts: ToolPromptGate
    modules: ModuleResolver
    packages: PackageResolver
    background: BackgroundTasks

    async def drain(self) -> None:
        """Wait for pending messages and prompts."""
        await self.background.drain()


@asynccontextmanager
async def open_session(
    settings: Settings,
    *,
    notifier: Notifier | None = None,
    telemetry: Telemetry | None = None,
    installer: ToolInstaller | None = None,
    toolchain: Toolchain | None = None,
    configuration: WorkspaceConfiguration | None = None,
) -> AsyncIterator[Session]:
    toolchain = toolchain or Toolchain(settings.toolchain)
    notifier = notifier or LogNotifier()
    telemetry = telemetry or LogTelemetry()
    installer = installer or GoToolInstaller(toolchain)
    configuration = configuration or WorkspaceConfiguration(settings.go)
    background = BackgroundTasks()

    db = await open_state_db(settings.state.db_path)
    try:
        state = GlobalState(db)
        await state.init_db()

        prompts = ToolPromptGate(state, configuration, notifier, installer, toolchain)
        session = Session(
            settings=settings,
            toolchain=toolchain,
            state=state,
            configuration=configuration,
            prompts=prompts,
            modules=ModuleResolver(
                toolchain, configuration, notifier, telemetry, prompts, background
            ),
            packages=PackageResolver(toolchain, notifier, background),
            background=background,
        )
        log.debug("session_opened", db_path=settings.state.db_path)
        yield session
    finally:
        # Prompts still write to the state db; let them finish first, even
        # when the host's block raised.
        try:
            await background.drain()
        finally:
            await db.close()
