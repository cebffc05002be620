"""Unit-specific fixtures (no I/O beyond in-memory SQLite, no real `go`)."""

from __future__ import annotations

import os

import aiosqlite
import pytest

from gomodctx.config import GoOptionSettings
from gomodctx.errors import ErrorCode
from gomodctx.global_state import GlobalState
from gomodctx.models.toolchain import ProcessResult, ToolchainVersion
from gomodctx.modules import ModuleResolver
from gomodctx.packages import PackageResolver
from gomodctx.prompts import ToolPromptGate
from gomodctx.tasks import BackgroundTasks
from gomodctx.workspace import WorkspaceConfiguration

GOPATH = os.path.join(os.sep, "home", "gopher", "go")
MODULE_CACHE = os.path.join(GOPATH, "pkg", "mod")


class FakeToolchain:
    """Stands in for ``Toolchain``; records every ``go`` invocation."""

    def __init__(self) -> None:
        self.version: ToolchainVersion | None = ToolchainVersion(major=1, minor=12)
        self.outputs: dict[tuple[str, ...], ProcessResult] = {}
        self.missing = False
        self.calls: list[tuple[tuple[str, ...], str]] = []

    def module_cache_root(self) -> str:
        return MODULE_CACHE

    async def go_version(self) -> ToolchainVersion | None:
        return self.version

    async def run(self, args: list[str], cwd: str) -> ProcessResult:
        if self.missing:
            return ProcessResult(succeeded=False, error=ErrorCode.TOOLCHAIN_NOT_FOUND)
        self.calls.append((tuple(args), cwd))
        return self.outputs.get(tuple(args), ProcessResult(succeeded=True, stdout=""))

    def calls_for(self, *args: str) -> list[str]:
        return [cwd for call_args, cwd in self.calls if call_args == args]


class RecordingNotifier:
    """Records messages; answers prompts with ``answer``."""

    def __init__(self) -> None:
        self.answer: str | None = None
        self.messages: list[tuple[str, tuple[str, ...]]] = []

    async def show_information(self, message: str, *items: str) -> str | None:
        self.messages.append((message, items))
        return self.answer if items else None

    @property
    def prompts(self) -> list[str]:
        return [message for message, items in self.messages if items]

    @property
    def infos(self) -> list[str]:
        return [message for message, items in self.messages if not items]


class RecordingTelemetry:
    def __init__(self) -> None:
        self.events: list[str] = []

    def send_event(self, name: str, **properties: str) -> None:
        self.events.append(name)


class RecordingInstaller:
    def __init__(self) -> None:
        self.installed: list[tuple[list[str], ToolchainVersion | None]] = []
        self.fail = False

    async def install_tools(self, tools: list[str], go_version: ToolchainVersion | None) -> None:
        if self.fail:
            raise RuntimeError("install failed")
        self.installed.append((tools, go_version))


@pytest.fixture()
async def state():
    """In-memory SQLite global state."""
    async with aiosqlite.connect(":memory:") as db:
        s = GlobalState(db)
        await s.init_db()
        yield s


@pytest.fixture()
def toolchain() -> FakeToolchain:
    return FakeToolchain()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def telemetry() -> RecordingTelemetry:
    return RecordingTelemetry()


@pytest.fixture()
def installer() -> RecordingInstaller:
    return RecordingInstaller()


@pytest.fixture()
def configuration() -> WorkspaceConfiguration:
    return WorkspaceConfiguration(GoOptionSettings())


@pytest.fixture()
async def background(state: GlobalState):
    """Background tasks, drained before the state database closes."""
    tasks = BackgroundTasks()
    yield tasks
    await tasks.drain()


@pytest.fixture()
def gate(
    state: GlobalState,
    configuration: WorkspaceConfiguration,
    notifier: RecordingNotifier,
    installer: RecordingInstaller,
    toolchain: FakeToolchain,
) -> ToolPromptGate:
    return ToolPromptGate(
        state, configuration, notifier, installer, toolchain  # type: ignore[arg-type]
    )


@pytest.fixture()
def modules(
    toolchain: FakeToolchain,
    configuration: WorkspaceConfiguration,
    notifier: RecordingNotifier,
    telemetry: RecordingTelemetry,
    gate: ToolPromptGate,
    background: BackgroundTasks,
) -> ModuleResolver:
    return ModuleResolver(
        toolchain,  # type: ignore[arg-type]
        configuration,
        notifier,
        telemetry,
        gate,
        background,
    )


@pytest.fixture()
def packages(
    toolchain: FakeToolchain,
    notifier: RecordingNotifier,
    background: BackgroundTasks,
) -> PackageResolver:
    return PackageResolver(toolchain, notifier, background)  # type: ignore[arg-type]
