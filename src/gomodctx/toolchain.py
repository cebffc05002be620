"""Locating and running the ``go`` toolchain.

``Toolchain.run`` never raises. A non-zero exit or a spawn error is logged
and reported as ``ProcessResult(succeeded=False, error=PROBE_FAILED)``. A
missing binary is reported as ``error=TOOLCHAIN_NOT_FOUND`` so callers can
tell the user to fix their PATH.
"""

from __future__ import annotations

import asyncio
import os
import re
import shutil
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from gomodctx.errors import ErrorCode
from gomodctx.models.toolchain import ProcessResult, ToolchainVersion

if TYPE_CHECKING:
    from gomodctx.config import ToolchainSettings

log = structlog.get_logger()

_DRIVE_RE = re.compile(r"^[a-zA-Z]:")


def fix_drive_casing(path: str, platform: str = sys.platform) -> str:
    """Upper-case a leading drive letter on Windows; identity elsewhere."""
    if platform != "win32" or not _DRIVE_RE.match(path):
        return path
    return path[0].upper() + path[1:]


class Toolchain:
    """Access to the ``go`` binary for one session."""

    def __init__(
        self,
        settings: ToolchainSettings,
        environ: dict[str, str] | None = None,
    ) -> None:
        self._settings = settings
        self._environ = dict(os.environ if environ is None else environ)
        self._version: ToolchainVersion | None = None
        self._version_checked = False

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    def find_binary(self, tool: str = "go") -> str | None:
        """Return the path of ``tool``, or ``None`` when it cannot be found."""
        if tool == "go" and self._settings.go_binary:
            configured = Path(self._settings.go_binary).expanduser()
            return str(configured) if configured.is_file() else None

        goroot = self._settings.goroot or self._environ.get("GOROOT")
        if goroot:
            found = shutil.which(tool, path=str(Path(goroot) / "bin"))
            if found:
                return found

        return shutil.which(tool, path=self._environ.get("PATH"))

    def tools_env(self) -> dict[str, str]:
        """Environment handed to every tool invocation."""
        env = dict(self._environ)
        if self._settings.gopath:
            env["GOPATH"] = self._settings.gopath
        if self._settings.goroot:
            env["GOROOT"] = self._settings.goroot
        env.update(self._settings.env)
        return env

    def gopath(self) -> str:
        gopath = self._settings.gopath or self._environ.get("GOPATH")
        if gopath:
            return gopath.split(os.pathsep)[0]
        return str(Path.home() / "go")

    def module_cache_root(self) -> str:
        """Directory where fetched module versions are extracted."""
        root = (
            self._settings.module_cache
            or self._environ.get("GOMODCACHE")
            or str(Path(self.gopath()) / "pkg" / "mod")
        )
        return fix_drive_casing(os.path.normpath(root))

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------

    async def run(self, args: list[str], cwd: str) -> ProcessResult:
        """Run ``go <args>`` in ``cwd`` and capture stdout.

        ``error`` on the result is set whenever ``succeeded`` is false.
        """
        binary = self.find_binary("go")
        if binary is None:
            log.warning("go_not_found", code=ErrorCode.TOOLCHAIN_NOT_FOUND, cwd=cwd)
            return ProcessResult(succeeded=False, error=ErrorCode.TOOLCHAIN_NOT_FOUND)

        command = " ".join(["go", *args])
        try:
            proc = await asyncio.create_subprocess_exec(
                binary,
                *args,
                cwd=cwd,
                env=self.tools_env(),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await proc.communicate()
        except OSError as exc:
            log.warning(
                "go_spawn_failed",
                code=ErrorCode.PROBE_FAILED,
                command=command,
                cwd=cwd,
                error=str(exc),
            )
            return ProcessResult(succeeded=False, error=ErrorCode.PROBE_FAILED)

        if proc.returncode != 0:
            log.warning(
                "go_command_failed",
                code=ErrorCode.PROBE_FAILED,
                command=command,
                cwd=cwd,
                returncode=proc.returncode,
                stderr=stderr.decode("utf-8", errors="replace").strip(),
            )
            return ProcessResult(succeeded=False, error=ErrorCode.PROBE_FAILED)

        return ProcessResult(succeeded=True, stdout=stdout.decode("utf-8", errors="replace"))

    async def go_version(self) -> ToolchainVersion | None:
        """Version of the configured toolchain, queried once per session."""
        if self._version_checked:
            return self._version

        binary = self.find_binary("go")
        if binary is None:
            return None

        result = await self.run(["version"], cwd=os.getcwd())
        self._version = ToolchainVersion.parse(result.stdout) if result.succeeded else None
        self._version_checked = True
        log.debug("go_version", version=str(self._version) if self._version else None)
        return self._version
