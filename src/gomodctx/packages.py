"""Import path of the package in a directory.

Directories under the module cache are named ``<import path>@v<version>``,
so their import path is read off the path. Anywhere else ``go list`` is
asked. Only a single unambiguous answer is cached; anything else is retried
on the next call.
"""

from __future__ import annotations

import os
import re
from typing import TYPE_CHECKING

import structlog

from gomodctx.errors import toolchain_not_found_message
from gomodctx.models.resolution import Resolution, ResolutionOutcome

if TYPE_CHECKING:
    from gomodctx.host import Notifier
    from gomodctx.tasks import BackgroundTasks
    from gomodctx.toolchain import Toolchain

log = structlog.get_logger()

_VERSION_SUFFIX_RE = re.compile(r"@v\d+(\.\d+)?(\.\d+)?")


def import_path_from_module_cache(cwd: str, module_cache: str) -> str:
    """``<cache>/example.com/foo@v1.2.3/sub`` → ``example.com/foo``."""
    import_path = cwd[len(module_cache) + 1 :]
    match = _VERSION_SUFFIX_RE.search(import_path)
    if match:
        import_path = import_path[: match.start()]
    return import_path.replace(os.sep, "/")


def pick_package(stdout: str) -> str | None:
    """The single package named in ``go list`` output, if there is exactly one.

    Blank lines and lines with spaces (``go: downloading ...``) are not
    package names.
    """
    candidates = [line for line in stdout.split("\n") if line and " " not in line]
    if len(candidates) != 1:
        return None
    return candidates[0]


class PackageResolver:
    def __init__(
        self,
        toolchain: Toolchain,
        notifier: Notifier,
        background: BackgroundTasks,
    ) -> None:
        self._toolchain = toolchain
        self._notifier = notifier
        self._background = background
        self._cache: dict[str, str] = {}

    async def resolve(self, cwd: str) -> Resolution:
        if cwd in self._cache:
            return Resolution(value=self._cache[cwd], outcome=ResolutionOutcome.CACHED)

        module_cache = self._toolchain.module_cache_root()
        if cwd.startswith(module_cache):
            import_path = import_path_from_module_cache(cwd, module_cache)
            self._cache.setdefault(cwd, import_path)
            return Resolution(value=import_path, outcome=ResolutionOutcome.MODULE_CACHE)

        result = await self._toolchain.run(["list"], cwd=cwd)
        if result.toolchain_missing:
            self._background.spawn(
                self._notifier.show_information(toolchain_not_found_message()),
                name="toolchain_not_found",
            )
            return Resolution(value=None, outcome=ResolutionOutcome.TOOLCHAIN_NOT_FOUND)

        package = pick_package(result.stdout)
        if package is None:
            outcome = (
                ResolutionOutcome.AMBIGUOUS if result.succeeded else ResolutionOutcome.PROBE_FAILED
            )
            return Resolution(value=None, outcome=outcome)

        self._cache.setdefault(cwd, package)
        log.debug("package_resolved", path=cwd, package=package)
        return Resolution(value=package, outcome=ResolutionOutcome.RESOLVED)

    async def get_current_package(self, cwd: str) -> str | None:
        return (await self.resolve(cwd)).value or None
