from __future__ import annotations

import re

from pydantic import BaseModel

from gomodctx.errors import ErrorCode

_VERSION_RE = re.compile(r"^go version go(\d+)\.(\d+)(?:\.(\d+))?")

# Oldest release whose `go env` reports GOMOD.
MODULES_MIN_MAJOR = 1
MODULES_MIN_MINOR = 11


class ToolchainVersion(BaseModel):
    """Release of the `go` toolchain, as reported by `go version`."""

    major: int
    minor: int
    patch: int = 0

    @classmethod
    def parse(cls, output: str) -> ToolchainVersion | None:
        """Parse ``go version`` output. Devel builds and noise return ``None``."""
        match = _VERSION_RE.match(output.strip())
        if match is None:
            return None
        major, minor, patch = match.groups()
        return cls(major=int(major), minor=int(minor), patch=int(patch or 0))

    @property
    def supports_modules(self) -> bool:
        return self.major == MODULES_MIN_MAJOR and self.minor >= MODULES_MIN_MINOR

    def __str__(self) -> str:
        return f"go{self.major}.{self.minor}.{self.patch}"


class ProcessResult(BaseModel):
    succeeded: bool
    stdout: str = ""
    error: ErrorCode | None = None

    @property
    def toolchain_missing(self) -> bool:
        return self.error == ErrorCode.TOOLCHAIN_NOT_FOUND
