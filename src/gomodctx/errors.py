"""Structured error codes.

Nothing in gomodctx raises across a module boundary. Failures are reported
in return values: ``ProcessResult.error`` from the toolchain, and
``Resolution.outcome`` from the resolvers. Each public resolution operation
degrades to "could not determine".
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    TOOLCHAIN_NOT_FOUND = "TOOLCHAIN_NOT_FOUND"
    PROBE_FAILED = "PROBE_FAILED"
    STATE_UNAVAILABLE = "STATE_UNAVAILABLE"


def toolchain_not_found_message(tool: str = "go") -> str:
    return f'Cannot find "{tool}" binary. Update PATH or GOROOT appropriately.'
