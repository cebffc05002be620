from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class ResolutionOutcome(StrEnum):
    CACHED = "cached"
    MODULE_CACHE = "module_cache"
    RESOLVED = "resolved"
    NOT_A_MODULE = "not_a_module"
    UNSUPPORTED_VERSION = "unsupported_version"
    AMBIGUOUS = "ambiguous"
    PROBE_FAILED = "probe_failed"
    TOOLCHAIN_NOT_FOUND = "toolchain_not_found"


class Resolution(BaseModel):
    """Result of a module or package lookup.

    ``value`` is what plain callers see: a path/import path, ``""`` for a
    directory known not to be inside a module, or ``None`` when nothing could
    be determined. ``outcome`` tells the cases apart.
    """

    value: str | None
    outcome: ResolutionOutcome

    @property
    def found(self) -> bool:
        return bool(self.value)
