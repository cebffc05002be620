"""Scoped editor options consulted by the module advisories.

Values resolve workspace folder first, then global, then the defaults from
``Settings.go``. Hosts with their own configuration system implement the
same three methods; this in-memory version backs the CLI and the tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from gomodctx.config import GoOptionSettings

log = structlog.get_logger()

INFER_GOPATH = "inferGopath"
FORMAT_TOOL = "formatTool"
USE_LANGUAGE_SERVER = "useLanguageServer"


class ConfigurationTarget(StrEnum):
    GLOBAL = "global"
    WORKSPACE_FOLDER = "workspace_folder"


@dataclass(frozen=True)
class ConfigurationInspection:
    """Which scope holds an explicit value for one key."""

    key: str
    default_value: Any = None
    global_value: Any = None
    workspace_folder_value: Any = None


class WorkspaceConfiguration:
    def __init__(self, defaults: GoOptionSettings) -> None:
        self._defaults: dict[str, Any] = {
            INFER_GOPATH: defaults.infer_gopath,
            FORMAT_TOOL: defaults.format_tool,
            USE_LANGUAGE_SERVER: defaults.use_language_server,
        }
        self._scopes: dict[ConfigurationTarget, dict[str, Any]] = {
            ConfigurationTarget.GLOBAL: {},
            ConfigurationTarget.WORKSPACE_FOLDER: {},
        }

    def get(self, key: str, default: Any = None) -> Any:
        for target in (ConfigurationTarget.WORKSPACE_FOLDER, ConfigurationTarget.GLOBAL):
            if key in self._scopes[target]:
                return self._scopes[target][key]
        return self._defaults.get(key, default)

    def inspect(self, key: str) -> ConfigurationInspection:
        return ConfigurationInspection(
            key=key,
            default_value=self._defaults.get(key),
            global_value=self._scopes[ConfigurationTarget.GLOBAL].get(key),
            workspace_folder_value=self._scopes[ConfigurationTarget.WORKSPACE_FOLDER].get(key),
        )

    def update(self, key: str, value: Any, target: ConfigurationTarget) -> None:
        self._scopes[target][key] = value
        log.info("configuration_updated", key=key, value=value, target=str(target))
