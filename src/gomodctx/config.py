"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (GOMODCTX__TOOLCHAIN__GO_BINARY=/usr/local/go/bin/go)
  2. gomodctx.yaml          (searched in cwd, then the platform config dir)
  3. Hardcoded defaults

The config file is optional — all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("gomodctx")
_DEFAULT_DB_PATH = str(Path(_DEFAULT_DATA_DIR) / "state.db")


def _find_config_file() -> str | None:
    """Return the path of the first gomodctx.yaml found, or None."""
    candidates = [
        Path("gomodctx.yaml"),
        Path(platformdirs.user_config_dir("gomodctx")) / "gomodctx.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ToolchainSettings(_Section):
    go_binary: str | None = None  # explicit path wins over GOROOT and PATH lookup
    goroot: str | None = None
    gopath: str | None = None
    module_cache: str | None = None
    env: dict[str, str] = {}  # extra variables for every tool invocation


class StateSettings(_Section):
    db_path: str = _DEFAULT_DB_PATH


class GoOptionSettings(_Section):
    """Defaults for the editor-facing options the advisories inspect."""

    infer_gopath: bool = False
    format_tool: str = "goreturns"
    use_language_server: bool = False


class LoggingSettings(_Section):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: GOMODCTX__STATE__DB_PATH=/tmp/state.db
        env_prefix="GOMODCTX__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
        extra="forbid",
    )

    toolchain: ToolchainSettings = ToolchainSettings()
    state: StateSettings = StateSettings()
    go: GoOptionSettings = GoOptionSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
