"""Integration test fixtures.

Provides a fake ``go`` executable (a Python script) that answers the handful
of verbs gomodctx uses, a module laid out on disk, and Settings pointing at
both. Everything runs through the real subprocess invoker and SQLite file.
"""

from __future__ import annotations

import os
import stat
import sys
import textwrap
from typing import TYPE_CHECKING

import pytest

from gomodctx.config import Settings

if TYPE_CHECKING:
    from pathlib import Path

FAKE_GO = textwrap.dedent(
    """\
    import os
    import sys

    args = sys.argv[1:]
    version = os.environ.get("FAKE_GO_VERSION", "go1.12.5")

    def find_go_mod(start):
        current = os.path.abspath(start)
        while True:
            candidate = os.path.join(current, "go.mod")
            if os.path.isfile(candidate):
                return candidate
            parent = os.path.dirname(current)
            if parent == current:
                return ""
            current = parent

    if args == ["version"]:
        print(f"go version {version} linux/amd64")
    elif args == ["env", "GOMOD"]:
        print(find_go_mod(os.getcwd()))
    elif args == ["list"]:
        go_mod = find_go_mod(os.getcwd())
        if not go_mod:
            sys.stderr.write("go: cannot find main module\\n")
            sys.exit(1)
        with open(go_mod, encoding="utf-8") as fh:
            module = fh.readline().split()[1]
        rel = os.path.relpath(os.getcwd(), os.path.dirname(go_mod))
        print("go: downloading example.com/dep v1.0.0")
        print(module if rel == "." else module + "/" + rel.replace(os.sep, "/"))
    else:
        sys.stderr.write("unknown command\\n")
        sys.exit(2)
    """
)


@pytest.fixture()
def fake_go(tmp_path: Path) -> Path:
    if os.name == "nt":
        pytest.skip("The fake go binary relies on a shebang line.")
    path = tmp_path / "bin" / "go"
    path.parent.mkdir()
    path.write_text(f"#!{sys.executable}\n{FAKE_GO}", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return path


@pytest.fixture()
def module_dir(tmp_path: Path) -> Path:
    """A module ``example.com/hello`` with a ``greet`` package."""
    root = tmp_path / "work" / "hello"
    (root / "greet").mkdir(parents=True)
    (root / "go.mod").write_text("module example.com/hello\n\ngo 1.12\n", encoding="utf-8")
    (root / "main.go").write_text("package main\n", encoding="utf-8")
    (root / "greet" / "greet.go").write_text("package greet\n", encoding="utf-8")
    return root


@pytest.fixture()
def settings(tmp_path: Path, fake_go: Path) -> Settings:
    return Settings(
        toolchain={
            "go_binary": str(fake_go),
            "module_cache": str(tmp_path / "gopath" / "pkg" / "mod"),
        },
        state={"db_path": str(tmp_path / "state" / "state.db")},
        logging={"level": "ERROR"},
    )


@pytest.fixture()
def cli_env(settings: Settings, monkeypatch: pytest.MonkeyPatch) -> None:
    """Expose ``settings`` to the CLI through environment variables."""
    monkeypatch.setenv("GOMODCTX__TOOLCHAIN__GO_BINARY", settings.toolchain.go_binary or "")
    monkeypatch.setenv("GOMODCTX__TOOLCHAIN__MODULE_CACHE", settings.toolchain.module_cache or "")
    monkeypatch.setenv("GOMODCTX__STATE__DB_PATH", settings.state.db_path)
    monkeypatch.setenv("GOMODCTX__LOGGING__LEVEL", "ERROR")
