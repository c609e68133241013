"""Shared test fixtures."""

from __future__ import annotations

import io
import subprocess
import sys
from pathlib import Path
from typing import List

import pytest

from depbuild.config import BuildConfig
from depbuild.dsl import cmd, target
from depbuild.model import Target
from depbuild.runner import ProcessRunner
from depbuild.ui.console import Console
from depbuild.ui.progress import Spinner


def py(code: str) -> List[str]:
    """argv running a snippet with the current interpreter."""
    return [sys.executable, "-c", code]


class CountingPopen:
    """Popen stand-in that records every spawned command and runs it for real."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []

    def __call__(self, args, **kwargs) -> subprocess.Popen:
        self.calls.append(list(args))
        return subprocess.Popen(args, **kwargs)


@pytest.fixture
def root(tmp_path: Path) -> Path:
    r = tmp_path / "repo"
    r.mkdir()
    return r


@pytest.fixture
def add_source(root: Path):
    """Create `<root>/<name>/CMakeLists.txt` so the source precondition holds."""

    def _add(name: str, check_file: str = "CMakeLists.txt") -> Path:
        src = root / name
        src.mkdir(parents=True, exist_ok=True)
        (src / check_file).write_text("project(x)\n", encoding="utf-8")
        return src

    return _add


@pytest.fixture
def make_target(add_source):
    def _make(name: str, *commands: List[str]) -> Target:
        add_source(name)
        return target(name, cmd(*(commands or [py("print('ok')")])))

    return _make


@pytest.fixture
def console() -> Console:
    return Console(stream=io.StringIO(), err=io.StringIO())


@pytest.fixture
def popen() -> CountingPopen:
    return CountingPopen()


@pytest.fixture
def runner(popen: CountingPopen) -> ProcessRunner:
    return ProcessRunner(popen=popen)


@pytest.fixture
def spinner() -> Spinner:
    return Spinner(io.StringIO(), interval=0.01)


@pytest.fixture
def config_for(root: Path):
    def _config(**kwargs) -> BuildConfig:
        kwargs.setdefault("environ", {"CC": "gcc", "CXX": "g++", "LD": ""})
        kwargs.setdefault("jobs", 2)
        return BuildConfig.create(root=root, **kwargs)

    return _config
