# model.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional

if TYPE_CHECKING:
    from .steps import BuildStep


class Outcome(str, Enum):
    """Per-target state in a run."""
    PENDING = "pending"
    SKIPPED = "skipped"
    CACHED = "cached"
    REBUILDING = "rebuilding"
    DONE = "done"
    FAILED = "failed"

    @property
    def marker(self) -> str:
        return f"[{self.name}]"


@dataclass(frozen=True)
class Target:
    """
    One vendored dependency that can be built on its own.

    `check_file` is relative to the source directory and must exist before a
    build is attempted (usually the top-level CMakeLists.txt).
    """
    name: str
    check_file: str
    step: "BuildStep"
    source_dir: Optional[Path] = None

    def source_path(self, root: Path) -> Path:
        if self.source_dir is not None:
            return (root / self.source_dir).resolve()
        return (root / self.name).resolve()

    def check_path(self, root: Path) -> Path:
        return self.source_path(root) / self.check_file


@dataclass(frozen=True)
class BuildContext:
    """Inputs handed to a build step for one target."""
    name: str
    source_dir: Path
    build_dir: Path
    out_dir: Path
    jobs: int
    do_build: bool = True
    clean: bool = False
    verbose: bool = False

    def env(self) -> Dict[str, str]:
        return {
            "SOURCEPATH": str(self.source_dir),
            "BUILDPATH": str(self.build_dir),
            "OUTPATH": str(self.out_dir),
            "JOBS": str(self.jobs),
            "DOBUILD": "true" if self.do_build else "false",
        }
