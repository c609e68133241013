# cache.py
from __future__ import annotations

import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import MissingSourceError
from .model import Outcome, Target

# ---------------------------------------------------------------------
# Core idea
# ---------------------------------------------------------------------
# Target-level caching keyed on the toolchain fingerprint only:
#
#   build/
#     <target>/
#       build-done   <- fingerprint of the last successful build
#       build.log    <- output of the last build attempt
#       ...          <- whatever the build step leaves behind
#
# A rebuild wipes build/<target>/ first, which also drops the marker, so an
# interrupted build can never look successful on the next run.
# ---------------------------------------------------------------------

DEFAULT_BUILD_DIR = "build"
MARKER_NAME = "build-done"
LOG_NAME = "build.log"


@dataclass(frozen=True)
class CacheDecision:
    outcome: Outcome
    reason: str  # human readable
    marker: Optional[str] = None


def ensure_clean_dir(path: str | Path) -> None:
    p = Path(path)
    if p.exists():
        shutil.rmtree(p)
    p.mkdir(parents=True, exist_ok=True)


class MarkerStore:
    """
    File-based record of which fingerprint produced each target's last
    good build. One marker file per target, inside its build directory.
    """

    def __init__(self, root: str | Path = DEFAULT_BUILD_DIR):
        self.root = Path(root).resolve()

    def build_dir(self, name: str) -> Path:
        return self.root / name

    def marker_path(self, name: str) -> Path:
        return self.build_dir(name) / MARKER_NAME

    def log_path(self, name: str) -> Path:
        return self.build_dir(name) / LOG_NAME

    def read(self, name: str) -> Optional[str]:
        try:
            return self.marker_path(name).read_text(encoding="utf-8").rstrip("\n")
        except FileNotFoundError:
            return None

    def write(self, name: str, fingerprint: str) -> None:
        """Write the marker via a temp file + rename so it is never half-written."""
        path = self.marker_path(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{MARKER_NAME}.", dir=str(path.parent))
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(fingerprint + "\n")
                f.flush()
                os.fsync(f.fileno())
            tmp.replace(path)
        finally:
            if tmp.exists():
                tmp.unlink(missing_ok=True)

    def clear(self, name: str) -> None:
        self.marker_path(name).unlink(missing_ok=True)


class BuildCache:
    """Decides SKIPPED / CACHED / REBUILDING for one target at a time."""

    def __init__(self, markers: MarkerStore, source_root: str | Path):
        self.markers = markers
        self.source_root = Path(source_root).resolve()

    def check_source(self, target: Target) -> Path:
        path = target.check_path(self.source_root)
        if not path.is_file():
            raise MissingSourceError(target.name, path)
        return path

    def decide(self, target: Target, fingerprint: str, *, selected: bool, clean: bool) -> CacheDecision:
        """Pure part of the decision: looks at the marker, touches nothing."""
        self.check_source(target)

        if not selected:
            return CacheDecision(Outcome.SKIPPED, "not selected")

        marker = self.markers.read(target.name)
        if clean:
            return CacheDecision(Outcome.REBUILDING, "clean requested", marker)
        if marker is None:
            return CacheDecision(Outcome.REBUILDING, "no previous build", marker)
        if marker != fingerprint:
            return CacheDecision(Outcome.REBUILDING, f"settings changed (was: {marker})", marker)
        return CacheDecision(Outcome.CACHED, "settings unchanged", marker)

    def evaluate(self, target: Target, fingerprint: str, *, selected: bool, clean: bool) -> CacheDecision:
        """Decide, and on REBUILDING reset the build directory to empty."""
        decision = self.decide(target, fingerprint, selected=selected, clean=clean)
        if decision.outcome is Outcome.REBUILDING:
            ensure_clean_dir(self.markers.build_dir(target.name))
        return decision

    def record_success(self, target: Target, fingerprint: str) -> None:
        self.markers.write(target.name, fingerprint)
