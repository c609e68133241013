# config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from .cache import DEFAULT_BUILD_DIR
from .selection import ALL, MATCH_EXACT, MATCH_SUBSTRING
from .settings import Settings

DEFAULT_OUT_DIR = "out"


def default_jobs() -> int:
    return os.cpu_count() or 1


@dataclass
class BuildConfig:
    """
    Everything one invocation needs, resolved to absolute paths.

    root/
      <target>/          sources (git submodules)
      build/<target>/    scratch dir, marker and log
      out/               default install prefix
    """
    root: Path
    prefix: Path
    build_root: Path
    specifier: str = ALL
    jobs: int = field(default_factory=default_jobs)
    clean: bool = False
    verbose: bool = False
    match: str = MATCH_EXACT
    settings: Settings = field(default_factory=Settings)

    @classmethod
    def create(
        cls,
        *,
        root: str | Path = ".",
        prefix: str | Path | None = None,
        specifier: str = ALL,
        jobs: Optional[int] = None,
        clean: bool = False,
        verbose: bool = False,
        loose_match: bool = False,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "BuildConfig":
        root_p = Path(root).expanduser().resolve()
        prefix_p = Path(prefix).expanduser() if prefix is not None else root_p / DEFAULT_OUT_DIR
        prefix_p = prefix_p.resolve()
        environ = os.environ if environ is None else environ
        return cls(
            root=root_p,
            prefix=prefix_p,
            build_root=root_p / DEFAULT_BUILD_DIR,
            specifier=specifier,
            jobs=jobs if jobs is not None else default_jobs(),
            clean=clean,
            verbose=verbose,
            match=MATCH_SUBSTRING if loose_match else MATCH_EXACT,
            settings=Settings.from_environ(environ, prefix_p),
        )

    @property
    def fingerprint(self) -> str:
        return self.settings.fingerprint()

    def prepare_dirs(self) -> None:
        self.prefix.mkdir(parents=True, exist_ok=True)
        self.build_root.mkdir(parents=True, exist_ok=True)

    def summary(self) -> list[tuple[str, str]]:
        return [
            ("Build", self.specifier),
            ("Clean", str(self.clean).lower()),
            ("Prefix", str(self.prefix)),
            ("CC", self.settings.cc),
            ("CXX", self.settings.cxx),
            ("LD", self.settings.ld),
            ("Jobs", str(self.jobs)),
        ]
