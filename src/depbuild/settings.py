# settings.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

# Order matters: the fingerprint is compared as plain text.
FINGERPRINT_FIELDS = ("CC", "CXX", "LD", "INSTALL_DIR")


@dataclass(frozen=True)
class Settings:
    """
    Toolchain configuration that decides whether a previous build is reusable.

    Two configurations produce the same fingerprint iff every field is
    textually equal; nothing here looks at sources or build output.
    """
    cc: str = ""
    cxx: str = ""
    ld: str = ""
    install_dir: str = ""

    @classmethod
    def from_environ(cls, environ: Mapping[str, str], install_dir: str | Path) -> "Settings":
        return cls(
            cc=environ.get("CC", ""),
            cxx=environ.get("CXX", ""),
            ld=environ.get("LD", ""),
            install_dir=str(install_dir),
        )

    def as_pairs(self) -> list[tuple[str, str]]:
        values = (self.cc, self.cxx, self.ld, self.install_dir)
        return list(zip(FINGERPRINT_FIELDS, values))

    def fingerprint(self) -> str:
        return " ".join(f"{k}={v}" for k, v in self.as_pairs())
