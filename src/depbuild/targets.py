# targets.py
from __future__ import annotations

import runpy
from pathlib import Path
from typing import List

from .dsl import cmake, target
from .errors import TargetsFileError
from .model import Target


def builtin_targets() -> List[Target]:
    """Dependencies vendored as submodules next to the build root, in build order."""
    return [
        target(
            "protobuf",
            cmake(
                definitions={
                    "protobuf_BUILD_TESTS": "OFF",
                    "ABSL_PROPAGATE_CXX_STD": "ON",
                },
            ),
            check_file="CMakeLists.txt",
        ),
    ]


# ----------------------------------------------------------------------
# Targets file loading (local file)
# ----------------------------------------------------------------------

def load_targets(path: str | Path) -> List[Target]:
    """
    Load targets from a python file path.

    The file must define either:
      - targets() -> List[Target]
      - TARGETS = [Target, ...]
    """
    file_path = Path(path).expanduser().resolve()
    if not file_path.exists():
        raise TargetsFileError(file_path, "file not found")
    if file_path.suffix != ".py":
        raise TargetsFileError(file_path, f"must be a .py file, got: {file_path.name}")

    module_name = f"depbuild_targets_{file_path.stem}"
    try:
        globals_dict = runpy.run_path(str(file_path), run_name=module_name)
    except Exception as e:
        raise TargetsFileError(file_path, f"{type(e).__name__}: {e}") from e

    found = None
    fn = globals_dict.get("targets")
    # skip the dsl.targets helper when a file imports it and defines TARGETS
    if callable(fn) and getattr(fn, "__module__", None) == module_name:
        try:
            found = fn()
        except Exception as e:
            raise TargetsFileError(file_path, f"targets() raised {type(e).__name__}: {e}") from e
    elif "TARGETS" in globals_dict:
        found = globals_dict["TARGETS"]

    if not isinstance(found, list) or not all(isinstance(t, Target) for t in found):
        raise TargetsFileError(
            file_path,
            "define targets() -> List[Target] or TARGETS = [Target, ...]",
        )
    return found
