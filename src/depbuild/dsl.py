# src/depbuild/dsl.py
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .model import Target
from .steps import BuildStep, CMakeStep, CommandStep, ShellStep


# ---------------------------------------------------------------------
# Step helpers
# ---------------------------------------------------------------------

def sh(script: str, *, shell: str = "/bin/sh") -> ShellStep:
    """Create a shell step; the script sees $SOURCEPATH, $OUTPATH, $JOBS, $DOBUILD."""
    return ShellStep(script=script, shell=shell)


def cmd(*commands: Sequence[str]) -> CommandStep:
    """Create a step from argv lists: cmd(["make", "-j{jobs}"], ["make", "install"])."""
    if not commands:
        raise ValueError("cmd() needs at least one command")
    return CommandStep(argv=tuple(tuple(c) for c in commands))


def cmake(
    *,
    definitions: Optional[Dict[str, str]] = None,
    generator: str = "Ninja",
    build_type: str = "Release",
) -> CMakeStep:
    """Create a configure/build/install CMake step."""
    return CMakeStep(definitions=dict(definitions or {}), generator=generator, build_type=build_type)


# ---------------------------------------------------------------------
# Target helper
# ---------------------------------------------------------------------

def target(
    name: str,
    step: BuildStep,
    *,
    check_file: str = "CMakeLists.txt",
    source_dir: str | Path | None = None,
) -> Target:
    if not name or any(c.isspace() or c == "," for c in name):
        raise ValueError(f"Invalid target name: {name!r}")
    if not isinstance(step, BuildStep):
        raise TypeError(f"target({name!r}) needs a BuildStep, got {type(step).__name__}")
    return Target(
        name=name,
        check_file=check_file,
        step=step,
        source_dir=Path(source_dir) if source_dir is not None else None,
    )


def targets(*items: Target) -> List[Target]:
    """
    Targets file helper:

        from depbuild.dsl import targets, target, cmake

        TARGETS = targets(
            target("zlib", cmake()),
        )
    """
    return list(items)
