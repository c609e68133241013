# steps.py
from __future__ import annotations

import re
import shlex
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from .model import BuildContext

Command = List[str]

_PLACEHOLDER = re.compile(r"\{(source|build|out|jobs)\}")


def format_command(command: Sequence[str]) -> str:
    return " ".join(shlex.quote(part) for part in command)


class BuildStep:
    """
    Opaque build recipe for one target.

    The orchestrator never looks inside: it asks for the commands to run for a
    given context and executes them in order, stopping at the first failure.
    """

    def commands(self, ctx: BuildContext) -> List[Command]:
        raise NotImplementedError


@dataclass(frozen=True)
class CommandStep(BuildStep):
    """
    Explicit argv lists. `{source}`, `{build}`, `{out}` and `{jobs}` are expanded;
    any other braces are passed through untouched.
    """
    argv: Tuple[Tuple[str, ...], ...]

    def commands(self, ctx: BuildContext) -> List[Command]:
        values = {
            "source": str(ctx.source_dir),
            "build": str(ctx.build_dir),
            "out": str(ctx.out_dir),
            "jobs": str(ctx.jobs),
        }
        return [[_PLACEHOLDER.sub(lambda m: values[m.group(1)], part) for part in cmd] for cmd in self.argv]


@dataclass(frozen=True)
class ShellStep(BuildStep):
    """A shell script; the context is available as $SOURCEPATH, $OUTPATH, $JOBS..."""
    script: str
    shell: str = "/bin/sh"

    def commands(self, ctx: BuildContext) -> List[Command]:
        return [[self.shell, "-e", "-c", self.script]]


@dataclass(frozen=True)
class CMakeStep(BuildStep):
    """Configure with Ninja, build, install into the shared output directory."""
    definitions: Dict[str, str] = field(default_factory=dict)
    generator: str = "Ninja"
    build_type: str = "Release"
    cmake: str = "cmake"

    def configure_command(self, ctx: BuildContext) -> Command:
        cmd = [
            self.cmake,
            f"-G{self.generator}",
            f"-DCMAKE_BUILD_TYPE={self.build_type}",
            f"-DCMAKE_INSTALL_PREFIX={ctx.out_dir}",
        ]
        cmd.extend(f"-D{k}={v}" for k, v in self.definitions.items())
        cmd.append(str(ctx.source_dir))
        return cmd

    def commands(self, ctx: BuildContext) -> List[Command]:
        cmds = [self.configure_command(ctx)]
        if ctx.do_build:
            cmds.append([self.cmake, "--build", ".", "--config", self.build_type, "-j", str(ctx.jobs)])
            cmds.append([self.cmake, "--install", ".", "--config", self.build_type])
        return cmds
