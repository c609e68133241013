# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional


@dataclass
class BuildError(Exception):
    """
    Structured build error with enough context for:
      - clean CLI output
      - a stable `kind` for tests and scripts
      - debugging without full tracebacks
    """
    kind: str
    target: str | None
    message: str
    details: Dict[str, str] = field(default_factory=dict)

    exit_code = 1

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        if self.target:
            lines.append(f"target={self.target}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)

    @property
    def hint(self) -> Optional[str]:
        return self.details.get("hint")


class ToolNotFoundError(BuildError):
    def __init__(self, tool: str, hint: str | None = None):
        details = {"tool": tool}
        if hint:
            details["hint"] = hint
        super().__init__(
            kind="tool_not_found",
            target=None,
            message=f"{tool} could not be found, please install {tool}",
            details=details,
        )
        self.tool = tool


class MissingSourceError(BuildError):
    def __init__(self, target: str, path: Path):
        super().__init__(
            kind="missing_source",
            target=target,
            message=f"Failed to find {target} source code",
            details={
                "path": str(path),
                "hint": "run git submodule update --init --recursive",
            },
        )
        self.path = path


class UnknownOptionError(BuildError):
    def __init__(self, option: str):
        super().__init__(
            kind="unknown_option",
            target=None,
            message=f"Unknown option: {option}",
            details={"hint": "see --help for the supported options"},
        )
        self.option = option


class TargetsFileError(BuildError):
    def __init__(self, path: Path | str, reason: str):
        super().__init__(
            kind="targets_file",
            target=None,
            message=f"Could not load targets from {path}: {reason}",
        )
        self.path = Path(path)


class BuildStepFailure(BuildError):
    def __init__(self, target: str, exit_code: int, log_path: Path, command: str | None = None):
        details = {"exit_code": str(exit_code), "log": str(log_path)}
        if command:
            details["command"] = command
        super().__init__(
            kind="build_failed",
            target=target,
            message=f"Failed to build {target}, see {log_path} for more details",
            details=details,
        )
        self.step_exit_code = exit_code
        self.log_path = log_path
        self.command = command
