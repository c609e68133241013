# runner.py
from __future__ import annotations

import os
import subprocess
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Callable, List, Optional

from .model import BuildContext, Target
from .steps import Command, format_command

# exit status used when a command cannot even be started, like a shell does
NOT_FOUND_STATUS = 127


@dataclass(frozen=True)
class StepResult:
    target: str
    exit_code: int
    log_path: Path
    command: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class Job:
    """
    One running build step: the commands of a target run one after another,
    each as a child process writing into the same log file.

    `poll()` never blocks; it starts the next command when the current one
    finished successfully and returns the final exit code once the job is
    over (None while it is still running).
    """

    def __init__(
        self,
        target: Target,
        ctx: BuildContext,
        log_path: Path,
        *,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    ):
        self.target = target
        self.ctx = ctx
        self.log_path = log_path
        self._popen = popen
        self._pending: List[Command] = []
        self._log: Optional[IO[bytes]] = None
        self._proc: Optional[subprocess.Popen] = None
        self._current: Optional[Command] = None
        self.returncode: Optional[int] = None
        self.failed_command: Optional[str] = None

    # ---- lifecycle ----

    def start(self) -> "Job":
        self._pending = list(self.target.step.commands(self.ctx))
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._log = self.log_path.open("ab")
        self._advance()
        return self

    def close(self, *, reap: bool = True) -> None:
        """Reap the child (if any) and close the log. Safe to call twice."""
        if reap and self._proc is not None and self._proc.poll() is None:
            self._proc.wait()
        self._proc = None
        if self._log is not None:
            self._log.close()
            self._log = None

    def __enter__(self) -> "Job":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        # interrupted: leave the child and its partial output alone
        self.close(reap=exc_type is None)

    # ---- polling ----

    def poll(self) -> Optional[int]:
        if self.returncode is not None:
            return self.returncode
        if self._proc is None:
            raise RuntimeError(f"job for {self.target.name} was not started")

        code = self._proc.poll()
        if code is None:
            return None

        self._proc = None
        if code != 0:
            self._finish(code)
        else:
            self._advance()
        return self.returncode

    def wait(self) -> int:
        while self.returncode is None:
            if self._proc is not None:
                self._proc.wait()
            self.poll()
        return self.returncode

    # ---- internals ----

    def _env(self) -> dict:
        env = os.environ.copy()
        env.update(self.ctx.env())
        return env

    def _write_log(self, text: str) -> None:
        assert self._log is not None
        self._log.write(text.encode("utf-8", errors="replace"))
        self._log.flush()

    def _advance(self) -> None:
        """Start the next command, or finish with 0 when none are left."""
        while self._pending:
            cmd = self._pending.pop(0)
            self._current = cmd
            if self.ctx.verbose:
                self._write_log(f"+ {format_command(cmd)}\n")
            try:
                self._proc = self._popen(
                    cmd,
                    cwd=str(self.ctx.build_dir),
                    env=self._env(),
                    stdin=subprocess.DEVNULL,
                    stdout=self._log,
                    stderr=subprocess.STDOUT,
                )
                return
            except OSError as e:
                self._write_log(f"{cmd[0]}: {e.strerror or e}\n")
                self._finish(NOT_FOUND_STATUS)
                return
        self._finish(0)

    def _finish(self, code: int) -> None:
        self.returncode = code
        if code != 0 and self._current is not None:
            self.failed_command = format_command(self._current)
            self._write_log(f"\nexit status {code}: {self.failed_command}\n")


class ProcessRunner:
    """Runs a target's build step inside its build directory, logging everything."""

    def __init__(self, *, popen: Callable[..., subprocess.Popen] = subprocess.Popen):
        self._popen = popen

    def spawn(self, target: Target, ctx: BuildContext, log_path: Path) -> Job:
        return Job(target, ctx, log_path, popen=self._popen)

    def run(
        self,
        target: Target,
        ctx: BuildContext,
        log_path: Path,
        *,
        watch: Callable[[Job], object] | None = None,
    ) -> StepResult:
        """
        Start the job, let `watch` drive it (the spinner polls until it is
        done), then make sure it is finished and reaped.
        """
        with self.spawn(target, ctx, log_path) as job:
            if watch is not None:
                watch(job)
            code = job.wait()
            return StepResult(
                target=target.name,
                exit_code=code,
                log_path=log_path,
                command=job.failed_command,
            )


def tail(path: Path, lines: int = 100) -> List[str]:
    """Last `lines` lines of a log file, decoded leniently."""
    try:
        with path.open("r", encoding="utf-8", errors="replace") as f:
            return [line.rstrip("\n") for line in deque(f, maxlen=lines)]
    except FileNotFoundError:
        return []
