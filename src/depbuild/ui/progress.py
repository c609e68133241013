"""In-place liveness indicator for a running build job."""

from __future__ import annotations

import sys
import time
from typing import IO, Callable, Optional, Protocol

FRAMES = "|/-\\"
DEFAULT_INTERVAL = 0.75


class Pollable(Protocol):
    def poll(self) -> Optional[int]: ...


class Spinner:
    """
    Polls a job until it finishes, drawing "[|]" "[/]" "[-]" "[\\]" in place.

    Only observes: it calls `poll()` and writes to the terminal, it never
    touches the job's log.
    """

    def __init__(
        self,
        stream: Optional[IO[str]] = None,
        *,
        interval: float = DEFAULT_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        force: bool = False,
    ):
        self._stream = stream
        self.interval = interval
        self._sleep = sleep
        self.force = force
        self.frames_drawn = 0

    @property
    def stream(self) -> IO[str]:
        return self._stream if self._stream is not None else sys.stdout

    def _enabled(self) -> bool:
        if self.force:
            return True
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty and isatty())

    def watch(self, job: Pollable) -> Optional[int]:
        draw = self._enabled()
        width = len(FRAMES[0]) + 4  # "[x]  "
        i = 0
        try:
            while True:
                code = job.poll()
                if code is not None:
                    return code
                if draw:
                    self.stream.write(f"[{FRAMES[i % len(FRAMES)]}]  ")
                    self.stream.flush()
                    self.frames_drawn += 1
                i += 1
                self._sleep(self.interval)
                if draw:
                    self.stream.write("\b" * width)
        finally:
            if draw and i:
                self.stream.write(" " * width + "\b" * width)
                self.stream.flush()
