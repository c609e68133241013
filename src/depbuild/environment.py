"""Scoped ownership of process-wide state: environment variables and the cursor."""
from __future__ import annotations

import atexit
import os
import signal
import sys
import threading
from typing import IO, Dict, MutableMapping, Optional

HIDE_CURSOR = "\033[?25l"
SHOW_CURSOR = "\033[?25h"

# SIGINT is not trapped: KeyboardInterrupt unwinds through __exit__ instead.
DEFAULT_SIGNALS = tuple(
    s for s in (getattr(signal, "SIGTERM", None), getattr(signal, "SIGHUP", None)) if s is not None
)


def snapshot(environ: MutableMapping[str, str]) -> Dict[str, str]:
    return dict(environ)


def restore(environ: MutableMapping[str, str], saved: Dict[str, str]) -> None:
    """Make `environ` hold exactly `saved`: extra keys dropped, changed keys reverted."""
    environ.clear()
    environ.update(saved)


class EnvironmentGuard:
    """
    Captures the environment on entry and puts it back exactly on exit.

    Release happens once, whichever comes first: leaving the `with` block,
    interpreter exit (atexit) or a trapped termination signal. When attached
    to a terminal the cursor is hidden for the duration of the run and shown
    again on release.
    """

    def __init__(
        self,
        environ: Optional[MutableMapping[str, str]] = None,
        stream: Optional[IO[str]] = None,
        *,
        signals: tuple = DEFAULT_SIGNALS,
    ):
        self.environ = environ if environ is not None else os.environ
        self._stream = stream
        self._signals = signals
        self._lock = threading.RLock()
        self._saved: Optional[Dict[str, str]] = None
        self._previous_handlers: Dict[int, object] = {}
        self.cursor_hidden = False
        self.acquired = False
        self.released = False

    @property
    def stream(self) -> IO[str]:
        return self._stream if self._stream is not None else sys.stdout

    def _on_terminal(self) -> bool:
        if not self.environ.get("TERM"):
            return False
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty and isatty())

    # ---- acquire / release ----

    def acquire(self) -> "EnvironmentGuard":
        if self.acquired:
            raise RuntimeError("EnvironmentGuard can only be acquired once")
        self._saved = snapshot(self.environ)
        self.acquired = True

        if self._on_terminal():
            self.stream.write(HIDE_CURSOR)
            self.stream.flush()
            self.cursor_hidden = True

        atexit.register(self.release)
        if threading.current_thread() is threading.main_thread():
            for sig in self._signals:
                self._previous_handlers[sig] = signal.signal(sig, self._handle_signal)
        return self

    def release(self) -> bool:
        """Restore cursor and environment. Returns False if already released."""
        with self._lock:
            if self.released or not self.acquired:
                return False
            self.released = True

        try:
            if self.cursor_hidden:
                self.stream.write(SHOW_CURSOR)
                self.stream.flush()
                self.cursor_hidden = False
        finally:
            if self._saved is not None:
                restore(self.environ, self._saved)
            self._restore_handlers()
            atexit.unregister(self.release)
        return True

    def _restore_handlers(self) -> None:
        if threading.current_thread() is not threading.main_thread():
            return
        for sig, handler in self._previous_handlers.items():
            signal.signal(sig, handler if handler is not None else signal.SIG_DFL)
        self._previous_handlers.clear()

    def _handle_signal(self, signum, _frame) -> None:
        self.release()
        sys.exit(128 + signum)

    # ---- context manager ----

    def __enter__(self) -> "EnvironmentGuard":
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
