"""Console output formatting utilities for depbuild."""

from __future__ import annotations

import sys
from typing import IO, Iterable, Optional, Sequence


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False, stream: Optional[IO[str]] = None, err: Optional[IO[str]] = None):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
            stream: Output stream (defaults to the current sys.stdout)
            err: Error stream (defaults to the current sys.stderr)
        """
        self.debug = debug
        self._stream = stream
        self._err = err

    @property
    def out(self) -> IO[str]:
        return self._stream if self._stream is not None else sys.stdout

    @property
    def err(self) -> IO[str]:
        return self._err if self._err is not None else sys.stderr

    def _print(self, *args, **kwargs) -> None:
        print(*args, file=self.out, flush=True, **kwargs)

    def print_tool_check(self, name: str, path: Optional[str]) -> None:
        """Print the result of a required-tool lookup."""
        if path:
            self._print(f"Checking {name} [FOUND] ({path})")
        else:
            self._print(f"Checking {name} [NOT FOUND]")

    def print_settings(self, rows: Sequence[tuple[str, str]]) -> None:
        """Print the effective configuration before building."""
        self._print("Settings:")
        for key, value in rows:
            self._print(f"  {key}: {value}")
        self._print()

    def print_target_start(self, name: str) -> None:
        """Start the status line for a target; the outcome is appended later."""
        self._print(f"Building {name} ", end="")

    def print_outcome(self, marker: str) -> None:
        """Finish the status line with [DONE], [FAILED], [SKIPPED] or [CACHED]."""
        self._print(marker)

    def print_log_tail(self, lines: Iterable[str]) -> None:
        self._print("tail of build log:")
        for line in lines:
            self._print(line)
        self._print()

    def print_done(self) -> None:
        self._print("Done!")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=self.err)
        print(f"{message}", file=self.err)
        if details:
            for detail in details:
                print(f"  {detail}", file=self.err)
        if suggestion:
            print(f"\n{suggestion}", file=self.err)
        self.err.flush()

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=self.err)
        else:
            print(f"Error: {exc}", file=self.err)

    def print_warning(self, message: str) -> None:
        print(f"WARNING: {message}", file=self.err)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        self._print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=self.err)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
