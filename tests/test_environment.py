from __future__ import annotations

import io
import os
import signal

import pytest

from depbuild.environment import HIDE_CURSOR, SHOW_CURSOR, EnvironmentGuard


class TTY(io.StringIO):
    def isatty(self) -> bool:
        return True


def test_restores_exact_snapshot() -> None:
    env = {"PATH": "/usr/bin", "CC": "gcc", "HOME": "/root"}
    with EnvironmentGuard(env, io.StringIO(), signals=()):
        env["NEW"] = "1"
        env["CC"] = "clang"
        del env["HOME"]
    assert env == {"PATH": "/usr/bin", "CC": "gcc", "HOME": "/root"}


def test_restores_on_exception() -> None:
    env = {"A": "1"}
    with pytest.raises(RuntimeError):
        with EnvironmentGuard(env, io.StringIO(), signals=()):
            env["A"] = "2"
            raise RuntimeError("boom")
    assert env == {"A": "1"}


def test_restores_on_keyboard_interrupt() -> None:
    env = {"A": "1"}
    with pytest.raises(KeyboardInterrupt):
        with EnvironmentGuard(env, io.StringIO(), signals=()):
            env["B"] = "2"
            raise KeyboardInterrupt
    assert env == {"A": "1"}


def test_release_runs_once() -> None:
    env = {"A": "1"}
    guard = EnvironmentGuard(env, io.StringIO(), signals=()).acquire()
    env["A"] = "2"
    assert guard.release() is True
    env["A"] = "3"
    assert guard.release() is False
    assert env["A"] == "3"


def test_release_before_acquire_is_a_noop() -> None:
    env = {"A": "1"}
    assert EnvironmentGuard(env, io.StringIO(), signals=()).release() is False


def test_cannot_acquire_twice() -> None:
    guard = EnvironmentGuard({}, io.StringIO(), signals=()).acquire()
    try:
        with pytest.raises(RuntimeError):
            guard.acquire()
    finally:
        guard.release()


def test_cursor_hidden_and_shown_on_terminal() -> None:
    out = TTY()
    env = {"TERM": "xterm"}
    with EnvironmentGuard(env, out, signals=()) as guard:
        assert guard.cursor_hidden
        assert out.getvalue() == HIDE_CURSOR
    assert out.getvalue() == HIDE_CURSOR + SHOW_CURSOR


def test_cursor_untouched_without_term_or_tty() -> None:
    out = TTY()
    with EnvironmentGuard({}, out, signals=()):
        pass
    plain = io.StringIO()
    with EnvironmentGuard({"TERM": "xterm"}, plain, signals=()):
        pass
    assert out.getvalue() == ""
    assert plain.getvalue() == ""


def test_works_on_the_real_process_environment(monkeypatch) -> None:
    monkeypatch.setenv("DEPBUILD_KEEP", "kept")
    monkeypatch.delenv("DEPBUILD_ADDED", raising=False)
    before = dict(os.environ)

    with EnvironmentGuard(stream=io.StringIO(), signals=()):
        os.environ["DEPBUILD_ADDED"] = "x"
        os.environ["DEPBUILD_KEEP"] = "changed"

    assert dict(os.environ) == before


def test_termination_signal_restores_and_exits() -> None:
    env = {"A": "1"}
    previous = signal.getsignal(signal.SIGTERM)
    guard = EnvironmentGuard(env, io.StringIO(), signals=(signal.SIGTERM,)).acquire()
    assert signal.getsignal(signal.SIGTERM) == guard._handle_signal

    env["A"] = "2"
    with pytest.raises(SystemExit) as exc:
        guard._handle_signal(signal.SIGTERM, None)

    assert exc.value.code == 128 + signal.SIGTERM
    assert env == {"A": "1"}
    assert signal.getsignal(signal.SIGTERM) == previous
