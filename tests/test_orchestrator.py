from __future__ import annotations

import pytest

from depbuild.cache import MarkerStore
from depbuild.dsl import cmd, target
from depbuild.model import Outcome
from depbuild.orchestrator import Orchestrator, run_build

from conftest import py


def _run(targets, config, console, runner, spinner):
    return run_build(targets, config, console=console, runner=runner, spinner=spinner)


def test_first_run_builds_then_second_run_is_cached(make_target, config_for, console, runner, spinner, popen) -> None:
    proto = make_target("protobuf")
    config = config_for()

    first = _run([proto], config, console, runner, spinner)

    assert first.outcomes == {"protobuf": Outcome.DONE}
    assert first.exit_code == 0
    assert MarkerStore(config.build_root).read("protobuf") == config.fingerprint
    assert len(popen.calls) == 1

    second = _run([proto], config_for(), console, runner, spinner)

    assert second.outcomes == {"protobuf": Outcome.CACHED}
    assert second.exit_code == 0
    assert len(popen.calls) == 1
    assert "Building protobuf [DONE]" in console.out.getvalue()
    assert "Building protobuf [CACHED]" in console.out.getvalue()


def test_changed_prefix_rebuilds_every_cached_target(make_target, config_for, console, runner, spinner, root) -> None:
    targets = [make_target("protobuf"), make_target("zlib")]
    _run(targets, config_for(), console, runner, spinner)

    report = _run(targets, config_for(prefix=root / "other-out"), console, runner, spinner)

    assert report.outcomes == {"protobuf": Outcome.DONE, "zlib": Outcome.DONE}


def test_changed_compiler_rebuilds(make_target, config_for, console, runner, spinner, popen) -> None:
    targets = [make_target("protobuf")]
    _run(targets, config_for(), console, runner, spinner)
    _run(targets, config_for(environ={"CC": "clang", "CXX": "clang++", "LD": ""}), console, runner, spinner)
    assert len(popen.calls) == 2


def test_clean_rebuilds_even_when_settings_match(make_target, config_for, console, runner, spinner, popen) -> None:
    targets = [make_target("protobuf")]
    _run(targets, config_for(), console, runner, spinner)

    report = _run(targets, config_for(clean=True), console, runner, spinner)

    assert report.outcomes == {"protobuf": Outcome.DONE}
    assert len(popen.calls) == 2


def test_unselected_targets_are_skipped(make_target, config_for, console, runner, spinner, popen) -> None:
    targets = [make_target("protobuf"), make_target("zlib")]

    report = _run(targets, config_for(specifier="zlib"), console, runner, spinner)

    assert report.outcomes == {"protobuf": Outcome.SKIPPED, "zlib": Outcome.DONE}
    assert MarkerStore(config_for().build_root).read("protobuf") is None
    assert "Building protobuf [SKIPPED]" in console.out.getvalue()
    assert len(popen.calls) == 1


def test_loose_match_selects_by_substring(make_target, config_for, console, runner, spinner) -> None:
    targets = [make_target("protobuf")]
    exact = _run(targets, config_for(specifier="protobuf-extra"), console, runner, spinner)
    loose = _run(targets, config_for(specifier="protobuf-extra", loose_match=True), console, runner, spinner)
    assert exact.outcomes == {"protobuf": Outcome.SKIPPED}
    assert loose.outcomes == {"protobuf": Outcome.DONE}


def test_failure_halts_remaining_targets(make_target, config_for, console, runner, spinner, popen) -> None:
    a = make_target("a", py("import sys; print('compile error in a.cc'); sys.exit(1)"))
    b = make_target("b")
    config = config_for()

    report = _run([a, b], config, console, runner, spinner)

    assert report.outcomes == {"a": Outcome.FAILED, "b": Outcome.PENDING}
    assert report.exit_code == 1
    assert report.failure is not None
    assert report.failure.target == "a"
    assert len(popen.calls) == 1

    store = MarkerStore(config.build_root)
    assert store.read("a") is None
    assert store.log_path("a").exists()

    out = console.out.getvalue()
    assert "Building a [FAILED]" in out
    assert "tail of build log:" in out
    assert "compile error in a.cc" in out
    assert f"Failed to build a, see {store.log_path('a')} for more details" in out
    assert "Building b" not in out


def test_failed_rebuild_drops_previous_marker(make_target, config_for, console, runner, spinner) -> None:
    ok = make_target("lib")
    _run([ok], config_for(), console, runner, spinner)

    broken = target("lib", cmd(py("import sys; sys.exit(2)")))
    report = _run([broken], config_for(clean=True), console, runner, spinner)

    assert report.outcomes == {"lib": Outcome.FAILED}
    assert MarkerStore(config_for().build_root).read("lib") is None


def test_log_tail_is_bounded(make_target, config_for, console, runner, spinner) -> None:
    noisy = make_target("noisy", py("import sys; [print('line', i) for i in range(300)]; sys.exit(1)"))
    orch = Orchestrator([noisy], config_for(), console=console, runner=runner, spinner=spinner, tail_lines=10)

    orch.run()

    out = console.out.getvalue()
    assert "line 299" in out
    assert "line 292" in out
    assert "line 291" not in out


def test_duplicate_target_names_rejected(make_target, config_for, console) -> None:
    t = make_target("dup")
    with pytest.raises(ValueError):
        Orchestrator([t, t], config_for(), console=console)


def test_debug_console_reports_cache_reasons(make_target, config_for, runner, spinner, console) -> None:
    console.debug = True
    _run([make_target("protobuf")], config_for(), console, runner, spinner)
    assert "[DEBUG] protobuf: rebuilding (no previous build)" in console.err.getvalue()


def test_braces_in_commands_reach_the_process(make_target, config_for, console, runner, spinner, popen) -> None:
    lib = make_target("lib", py("d = {'a': 1}; print(d)"))

    report = _run([lib], config_for(), console, runner, spinner)

    assert report.outcomes == {"lib": Outcome.DONE}
    assert popen.calls[0][-1] == "d = {'a': 1}; print(d)"
    assert "{'a': 1}" in MarkerStore(config_for().build_root).log_path("lib").read_text()
