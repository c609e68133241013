# cli.py
from __future__ import annotations

from typing import List

import click

from .cache import BuildCache, MarkerStore
from .config import BuildConfig
from .environment import EnvironmentGuard
from .errors import BuildError, MissingSourceError, UnknownOptionError
from .model import Outcome, Target
from .orchestrator import check_unique, run_build
from .selection import ALL, MATCH_EXACT, unknown_names
from .targets import builtin_targets, load_targets
from .tools import REQUIRED_TOOLS, check_tools
from .ui.console import Console, get_console, set_console


class BuildCommand(click.Command):
    """
    Reports unknown options and stray arguments as a build error (exit 1)
    instead of click's usage error.
    """

    def parse_args(self, ctx: click.Context, args: List[str]) -> List[str]:
        try:
            rest = super().parse_args(ctx, args)
        except click.NoSuchOption as e:
            self._unknown(ctx, e.option_name)
        # extra arguments are allowed by the context settings and land in ctx.args
        if ctx.args:
            self._unknown(ctx, ctx.args[0])
        return rest

    @staticmethod
    def _unknown(ctx: click.Context, option: str) -> None:
        err = UnknownOptionError(option)
        get_console().print_error(
            "Unknown option",
            err.message,
            suggestion=f"Run '{ctx.command_path} --help' for usage.",
        )
        ctx.exit(err.exit_code)


def resolve_targets(targets_file: str | None) -> List[Target]:
    targets = load_targets(targets_file) if targets_file else builtin_targets()
    check_unique(targets)
    return targets


def target_states(targets: List[Target], config: BuildConfig) -> List[tuple[str, str]]:
    """Cache state of every target as it would be seen by a build right now."""
    cache = BuildCache(MarkerStore(config.build_root), config.root)
    rows = []
    for t in targets:
        try:
            decision = cache.decide(t, config.fingerprint, selected=True, clean=False)
        except MissingSourceError:
            rows.append((t.name, "missing source"))
            continue
        if decision.outcome is Outcome.CACHED:
            rows.append((t.name, "cached"))
        elif decision.marker is None:
            rows.append((t.name, "not built"))
        else:
            rows.append((t.name, "stale"))
    return rows


def _report_error(console: Console, e: BuildError) -> None:
    details = [f"{k}: {v}" for k, v in e.details.items() if k != "hint"]
    console.print_error(e.kind.replace("_", " "), e.message, details=details or None, suggestion=e.hint)


def _build(console: Console, config: BuildConfig, targets: List[Target], *, skip_tool_check: bool) -> int:
    config.prepare_dirs()

    if not skip_tool_check:
        check_tools(REQUIRED_TOOLS, console=console)

    console.print_settings(config.summary())

    if config.match == MATCH_EXACT:
        for name in unknown_names(targets, config.specifier):
            console.print_warning(f"no target named {name!r}")

    report = run_build(targets, config, console=console)
    if not report.ok:
        return report.exit_code

    console.print_done()
    return 0


@click.command(
    cls=BuildCommand,
    context_settings={"help_option_names": ["-h", "--help"], "allow_extra_args": True},
)
@click.option("-b", "--build", "specifier", default=ALL, show_default=True,
              help="Targets to build: 'all' or a space separated list of names")
@click.option("-j", "--jobs", type=click.IntRange(min=1), default=None,
              help="Number of jobs to run simultaneously (default: CPU count)")
@click.option("--clean", is_flag=True, default=False, help="Rebuild selected targets from scratch")
@click.option("--prefix", type=click.Path(file_okay=False), default=None,
              help="Install prefix (default: <root>/out)")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Echo every build command into the logs")
@click.option("--loose-match", is_flag=True, default=False,
              help="Select a target when its name appears anywhere in --build")
@click.option("--root", type=click.Path(file_okay=False), default=".", show_default=True,
              help="Directory holding the target sources and build/")
@click.option("--targets-file", type=click.Path(dir_okay=False), default=None,
              help="Python file defining targets() or TARGETS")
@click.option("--skip-tool-check", is_flag=True, default=False, help="Do not look up required tools on PATH")
@click.option("--list", "list_only", is_flag=True, default=False, help="List targets and their cache state")
@click.option("--debug", is_flag=True, default=False,
              help="Enable debug mode (show cache decisions and stack traces)")
@click.pass_context
def cli(ctx, specifier, jobs, clean, prefix, verbose, loose_match, root, targets_file,
        skip_tool_check, list_only, debug):
    """depbuild: cache-aware builder for vendored native dependencies."""
    console = Console(debug=debug)
    set_console(console)

    with EnvironmentGuard():
        try:
            config = BuildConfig.create(
                root=root,
                prefix=prefix,
                specifier=specifier,
                jobs=jobs,
                clean=clean,
                verbose=verbose,
                loose_match=loose_match,
            )
            targets = resolve_targets(targets_file)

            if list_only:
                for name, state in target_states(targets, config):
                    console.print_info(f"{name}: {state}")
                code = 0
            else:
                code = _build(console, config, targets, skip_tool_check=skip_tool_check)

        except BuildError as e:
            _report_error(console, e)
            code = e.exit_code
        except KeyboardInterrupt:
            console.print_info("\nInterrupted by user")
            code = 130
        except Exception as e:
            console.print_exception(e)
            code = 1

    ctx.exit(code)


def main() -> None:
    cli(prog_name="depbuild")


if __name__ == "__main__":
    main()
