# orchestrator.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .cache import BuildCache, MarkerStore
from .config import BuildConfig
from .errors import BuildStepFailure
from .model import BuildContext, Outcome, Target
from .runner import ProcessRunner, tail
from .selection import select_targets
from .ui.console import Console, get_console
from .ui.progress import Spinner

LOG_TAIL_LINES = 100


@dataclass
class BuildReport:
    outcomes: Dict[str, Outcome] = field(default_factory=dict)
    failure: Optional[BuildStepFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def names(self, outcome: Outcome) -> List[str]:
        return [n for n, o in self.outcomes.items() if o is outcome]


def check_unique(targets: Sequence[Target]) -> None:
    seen = set()
    for t in targets:
        if t.name in seen:
            raise ValueError(f"Duplicate target name: {t.name}")
        seen.add(t.name)


class Orchestrator:
    """
    Walks the targets in declaration order, one at a time:

      PENDING -> SKIPPED | CACHED | REBUILDING -> DONE | FAILED

    The first FAILED target stops the run; everything after it stays PENDING.
    """

    def __init__(
        self,
        targets: Sequence[Target],
        config: BuildConfig,
        *,
        console: Optional[Console] = None,
        runner: Optional[ProcessRunner] = None,
        spinner: Optional[Spinner] = None,
        tail_lines: int = LOG_TAIL_LINES,
    ):
        check_unique(targets)
        self.targets = list(targets)
        self.config = config
        self.console = console or get_console()
        self.markers = MarkerStore(config.build_root)
        self.cache = BuildCache(self.markers, config.root)
        self.runner = runner or ProcessRunner()
        self.spinner = spinner or Spinner(self.console.out)
        self.tail_lines = tail_lines

    def context_for(self, target: Target) -> BuildContext:
        return BuildContext(
            name=target.name,
            source_dir=target.source_path(self.config.root),
            build_dir=self.markers.build_dir(target.name),
            out_dir=self.config.prefix,
            jobs=self.config.jobs,
            do_build=True,
            clean=self.config.clean,
            verbose=self.config.verbose,
        )

    def run(self) -> BuildReport:
        selected = select_targets(self.targets, self.config.specifier, mode=self.config.match)
        fingerprint = self.config.fingerprint
        report = BuildReport(outcomes={t.name: Outcome.PENDING for t in self.targets})

        for target in self.targets:
            outcome = self._run_target(target, fingerprint, selected=target.name in selected, report=report)
            report.outcomes[target.name] = outcome
            if outcome is Outcome.FAILED:
                break

        return report

    def _run_target(self, target: Target, fingerprint: str, *, selected: bool, report: BuildReport) -> Outcome:
        decision = self.cache.evaluate(target, fingerprint, selected=selected, clean=self.config.clean)
        self.console.print_target_start(target.name)
        self.console.print_debug(f"{target.name}: {decision.outcome.value} ({decision.reason})")

        if decision.outcome is not Outcome.REBUILDING:
            self.console.print_outcome(decision.outcome.marker)
            return decision.outcome

        report.outcomes[target.name] = Outcome.REBUILDING
        ctx = self.context_for(target)
        log_path = self.markers.log_path(target.name)
        result = self.runner.run(target, ctx, log_path, watch=self.spinner.watch)

        if result.ok:
            self.cache.record_success(target, fingerprint)
            self.console.print_outcome(Outcome.DONE.marker)
            return Outcome.DONE

        self.console.print_outcome(Outcome.FAILED.marker)
        failure = BuildStepFailure(target.name, result.exit_code, log_path, command=result.command)
        self.console.print_log_tail(tail(log_path, self.tail_lines))
        self.console.print_info(failure.message)
        report.failure = failure
        return Outcome.FAILED


def run_build(
    targets: Sequence[Target],
    config: BuildConfig,
    *,
    console: Optional[Console] = None,
    runner: Optional[ProcessRunner] = None,
    spinner: Optional[Spinner] = None,
) -> BuildReport:
    return Orchestrator(targets, config, console=console, runner=runner, spinner=spinner).run()
