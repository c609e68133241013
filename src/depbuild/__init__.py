from .dsl import cmake, cmd, sh, target, targets
from .model import BuildContext, Outcome, Target
from .orchestrator import BuildReport, Orchestrator, run_build
from .steps import BuildStep, CMakeStep, CommandStep, ShellStep

__all__ = [
    "cmake", "cmd", "sh", "target", "targets",
    "BuildContext", "Outcome", "Target",
    "BuildReport", "Orchestrator", "run_build",
    "BuildStep", "CMakeStep", "CommandStep", "ShellStep",
]
