from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from ccwrap.action_items import (
    ActionItem,
    CanonicalCommand,
    DiagnosticError,
    DiagnosticWarning,
    DriverCommand,
)
from ccwrap.capture import CaptureSink
from ccwrap.config import WrapperConfig
from ccwrap.exceptions import CompilationCommandError
from ccwrap.invariants import never
from ccwrap.log import Verbosity, WrapperLog
from ccwrap.process import RunAndWait, run_and_wait


@dataclass(frozen=True)
class DispatchDeps:
    capture: CaptureSink
    run: RunAndWait = run_and_wait
    log: WrapperLog = field(default_factory=WrapperLog)


def should_run_driver_command(config: WrapperConfig) -> bool:
    return not config.skip_non_capture_commands or config.is_compilation_database


def execute_action_item(
    item: ActionItem,
    *,
    program: str,
    args: Sequence[str],
    config: WrapperConfig,
    deps: DispatchDeps,
) -> int | None:
    """Perform the side effect of one item.

    Returns the exit status when a command was actually run, else None.
    ``program`` and ``args`` are the original invocation, used for reporting.
    """
    if isinstance(item, DiagnosticError):
        # `clang -###` pretty much never fails itself; it reports problems
        # with the real command on stderr instead.
        raise CompilationCommandError(program, args, item.text)
    if isinstance(item, DiagnosticWarning):
        deps.log.external_warning(item.text)
        return None
    if isinstance(item, CanonicalCommand):
        deps.capture(item.command)
        return None
    if isinstance(item, DriverCommand):
        if should_run_driver_command(config):
            return deps.run(item.command.program, item.command.args)
        deps.log.debug(
            Verbosity.QUIET,
            "Skipping seemingly uninteresting driver command "
            f"{item.command.command_to_run()}",
        )
        return None
    never("unknown action item", item_type=type(item).__name__)
