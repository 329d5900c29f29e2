"""Expand a driver invocation with ``clang -###`` and classify what it prints.

``classify_line`` is a pure function of one output line; the subprocess work
in ``driver_action_items`` only feeds it.
"""

from __future__ import annotations

import re
from typing import Callable, ContextManager, Iterable, Iterator, Sequence

from ccwrap.action_items import (
    ActionItem,
    CanonicalCommand,
    DiagnosticError,
    DiagnosticWarning,
    DriverCommand,
)
from ccwrap.command import CompilerCommand, QuotingStyle
from ccwrap.invariants import never
from ccwrap.log import Verbosity, WrapperLog
from ccwrap.process import stream_combined_output

LineStream = Callable[[Sequence[str]], ContextManager[Iterator[str]]]

DRY_RUN_FLAG = "-###"
# -fno-cxx-modules: C++ modules are unsupported; it is driver-only, so it
#   must be passed here, and -Qunused-arguments silences the warning when
#   modules were not requested in the first place.
# -Wno-ignored-optimization-argument: gcc-only optimisation flags.
# -fno-addrsig: otherwise appended after the source path in -cc1 lines.
NORMALIZING_FLAGS: tuple[str, ...] = (
    "-fno-cxx-modules",
    "-Qunused-arguments",
    "-Wno-ignored-optimization-argument",
    "-fno-addrsig",
)
# Embedded bitcode spawns extra cc1 commands reading .bc files that are never
# generated.
BITCODE_FLAGS: tuple[str, ...] = ("-fembed-bitcode=off",)

_COMMAND_PREFIX = ' "'
_ARG_SEPARATOR = '" "'
# Sub-commands printed by `clang -###` start with ' "/absolute/path/to/binary"'.
_COMMANDS_OR_DIAGNOSTICS_RE = re.compile(r' "/|clang[^ :]*: (error|warning): ')
_WARNING_RE = re.compile(r"clang[^ :]*: warning: ")


def dry_run_command(command: CompilerCommand) -> CompilerCommand:
    return (
        command.prepend_arg(DRY_RUN_FLAG)
        .append_args(NORMALIZING_FLAGS)
        .append_args(BITCODE_FLAGS)
    )


def split_canonical_command(line: str) -> CompilerCommand:
    # Pad the line so every argument, first and last included, sits between
    # two separators.
    tokens = ('"' + line + ' "').split(_ARG_SEPARATOR)
    if tokens and tokens[0] == "":
        tokens = tokens[1:]
    if tokens and tokens[-1] == "":
        tokens = tokens[:-1]
    if not tokens:
        never("argv cannot be empty", line=line)
    program, *args = tokens
    return CompilerCommand.mk(
        QuotingStyle.ESCAPED_DOUBLE_QUOTES,
        program=program,
        args=args,
        is_driver=False,
    )


def is_benign(line: str, benign_patterns: Sequence[re.Pattern[str]]) -> bool:
    return any(pattern.match(line) for pattern in benign_patterns)


def classify_line(
    line: str,
    benign_patterns: Sequence[re.Pattern[str]] = (),
) -> ActionItem | None:
    if not _COMMANDS_OR_DIAGNOSTICS_RE.match(line):
        return None
    if is_benign(line, benign_patterns):
        return None
    if line.startswith(_COMMAND_PREFIX):
        return CanonicalCommand(split_canonical_command(line))
    if _WARNING_RE.match(line):
        return DiagnosticWarning(line)
    return DiagnosticError(line)


def classify_lines(
    lines: Iterable[str],
    benign_patterns: Sequence[re.Pattern[str]] = (),
) -> list[ActionItem]:
    items: list[ActionItem] = []
    for line in lines:
        item = classify_line(line.rstrip("\r\n"), benign_patterns)
        if item is not None:
            items.append(item)
    return items


def driver_action_items(
    command: CompilerCommand,
    *,
    benign_patterns: Sequence[re.Pattern[str]] = (),
    log: WrapperLog | None = None,
    stream: LineStream = stream_combined_output,
) -> list[ActionItem]:
    """Return the commands `clang -### <args>` says it would run, plus diagnostics."""
    log = log or WrapperLog()
    dry_run = dry_run_command(command)
    log.debug(Verbosity.MEDIUM, f"clang -### invocation: {dry_run.command_to_run()} 2>&1")
    with stream(dry_run.argv) as lines:
        return classify_lines(lines, benign_patterns)


def normalize(
    program: str,
    args: Sequence[str],
    *,
    driver_program: str | None = None,
    benign_patterns: Sequence[re.Pattern[str]] = (),
    log: WrapperLog | None = None,
    stream: LineStream = stream_combined_output,
) -> list[ActionItem]:
    """Classify ``program args``, or keep it whole when it cannot compile anything.

    ``driver_program`` is the binary a short-circuited ``DriverCommand`` should
    carry; it defaults to ``program``.
    """
    command = CompilerCommand.mk(
        QuotingStyle.SINGLE_QUOTES, program=program, args=args, is_driver=True
    )
    if not command.may_capture():
        return [
            DriverCommand(
                CompilerCommand.mk(
                    QuotingStyle.SINGLE_QUOTES,
                    program=driver_program or program,
                    args=args,
                    is_driver=True,
                )
            )
        ]
    return driver_action_items(
        command,
        benign_patterns=benign_patterns,
        log=log,
        stream=stream,
    )
