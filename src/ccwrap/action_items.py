"""Work items produced by classifying a driver's ``-###`` output.

``ActionItem`` is a closed union: the dispatcher matches on exactly these four
types and treats anything else as unreachable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ccwrap.command import CompilerCommand


@dataclass(frozen=True)
class CanonicalCommand:
    """A fully expanded sub-command printed by ``clang -###``."""

    command: CompilerCommand


@dataclass(frozen=True)
class DriverCommand:
    """The original, unexpanded invocation, to be run as-is."""

    command: CompilerCommand


@dataclass(frozen=True)
class DiagnosticError:
    text: str


@dataclass(frozen=True)
class DiagnosticWarning:
    text: str


ActionItem = Union[CanonicalCommand, DriverCommand, DiagnosticError, DiagnosticWarning]


def item_payload(item: ActionItem) -> dict[str, object]:
    if isinstance(item, (CanonicalCommand, DriverCommand)):
        return {
            "kind": type(item).__name__,
            "program": item.command.program,
            "arguments": list(item.command.args),
        }
    return {"kind": type(item).__name__, "text": item.text}
