"""Verbosity-filtered diagnostics for the wrapper.

Nothing here touches process-wide state: callers build a ``WrapperLog`` and
hand it to the components that need to report something.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable

import typer

PrintErr = Callable[[str], None]


class Verbosity(IntEnum):
    OFF = 0
    QUIET = 1
    MEDIUM = 2
    VERBOSE = 3

    @classmethod
    def parse(cls, text: str) -> "Verbosity":
        normalized = text.strip().upper()
        if normalized not in cls.__members__:
            raise ValueError(f"unknown verbosity: {text!r}")
        return cls[normalized]


def _default_print_err(message: str) -> None:
    typer.echo(message, err=True)


@dataclass(frozen=True)
class WrapperLog:
    verbosity: Verbosity = Verbosity.OFF
    print_err: PrintErr = field(default=_default_print_err)

    def debug(self, level: Verbosity, message: str) -> None:
        if level <= self.verbosity:
            self.print_err(message)

    def external_warning(self, message: str) -> None:
        self.print_err(message)
