"""Immutable compiler command lines and their shell rendering."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Sequence


class QuotingStyle(Enum):
    # Raw arguments; each is single-quoted with ' and \ escaped.
    SINGLE_QUOTES = "single_quotes"
    # Already escaped by the driver (clang -### output); wrapped in "..." as-is.
    ESCAPED_DOUBLE_QUOTES = "escaped_double_quotes"


def quote(style: QuotingStyle, arg: str) -> str:
    if style is QuotingStyle.SINGLE_QUOTES:
        escaped = arg.replace("\\", "\\\\").replace("'", "\\'")
        return f"'{escaped}'"
    return f'"{arg}"'


SOURCE_SUFFIXES: frozenset[str] = frozenset(
    {
        ".c",
        ".i",
        ".cc",
        ".cp",
        ".cpp",
        ".cxx",
        ".c++",
        ".C",
        ".CC",
        ".CPP",
        ".CXX",
        ".ii",
        ".m",
        ".mi",
        ".mm",
        ".M",
        ".mii",
        ".cu",
        ".h",
        ".hh",
        ".hpp",
        ".hxx",
        ".H",
    }
)


# Flags that make the driver stop before compiling anything, or only query it.
_NO_COMPILE_FLAGS: frozenset[str] = frozenset(
    {
        "-E",
        "-M",
        "-MM",
        "-###",
        "--version",
        "-dumpversion",
        "-dumpmachine",
        "--help",
        "-help",
    }
)
_NO_COMPILE_PREFIXES: tuple[str, ...] = ("-print-", "--print-")


def _looks_like_source(arg: str) -> bool:
    if arg.startswith("-"):
        return False
    dot = arg.rfind(".")
    return dot > 0 and arg[dot:] in SOURCE_SUFFIXES


@dataclass(frozen=True)
class CompilerCommand:
    program: str
    args: tuple[str, ...]
    quoting_style: QuotingStyle
    is_driver: bool

    @classmethod
    def mk(
        cls,
        quoting_style: QuotingStyle,
        *,
        program: str,
        args: Iterable[str],
        is_driver: bool,
    ) -> "CompilerCommand":
        return cls(
            program=program,
            args=tuple(args),
            quoting_style=quoting_style,
            is_driver=is_driver,
        )

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def prepend_arg(self, arg: str) -> "CompilerCommand":
        return replace(self, args=(arg, *self.args))

    def append_args(self, args: Sequence[str]) -> "CompilerCommand":
        return replace(self, args=(*self.args, *args))

    def command_to_run(self) -> str:
        return " ".join(quote(self.quoting_style, arg) for arg in self.argv)

    def may_capture(self) -> bool:
        """Whether running this command could compile a source file.

        Queries, preprocessing-only runs and pure link steps cannot. Argument
        files are opaque here, so their presence keeps the answer True.
        """
        has_input = False
        args = iter(self.args)
        for arg in args:
            if arg in _NO_COMPILE_FLAGS or arg.startswith(_NO_COMPILE_PREFIXES):
                return False
            if arg == "-x":
                # An explicit language; the next token names it, not a file.
                next(args, None)
                has_input = True
            elif arg.startswith("-x"):
                # Joined form, e.g. -xc++.
                has_input = True
            elif arg == "-" or arg.startswith("@") or _looks_like_source(arg):
                has_input = True
        return has_input
