"""Placeholder files for generated sources a build graph names before creating.

Some compilation-database flavours of build tools hand the compiler the path
of a generated file that has not been produced yet. An empty stand-in lets
the compiler carry on instead of failing with "file not found".
"""

from __future__ import annotations

from pathlib import Path
import re
from typing import Sequence

from ccwrap.config import WrapperConfig

COMPILE_ONLY_FLAG = "-c"
ARG_FILE_PREFIX = "@"


def _read_arg_file(token: str) -> list[str] | None:
    path = Path(token[len(ARG_FILE_PREFIX):])
    try:
        return path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError:
        return None


def expand_arg_files(args: Sequence[str]) -> list[str]:
    """Splice the lines of each top-level ``@file`` in place of the reference.

    References inside those files are left as they are. A file that cannot
    be read keeps its ``@`` token, which is what the driver would see too.
    """
    expanded: list[str] = []
    for arg in args:
        if arg.startswith(ARG_FILE_PREFIX):
            lines = _read_arg_file(arg)
            if lines is not None:
                expanded.extend(lines)
                continue
        expanded.append(arg)
    return [arg.strip() for arg in expanded]


def compile_only_target(args: Sequence[str]) -> str | None:
    for index, arg in enumerate(args):
        if arg == COMPILE_ONLY_FLAG:
            return args[index + 1] if index + 1 < len(args) else None
    return None


def stage_placeholder(target: str, ignore_regex: re.Pattern[str]) -> Path | None:
    if not ignore_regex.match(target):
        return None
    path = Path(target)
    if path.exists():
        return None
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch(exist_ok=True)
    return path


def check_for_existing_file(args: Sequence[str], config: WrapperConfig) -> list[Path]:
    """Create the empty placeholder, if any, this invocation needs; return what was created."""
    if not config.is_compilation_database or config.ignore_regex is None:
        return []
    target = compile_only_target(expand_arg_files(args))
    if target is None:
        return []
    created = stage_placeholder(target, config.ignore_regex)
    return [created] if created is not None else []
