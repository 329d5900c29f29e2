"""Invariant markers for the compiler wrapper."""

from __future__ import annotations

from typing import NoReturn

from ccwrap.exceptions import NeverThrown


def never(reason: str = "", **env: object) -> NoReturn:
    """Mark a code path as intentionally unreachable.

    The env payload is metadata only; it is attached to the raised exception.
    """
    raise NeverThrown(reason or "never() marker reached", env=env)
