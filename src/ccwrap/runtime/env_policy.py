from __future__ import annotations

import os
from typing import Mapping

_TRUTHY_VALUES = {"1", "true", "yes", "on"}
_FALSEY_VALUES = {"0", "false", "no", "off"}

BUILD_MODE_ENV = "CCWRAP_BUILD_MODE"
IGNORE_REGEX_ENV = "CCWRAP_IGNORE_REGEX"
SKIP_NON_CAPTURE_ENV = "CCWRAP_SKIP_NON_CAPTURE"
ALTERNATE_TOOLCHAIN_ENV = "CCWRAP_ALTERNATE_TOOLCHAIN"
CLANG_BIN_ENV = "CCWRAP_CLANG_BIN"
BENIGN_PATTERNS_ENV = "CCWRAP_BENIGN_PATTERNS"
VERBOSITY_ENV = "CCWRAP_VERBOSITY"
CAPTURE_JOURNAL_ENV = "CCWRAP_CAPTURE_JOURNAL"
CONFIG_PATH_ENV = "CCWRAP_CONFIG"

# Benign patterns are regexes and may contain commas, so they are split on
# newlines only.
_PATTERN_SEPARATOR = "\n"


def env_text(
    name: str,
    *,
    default: str = "",
    environ: Mapping[str, str] | None = None,
) -> str:
    source = os.environ if environ is None else environ
    return source.get(name, default).strip()


def env_flag(
    name: str,
    *,
    environ: Mapping[str, str] | None = None,
) -> bool | None:
    """Parse a boolean env var; unset or unrecognised values yield None."""
    text = env_text(name, environ=environ).lower()
    if text in _TRUTHY_VALUES:
        return True
    if text in _FALSEY_VALUES:
        return False
    return None


def env_patterns(
    name: str,
    *,
    environ: Mapping[str, str] | None = None,
) -> list[str] | None:
    text = env_text(name, environ=environ)
    if not text:
        return None
    return [part.strip() for part in text.split(_PATTERN_SEPARATOR) if part.strip()]


REAL_CC_ENV = "CCWRAP_REAL_CC"
REAL_CXX_ENV = "CCWRAP_REAL_CXX"
