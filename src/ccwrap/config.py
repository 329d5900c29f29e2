from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time
from enum import Enum
from pathlib import Path
import re
from typing import Mapping, TypeAlias
import tomllib

from ccwrap.exceptions import ConfigError
from ccwrap.log import Verbosity
from ccwrap.runtime import env_policy

DEFAULT_CONFIG_NAME = "ccwrap.toml"
DEFAULT_CLANG_BIN = "clang"
DEFAULT_BENIGN_PATTERNS: tuple[str, ...] = (
    r"clang[^ :]*: (error|warning): unsupported argument .* to option 'fsanitize='",
)

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


class BuildMode(Enum):
    NONE = "none"
    COMPILATION_DATABASE = "compilation-database"

    @classmethod
    def parse(cls, text: str) -> "BuildMode":
        normalized = text.strip().lower().replace("_", "-")
        for mode in cls:
            if mode.value == normalized:
                return mode
        raise ConfigError(f"unknown build_mode: {text!r}")


@dataclass(frozen=True)
class WrapperConfig:
    build_mode: BuildMode = BuildMode.NONE
    ignore_regex: re.Pattern[str] | None = None
    skip_non_capture_commands: bool = False
    alternate_toolchain: str | None = None
    clang_bin: str = DEFAULT_CLANG_BIN
    benign_patterns: tuple[re.Pattern[str], ...] = ()
    verbosity: Verbosity = Verbosity.OFF
    capture_journal: Path | None = None

    @property
    def is_compilation_database(self) -> bool:
        return self.build_mode is BuildMode.COMPILATION_DATABASE

    def to_payload(self) -> dict[str, object]:
        return {
            "build_mode": self.build_mode.value,
            "ignore_regex": self.ignore_regex.pattern if self.ignore_regex else None,
            "skip_non_capture_commands": self.skip_non_capture_commands,
            "alternate_toolchain": self.alternate_toolchain,
            "clang_bin": self.clang_bin,
            "benign_patterns": [pattern.pattern for pattern in self.benign_patterns],
            "verbosity": self.verbosity.name.lower(),
            "capture_journal": str(self.capture_journal) if self.capture_journal else None,
        }


def default_config() -> WrapperConfig:
    return WrapperConfig(benign_patterns=_compile_patterns(DEFAULT_BENIGN_PATTERNS))


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def wrapper_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    data = load_config(root=root, config_path=config_path)
    section = data.get("wrapper", {})
    return section if isinstance(section, dict) else {}


def _as_bool(value: TomlValue) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return False


def _optional_text(value: TomlValue) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _pattern_list(value: TomlValue) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [item for item in value if isinstance(item, str) and item.strip()]
    return None


def _compile(pattern: str, *, key: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigError(f"invalid regex for {key}: {pattern!r} ({exc})") from exc


def _compile_patterns(patterns: tuple[str, ...] | list[str]) -> tuple[re.Pattern[str], ...]:
    return tuple(_compile(pattern, key="benign_patterns") for pattern in patterns)


def merge_payload(payload: TomlTable, defaults: TomlTable) -> TomlTable:
    merged = dict(defaults)
    for key, value in payload.items():
        if value is None:
            continue
        merged[key] = value
    return merged


def env_overrides(environ: Mapping[str, str] | None = None) -> TomlTable:
    payload: TomlTable = {
        "build_mode": env_policy.env_text(env_policy.BUILD_MODE_ENV, environ=environ) or None,
        "ignore_regex": env_policy.env_text(env_policy.IGNORE_REGEX_ENV, environ=environ) or None,
        "skip_non_capture_commands": env_policy.env_flag(
            env_policy.SKIP_NON_CAPTURE_ENV, environ=environ
        ),
        "alternate_toolchain": env_policy.env_text(
            env_policy.ALTERNATE_TOOLCHAIN_ENV, environ=environ
        )
        or None,
        "clang_bin": env_policy.env_text(env_policy.CLANG_BIN_ENV, environ=environ) or None,
        "benign_patterns": env_policy.env_patterns(
            env_policy.BENIGN_PATTERNS_ENV, environ=environ
        ),
        "verbosity": env_policy.env_text(env_policy.VERBOSITY_ENV, environ=environ) or None,
        "capture_journal": env_policy.env_text(
            env_policy.CAPTURE_JOURNAL_ENV, environ=environ
        )
        or None,
    }
    return {key: value for key, value in payload.items() if value is not None}


def config_from_table(section: TomlTable) -> WrapperConfig:
    config = default_config()
    build_mode = _optional_text(section.get("build_mode"))
    if build_mode is not None:
        config = replace(config, build_mode=BuildMode.parse(build_mode))
    ignore_regex = _optional_text(section.get("ignore_regex"))
    if ignore_regex is not None:
        config = replace(config, ignore_regex=_compile(ignore_regex, key="ignore_regex"))
    if "skip_non_capture_commands" in section:
        config = replace(
            config,
            skip_non_capture_commands=_as_bool(section.get("skip_non_capture_commands")),
        )
    config = replace(
        config,
        alternate_toolchain=_optional_text(section.get("alternate_toolchain")),
    )
    clang_bin = _optional_text(section.get("clang_bin"))
    if clang_bin is not None:
        config = replace(config, clang_bin=clang_bin)
    patterns = _pattern_list(section.get("benign_patterns"))
    if patterns is not None:
        config = replace(config, benign_patterns=_compile_patterns(patterns))
    verbosity = _optional_text(section.get("verbosity"))
    if verbosity is not None:
        try:
            config = replace(config, verbosity=Verbosity.parse(verbosity))
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
    journal = _optional_text(section.get("capture_journal"))
    if journal is not None:
        config = replace(config, capture_journal=Path(journal))
    return config


def resolve_config(
    *,
    root: Path | None = None,
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    overrides: TomlTable | None = None,
) -> WrapperConfig:
    """Layer ccwrap.toml, CCWRAP_* variables and explicit overrides, in that order."""
    if config_path is None:
        env_path = env_policy.env_text(env_policy.CONFIG_PATH_ENV, environ=environ)
        if env_path:
            config_path = Path(env_path)
    section = wrapper_defaults(root=root, config_path=config_path)
    section = merge_payload(env_overrides(environ), section)
    section = merge_payload(overrides or {}, section)
    return config_from_table(section)
