from __future__ import annotations

import json
import shutil
from pathlib import Path
import sys
from typing import List, Mapping, Optional, Sequence

import typer

from ccwrap import wrapper
from ccwrap.action_items import item_payload
from ccwrap.capture import CaptureSink, JournalCaptureSink, RecordingCaptureSink
from ccwrap.classifier import classify_lines
from ccwrap.config import TomlTable, WrapperConfig, resolve_config
from ccwrap.dispatch import DispatchDeps
from ccwrap.exceptions import CompilationCommandError, ConfigError
from ccwrap.log import WrapperLog
from ccwrap.process import MISSING_EXECUTABLE_EXIT
from ccwrap.runtime import env_policy

app = typer.Typer(add_completion=False)

_FATAL_EXIT = 1
_CONFIG_ERROR_EXIT = 2
_STDIN_ALIAS = "-"


def _capture_sink(config: WrapperConfig) -> CaptureSink:
    if config.capture_journal is not None:
        return JournalCaptureSink(config.capture_journal)
    # Without a journal the canonical commands are only kept for this run.
    return RecordingCaptureSink()


def _load_config(
    *,
    config_path: Optional[Path],
    overrides: TomlTable,
) -> WrapperConfig:
    try:
        return resolve_config(config_path=config_path, overrides=overrides)
    except ConfigError as exc:
        typer.echo(f"ccwrap: {exc}", err=True)
        raise typer.Exit(code=_CONFIG_ERROR_EXIT)


def wrap_invocation(
    program: str,
    args: Sequence[str],
    *,
    config: WrapperConfig,
    deps: DispatchDeps | None = None,
) -> int:
    """Run one wrapped compiler invocation, reporting fatal errors on stderr."""
    if deps is None:
        deps = DispatchDeps(
            capture=_capture_sink(config),
            log=WrapperLog(verbosity=config.verbosity),
        )
    try:
        return wrapper.run(program, list(args), config=config, deps=deps)
    except CompilationCommandError as exc:
        typer.echo(exc.render(), err=True)
        return _FATAL_EXIT
    except FileNotFoundError as exc:
        typer.echo(f"ccwrap: cannot execute {exc.filename or program}: {exc.strerror}", err=True)
        return MISSING_EXECUTABLE_EXIT


@app.command(
    "run",
    context_settings={
        "allow_extra_args": True,
        "ignore_unknown_options": True,
        # Everything after PROGRAM belongs to the compiler, --help included.
        "allow_interspersed_args": False,
    },
)
def run_command(
    program: str = typer.Argument(..., help="Compiler driver to wrap (e.g. clang, c++)."),
    args: List[str] = typer.Argument(None, help="Arguments for the compiler."),
    config_path: Optional[Path] = typer.Option(None, "--config"),
    verbosity: Optional[str] = typer.Option(None, "--verbosity"),
    journal: Optional[Path] = typer.Option(None, "--journal"),
    build_mode: Optional[str] = typer.Option(None, "--build-mode"),
) -> None:
    """Wrap one compiler invocation and exit with its status."""
    overrides: TomlTable = {
        "verbosity": verbosity,
        "capture_journal": str(journal) if journal is not None else None,
        "build_mode": build_mode,
    }
    config = _load_config(config_path=config_path, overrides=overrides)
    raise typer.Exit(code=wrap_invocation(program, list(args or []), config=config))


@app.command("classify")
def classify_command(
    source: str = typer.Argument(_STDIN_ALIAS, help="Captured `-###` output, or - for stdin."),
    config_path: Optional[Path] = typer.Option(None, "--config"),
) -> None:
    """Classify captured `clang -###` output, one JSON object per item."""
    config = _load_config(config_path=config_path, overrides={})
    if source == _STDIN_ALIAS:
        text = sys.stdin.read()
    else:
        text = Path(source).read_text(encoding="utf-8", errors="replace")
    for item in classify_lines(text.splitlines(), config.benign_patterns):
        typer.echo(json.dumps(item_payload(item), sort_keys=True))


@app.command("config")
def config_command(
    config_path: Optional[Path] = typer.Option(None, "--config"),
) -> None:
    """Print the effective configuration."""
    config = _load_config(config_path=config_path, overrides={})
    typer.echo(json.dumps(config.to_payload(), indent=2, sort_keys=True))


def main() -> None:
    app()


def _same_executable(candidate: str, wrapper_path: str) -> bool:
    resolved = shutil.which(candidate)
    wrapper_resolved = shutil.which(wrapper_path) or wrapper_path
    if resolved is None:
        return False
    return Path(resolved).resolve() == Path(wrapper_resolved).resolve()


def resolve_real_compiler(
    env_key: str,
    default_program: str,
    *,
    wrapper_path: str,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Pick the compiler a ``ccwrap-cc``/``ccwrap-c++`` process stands in for.

    ``CC``/``CXX`` usually name the wrapper itself, so the real compiler comes
    from ``CCWRAP_REAL_CC``/``CCWRAP_REAL_CXX``. A value resolving back to the
    wrapper would re-enter it, so the plain default is used instead.
    """
    program = env_policy.env_text(env_key, environ=environ) or default_program
    if _same_executable(program, wrapper_path):
        return default_program
    return program


def _compiler_wrapper_main(env_key: str, default_program: str) -> None:
    program = resolve_real_compiler(env_key, default_program, wrapper_path=sys.argv[0])
    config = _load_config(config_path=None, overrides={})
    raise SystemExit(wrap_invocation(program, sys.argv[1:], config=config))


def cc_main() -> None:
    """Entry point for ``ccwrap-cc``."""
    try:
        _compiler_wrapper_main(env_policy.REAL_CC_ENV, "cc")
    except typer.Exit as exc:
        raise SystemExit(exc.exit_code)


def cxx_main() -> None:
    """Entry point for ``ccwrap-c++``."""
    try:
        _compiler_wrapper_main(env_policy.REAL_CXX_ENV, "c++")
    except typer.Exit as exc:
        raise SystemExit(exc.exit_code)


if __name__ == "__main__":
    main()
