"""Entry point reproducing one compiler invocation while capturing what it compiles."""

from __future__ import annotations

from typing import Sequence

from ccwrap.action_items import ActionItem
from ccwrap.classifier import LineStream, normalize
from ccwrap.config import WrapperConfig
from ccwrap.dispatch import DispatchDeps, execute_action_item
from ccwrap.log import Verbosity
from ccwrap.process import stream_combined_output
from ccwrap.staging import check_for_existing_file

CXX_SUFFIX = "++"


def xx_suffix(program: str) -> str:
    return CXX_SUFFIX if program.endswith(CXX_SUFFIX) else ""


def bundled_compiler(config: WrapperConfig, suffix: str) -> str:
    return config.clang_bin + suffix


def real_compiler(program: str, config: WrapperConfig, suffix: str) -> tuple[str, bool]:
    """Return the binary that really runs, and whether it must run afterwards.

    An alternate toolchain is needed when outputs have to be binary-compatible
    with a vendor compiler (precompiled headers, for instance), so it always
    runs the original command once capture is done.
    """
    if config.alternate_toolchain is not None:
        return config.alternate_toolchain + suffix, True
    return program, False


def run(
    program: str,
    args: Sequence[str],
    *,
    config: WrapperConfig,
    deps: DispatchDeps,
    stream: LineStream = stream_combined_output,
) -> int:
    suffix = xx_suffix(program)
    clang_xx = bundled_compiler(config, suffix)
    check_for_existing_file(args, config)
    real_program, should_run_original_command = real_compiler(program, config, suffix)
    if should_run_original_command:
        deps.log.debug(Verbosity.MEDIUM, f"Will run alternate toolchain {real_program}")
    items: list[ActionItem] = normalize(
        clang_xx,
        args,
        driver_program=real_program,
        benign_patterns=config.benign_patterns,
        log=deps.log,
        stream=stream,
    )
    exit_code = 0
    for item in items:
        status = execute_action_item(
            item,
            program=program,
            args=args,
            config=config,
            deps=deps,
        )
        if status is not None:
            exit_code = status
    if not items or should_run_original_command:
        if not items:
            # Happens when only assembler commands would run, or when the
            # input file does not exist: the real compiler reports that
            # better than an empty capture would.
            deps.log.debug(
                Verbosity.QUIET,
                "WARNING: `clang -### <args>` returned an empty set of commands to run "
                "and no error. Will run the original command directly:\n  "
                + " ".join([real_program, *args]),
            )
        return deps.run(real_program, args)
    return exit_code
