from __future__ import annotations

from dataclasses import replace
from pathlib import Path
import re

import pytest

from ccwrap import wrapper
from ccwrap.capture import RecordingCaptureSink
from ccwrap.config import BuildMode, default_config
from ccwrap.dispatch import DispatchDeps
from ccwrap.exceptions import CompilationCommandError
from tests.fakes import FakeRunner, FakeStream

COMPILE_OUTPUT = """\
clang version 11.0.0
 "/opt/clang/bin/clang" "-cc1" "-emit-obj" "-o" "a.o" "-x" "c" "a.c"
"""


def test_xx_suffix_selects_cxx_variant() -> None:
    assert wrapper.xx_suffix("clang++") == "++"
    assert wrapper.xx_suffix("/usr/bin/g++") == "++"
    assert wrapper.xx_suffix("clang") == ""
    config = replace(default_config(), clang_bin="/opt/clang/bin/clang")
    assert wrapper.bundled_compiler(config, "++") == "/opt/clang/bin/clang++"


def test_canonical_commands_are_captured_without_fallback(
    deps: DispatchDeps,
    sink: RecordingCaptureSink,
    runner: FakeRunner,
) -> None:
    stream = FakeStream(COMPILE_OUTPUT)
    config = replace(default_config(), clang_bin="/opt/clang/bin/clang")
    rc = wrapper.run("clang++", ["-c", "a.c"], config=config, deps=deps, stream=stream)
    assert rc == 0
    assert stream.argvs[0][:2] == ["/opt/clang/bin/clang++", "-###"]
    assert [command.program for command in sink.commands] == ["/opt/clang/bin/clang"]
    assert runner.calls == []


def test_empty_classification_runs_original_command(
    deps: DispatchDeps,
    runner: FakeRunner,
    stderr_messages: list[str],
) -> None:
    runner.exit_code = 7
    rc = wrapper.run(
        "clang",
        ["-c", "a.c", "-o", "a.o"],
        config=default_config(),
        deps=deps,
        stream=FakeStream("clang version 11.0.0\n"),
    )
    assert rc == 7
    assert runner.calls == [("clang", ["-c", "a.c", "-o", "a.o"])]
    assert any("empty set of commands" in message for message in stderr_messages)


def test_error_halts_dispatch_of_later_items(
    deps: DispatchDeps,
    sink: RecordingCaptureSink,
    runner: FakeRunner,
) -> None:
    output = (
        "clang: error: no such file or directory: 'a.c'\n"
        ' "/usr/bin/clang" "-cc1" "a.c"\n'
    )
    with pytest.raises(CompilationCommandError):
        wrapper.run(
            "clang",
            ["-c", "a.c"],
            config=default_config(),
            deps=deps,
            stream=FakeStream(output),
        )
    assert sink.commands == []
    assert runner.calls == []


def test_alternate_toolchain_forces_original_run(
    deps: DispatchDeps,
    sink: RecordingCaptureSink,
    runner: FakeRunner,
) -> None:
    config = replace(default_config(), alternate_toolchain="/Applications/Xcode/clang")
    stream = FakeStream(COMPILE_OUTPUT)
    runner.exit_code = 4
    rc = wrapper.run("clang++", ["-c", "a.c"], config=config, deps=deps, stream=stream)
    assert rc == 4
    assert stream.argvs[0][0] == "clang++"
    assert len(sink.commands) == 1
    assert runner.calls == [("/Applications/Xcode/clang++", ["-c", "a.c"])]


def test_link_step_skips_classification_and_runs_driver(
    deps: DispatchDeps,
    runner: FakeRunner,
) -> None:
    stream = FakeStream(COMPILE_OUTPUT)
    rc = wrapper.run("cc", ["main.o", "-o", "app"], config=default_config(), deps=deps, stream=stream)
    assert rc == 0
    assert stream.argvs == []
    assert runner.calls == [("cc", ["main.o", "-o", "app"])]


def test_skipped_link_step_exits_cleanly(
    deps: DispatchDeps,
    runner: FakeRunner,
) -> None:
    config = replace(default_config(), skip_non_capture_commands=True)
    rc = wrapper.run("cc", ["main.o", "-o", "app"], config=config, deps=deps, stream=FakeStream())
    assert rc == 0
    assert runner.calls == []


def test_staging_runs_before_classification(tmp_path: Path, deps: DispatchDeps) -> None:
    target = tmp_path / "gen" / "out.o"
    config = replace(
        default_config(),
        build_mode=BuildMode.COMPILATION_DATABASE,
        ignore_regex=re.compile(r".*\.o$"),
    )
    seen: list[bool] = []

    class _Stream(FakeStream):
        def __call__(self, argv):
            seen.append(target.exists())
            return super().__call__(argv)

    wrapper.run(
        "clang",
        ["-c", str(target), "src.c"],
        config=config,
        deps=deps,
        stream=_Stream(COMPILE_OUTPUT),
    )
    assert seen == [True]
