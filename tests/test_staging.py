from __future__ import annotations

from dataclasses import replace
from pathlib import Path
import re

from ccwrap.config import BuildMode, default_config
from ccwrap.staging import check_for_existing_file, compile_only_target, expand_arg_files


def _config(pattern: str | None = r".*\.o$", mode: BuildMode = BuildMode.COMPILATION_DATABASE):
    return replace(
        default_config(),
        build_mode=mode,
        ignore_regex=re.compile(pattern) if pattern is not None else None,
    )


def test_missing_generated_file_is_staged(tmp_path: Path) -> None:
    target = tmp_path / "gen" / "out.o"
    created = check_for_existing_file(["-c", str(target)], _config())
    assert created == [target]
    assert target.is_file()
    assert target.read_bytes() == b""


def test_existing_file_is_left_alone(tmp_path: Path) -> None:
    target = tmp_path / "out.o"
    target.write_text("payload", encoding="utf-8")
    assert check_for_existing_file(["-c", str(target)], _config()) == []
    assert target.read_text(encoding="utf-8") == "payload"


def test_staging_requires_compilation_database_mode(tmp_path: Path) -> None:
    target = tmp_path / "gen" / "out.o"
    assert check_for_existing_file(["-c", str(target)], _config(mode=BuildMode.NONE)) == []
    assert not target.exists()


def test_staging_requires_ignore_pattern(tmp_path: Path) -> None:
    target = tmp_path / "gen" / "out.o"
    assert check_for_existing_file(["-c", str(target)], _config(pattern=None)) == []
    assert not target.exists()


def test_staging_requires_pattern_match(tmp_path: Path) -> None:
    target = tmp_path / "gen" / "out.c"
    assert check_for_existing_file(["-c", str(target)], _config()) == []
    assert not target.parent.exists()


def test_trailing_compile_flag_is_a_no_op() -> None:
    assert check_for_existing_file(["-O2", "-c"], _config()) == []


def test_arg_files_are_spliced_in_place(tmp_path: Path) -> None:
    nested = tmp_path / "nested.rsp"
    nested.write_text("-DNESTED\n", encoding="utf-8")
    rsp = tmp_path / "args.rsp"
    rsp.write_text(f"  -c  \ngen/a.o\n@{nested}\n", encoding="utf-8")
    expanded = expand_arg_files(["-O2", f"@{rsp}", "-g"])
    assert expanded == ["-O2", "-c", "gen/a.o", f"@{nested}", "-g"]
    assert compile_only_target(expanded) == "gen/a.o"


def test_unreadable_arg_file_keeps_its_token(tmp_path: Path) -> None:
    missing = tmp_path / "missing.rsp"
    assert expand_arg_files([f"@{missing}"]) == [f"@{missing}"]


def test_target_named_in_arg_file_is_staged(tmp_path: Path) -> None:
    target = tmp_path / "buck-out" / "gen" / "x.o"
    rsp = tmp_path / "args.rsp"
    rsp.write_text(f"-c\n{target}\n", encoding="utf-8")
    assert check_for_existing_file([f"@{rsp}"], _config()) == [target]
    assert target.is_file()


def test_arg_file_that_cannot_be_read_keeps_its_token(tmp_path: Path) -> None:
    # A directory fails to read with an OSError, like an unreadable file does.
    unreadable = tmp_path / "args.rsp"
    unreadable.mkdir()
    assert expand_arg_files(["-O2", f"@{unreadable}"]) == ["-O2", f"@{unreadable}"]
    config = _config()
    assert check_for_existing_file([f"@{unreadable}"], config) == []
