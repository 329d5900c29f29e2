from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for entry in (ROOT / "src", ROOT):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))


import pytest

from ccwrap.capture import RecordingCaptureSink
from ccwrap.dispatch import DispatchDeps
from ccwrap.log import Verbosity, WrapperLog
from tests.fakes import FakeRunner


@pytest.fixture
def stderr_messages() -> list[str]:
    return []


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def sink() -> RecordingCaptureSink:
    return RecordingCaptureSink()


@pytest.fixture
def deps(
    sink: RecordingCaptureSink,
    runner: FakeRunner,
    stderr_messages: list[str],
) -> DispatchDeps:
    return DispatchDeps(
        capture=sink,
        run=runner,
        log=WrapperLog(verbosity=Verbosity.VERBOSE, print_err=stderr_messages.append),
    )
