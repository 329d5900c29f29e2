"""Thin process-execution layer used by the classifier and the dispatcher."""

from __future__ import annotations

from contextlib import contextmanager
import subprocess
from typing import Callable, Iterator, Sequence

MISSING_EXECUTABLE_EXIT = 127

ProcessFactory = Callable[..., subprocess.Popen]
RunAndWait = Callable[[str, Sequence[str]], int]


def run_and_wait(program: str, args: Sequence[str]) -> int:
    """Run ``program args`` with inherited stdio and return its exit status."""
    try:
        completed = subprocess.run([program, *args], check=False)
    except FileNotFoundError:
        return MISSING_EXECUTABLE_EXIT
    return completed.returncode


@contextmanager
def stream_combined_output(
    argv: Sequence[str],
    *,
    process_factory: ProcessFactory = subprocess.Popen,
) -> Iterator[Iterator[str]]:
    """Spawn ``argv`` with stderr folded into stdout and yield its lines lazily.

    The pipe is drained as the caller iterates, so a chatty child never blocks
    on a full pipe. Leaving the block closes the pipe and reaps the child; if
    the caller stops early the child is killed first.
    """
    proc = process_factory(
        list(argv),
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        stdin=subprocess.DEVNULL,
        text=True,
        errors="replace",
    )
    assert proc.stdout is not None
    finished = False
    try:
        yield (line.rstrip("\r\n") for line in proc.stdout)
        finished = True
    finally:
        if not finished and proc.poll() is None:
            proc.kill()
        proc.stdout.close()
        proc.wait()
