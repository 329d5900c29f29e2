"""Capture sinks: where canonical sub-commands are handed off for analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Protocol

from ccwrap.command import CompilerCommand


class CaptureSink(Protocol):
    def __call__(self, command: CompilerCommand) -> None: ...


def command_payload(command: CompilerCommand) -> dict[str, object]:
    return {
        "program": command.program,
        "arguments": list(command.args),
        "command": command.command_to_run(),
    }


@dataclass(frozen=True)
class JournalCaptureSink:
    """Append each canonical command to a JSON-lines journal."""

    path: Path

    def __call__(self, command: CompilerCommand) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(command_payload(command), sort_keys=True) + "\n")


@dataclass
class RecordingCaptureSink:
    commands: list[CompilerCommand] = field(default_factory=list)

    def __call__(self, command: CompilerCommand) -> None:
        self.commands.append(command)
