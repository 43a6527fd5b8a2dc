"""Subprocess boundary for cmake phases, with a recording runner for dry runs."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence
import shlex
import subprocess
import threading


@dataclass
class CommandResult:
    """Represents the outcome of an executed command."""

    command: Sequence[str]
    returncode: int

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


def format_command(command: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(part)) for part in command)


class CommandRunner:
    """Abstract command runner interface."""

    def run(self, command: Sequence[str], *, note: str | None = None) -> CommandResult:
        raise NotImplementedError


class SubprocessCommandRunner(CommandRunner):
    """Runs commands via :mod:`subprocess`, blocking until they exit.

    The child shares the parent's stdout and stderr.
    """

    def run(self, command: Sequence[str], *, note: str | None = None) -> CommandResult:
        process = subprocess.run(list(command), check=False)
        return CommandResult(command=command, returncode=process.returncode)


@dataclass(slots=True)
class RecordedCommand:
    command: List[str]
    note: str | None
    returncode: int


class RecordingCommandRunner(CommandRunner):
    """Records commands instead of executing them.

    ``returncodes`` are handed out one per command, in order; once exhausted
    every further command reports success.
    """

    def __init__(self, returncodes: Iterable[int] | None = None) -> None:
        self.commands: List[RecordedCommand] = []
        self._returncodes: List[int] = list(returncodes or [])
        self._lock = threading.Lock()

    def run(self, command: Sequence[str], *, note: str | None = None) -> CommandResult:
        with self._lock:
            returncode = self._returncodes.pop(0) if self._returncodes else 0
            self.commands.append(RecordedCommand(command=list(command), note=note, returncode=returncode))
        return CommandResult(command=command, returncode=returncode)

    def iter_formatted(self) -> Iterable[str]:
        for record in self.commands:
            parts: List[str] = ["[dry-run]"]
            if record.note:
                parts.append(f"{record.note}:")
            parts.append(format_command(record.command))
            yield " ".join(parts)


__all__ = [
    "CommandResult",
    "CommandRunner",
    "RecordedCommand",
    "RecordingCommandRunner",
    "SubprocessCommandRunner",
    "format_command",
]
