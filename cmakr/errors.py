"""Exception hierarchy raised by preset lookup and cmake invocations."""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from .command_runner import CommandResult


class CMakrError(RuntimeError):
    """Base class for every failure surfaced by :mod:`cmakr`."""


class BuilderConsumedError(CMakrError):
    """Raised when a :class:`~cmakr.cmd.Cmd` is touched after it was executed."""

    def __init__(self) -> None:
        super().__init__("Cmd has already been executed; create a new Cmd to run again")


class ToolNotFoundError(CMakrError):
    """The cmake executable cannot be resolved on PATH."""

    def __init__(self, program: str) -> None:
        super().__init__(f"{program} not found in PATH")
        self.program = program


class ConfigError(CMakrError):
    """The presets file is missing, unreadable or malformed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to load presets from '{path}': {reason}")
        self.path = path
        self.reason = reason


class PresetNotFoundError(CMakrError):
    """The requested preset is absent or hidden."""

    def __init__(self, name: str, available: Sequence[str] = ()) -> None:
        message = f"preset {name} not found"
        if available:
            message = f"{message}. Available: {', '.join(available)}"
        super().__init__(message)
        self.name = name
        self.available = tuple(available)


class FilesystemError(CMakrError):
    """Creating or canonicalizing a build directory failed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{reason}: '{path}'")
        self.path = path
        self.reason = reason


class PhaseFailedError(CMakrError):
    """A cmake phase exited with a non-zero status or could not be started."""

    phase = "phase"

    def __init__(self, returncode: int | None, result: "CommandResult | None" = None) -> None:
        if returncode is None:
            message = f"cmake {self.phase} could not be started"
        else:
            message = f"cmake {self.phase} failed with status: {returncode}"
        super().__init__(message)
        self.returncode = returncode
        self.result = result


class ConfigureFailedError(PhaseFailedError):
    phase = "configure"


class BuildFailedError(PhaseFailedError):
    phase = "build"


__all__ = [
    "BuildFailedError",
    "BuilderConsumedError",
    "CMakrError",
    "ConfigError",
    "ConfigureFailedError",
    "FilesystemError",
    "PhaseFailedError",
    "PresetNotFoundError",
    "ToolNotFoundError",
]
