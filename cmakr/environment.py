"""Lookup of external executables on the search path."""
from __future__ import annotations

import shutil


class ExecutableResolver:
    """Abstract capability answering "where does this program live?"."""

    def which(self, program: str) -> str | None:
        raise NotImplementedError


class PathExecutableResolver(ExecutableResolver):
    """Resolver backed by :func:`shutil.which` and the process ``PATH``."""

    def which(self, program: str) -> str | None:
        return shutil.which(program)


class StaticExecutableResolver(ExecutableResolver):
    """Resolver answering from a fixed mapping; unknown programs are missing."""

    def __init__(self, programs: dict[str, str] | None = None) -> None:
        self.programs = dict(programs or {})
        self.queries: list[str] = []

    def which(self, program: str) -> str | None:
        self.queries.append(program)
        return self.programs.get(program)


__all__ = ["ExecutableResolver", "PathExecutableResolver", "StaticExecutableResolver"]
