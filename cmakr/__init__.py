"""Programmatic front-end for cmake's configure + build workflow."""

from .cmd import BuildResult, Cmd, Definition, Invocation, execute
from .errors import (
    BuildFailedError,
    BuilderConsumedError,
    CMakrError,
    ConfigError,
    ConfigureFailedError,
    FilesystemError,
    PhaseFailedError,
    PresetNotFoundError,
    ToolNotFoundError,
)
from .presets import CMakePreset, CMakePresets

__all__ = [
    "BuildFailedError",
    "BuildResult",
    "BuilderConsumedError",
    "CMakePreset",
    "CMakePresets",
    "CMakrError",
    "Cmd",
    "ConfigError",
    "ConfigureFailedError",
    "Definition",
    "FilesystemError",
    "Invocation",
    "PhaseFailedError",
    "PresetNotFoundError",
    "ToolNotFoundError",
    "execute",
]
