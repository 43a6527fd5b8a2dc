"""Fluent builder and executor for the cmake configure + build workflow.

A :class:`Cmd` accumulates invocation parameters and is consumed by either
:meth:`Cmd.build` (blocking) or :meth:`Cmd.spawn` (background thread). Both
freeze the builder into an :class:`Invocation` and hand it to :func:`execute`,
which runs the two phases::

    cmake -S <source> -B <binary> [--preset=<name>] [-D...] [output dirs] [args]
    cmake --build <binary> [args]
"""
from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any, List, Sequence
import logging

from .command_runner import CommandResult, CommandRunner, SubprocessCommandRunner, format_command
from .environment import ExecutableResolver, PathExecutableResolver
from .errors import (
    BuildFailedError,
    BuilderConsumedError,
    ConfigureFailedError,
    PresetNotFoundError,
    ToolNotFoundError,
)
from .paths import canonical_directory, ensure_directory
from .presets import CMakePresets

logger = logging.getLogger(__name__)

CMAKE_PROGRAM = "cmake"
DEFAULT_SOURCE_DIR = "."
DEFAULT_BINARY_DIR = "build"
DEFAULT_OUTPUT_DIR = "build"

OUTPUT_DIRECTORY_VARIABLES = (
    "CMAKE_RUNTIME_OUTPUT_DIRECTORY",
    "CMAKE_LIBRARY_OUTPUT_DIRECTORY",
    "CMAKE_ARCHIVE_OUTPUT_DIRECTORY",
)

StrPath = str | PathLike[str]


def format_cmake_value(value: Any) -> str:
    if isinstance(value, bool):
        return "ON" if value else "OFF"
    return str(value)


@dataclass(frozen=True, slots=True)
class Definition:
    """A cache variable override passed to the configure phase."""

    name: str
    value: Any

    def flag(self) -> str:
        return f"-D{self.name}={format_cmake_value(self.value)}"


@dataclass(frozen=True, slots=True)
class Invocation:
    """Immutable snapshot of a :class:`Cmd`, the only input :func:`execute` reads."""

    source_path: Path | None
    binary_path: Path
    output_path: Path
    preset: str | None = None
    definitions: tuple[Definition, ...] = ()
    args: tuple[str, ...] = ()


@dataclass(slots=True)
class BuildResult:
    """Outcome of a successful configure + build run."""

    source_path: Path
    binary_path: Path
    output_dir: str
    preset: str | None
    configure: CommandResult
    build: CommandResult
    commands: List[List[str]] = field(default_factory=list)


class Cmd:
    """Builder for one cmake configure + build run.

    Defaults: the source directory is the current directory, and both the
    binary and output directories are ``build``. Setters return the builder so
    calls can be chained; nothing is validated until execution::

        result = (
            Cmd()
            .set_path("./my_project")
            .set_preset("release")
            .set_output_path("./bin")
            .add_define("CMAKE_EXPORT_COMPILE_COMMANDS", "ON")
            .build()
        )

    A builder can be executed once. Afterwards every method raises
    :class:`~cmakr.errors.BuilderConsumedError`.
    """

    def __init__(self) -> None:
        self._args: List[str] = []
        self._path: StrPath | None = None
        self._binary_path: StrPath = DEFAULT_BINARY_DIR
        self._output_path: StrPath = DEFAULT_OUTPUT_DIR
        self._preset: str | None = None
        self._defines: List[Definition] = []
        self._consumed = False

    def _check_open(self) -> None:
        if self._consumed:
            raise BuilderConsumedError()

    def add_arg(self, arg: str) -> "Cmd":
        """Append an argument passed to both the configure and the build command."""

        self._check_open()
        self._args.append(str(arg))
        return self

    def set_path(self, path: StrPath) -> "Cmd":
        """Set the source directory, which holds ``CMakeLists.txt`` and the presets file."""

        self._check_open()
        self._path = path
        return self

    def set_binary_path(self, path: StrPath) -> "Cmd":
        self._check_open()
        self._binary_path = path
        return self

    def set_output_path(self, path: StrPath) -> "Cmd":
        """Set where executables, shared and static libraries are written."""

        self._check_open()
        self._output_path = path
        return self

    def set_preset(self, preset: str) -> "Cmd":
        self._check_open()
        self._preset = str(preset)
        return self

    def add_define(self, name: str, value: Any) -> "Cmd":
        self._check_open()
        self._defines.append(Definition(name=str(name), value=value))
        return self

    def freeze(self) -> Invocation:
        """Consume the builder and return its immutable snapshot."""

        self._check_open()
        self._consumed = True
        return Invocation(
            source_path=Path(self._path) if self._path is not None else None,
            binary_path=Path(self._binary_path),
            output_path=Path(self._output_path),
            preset=self._preset,
            definitions=tuple(self._defines),
            args=tuple(self._args),
        )

    def build(
        self,
        *,
        runner: CommandRunner | None = None,
        resolver: ExecutableResolver | None = None,
    ) -> BuildResult:
        """Run configure and build on the calling thread."""

        return execute(self.freeze(), runner=runner, resolver=resolver)

    def spawn(
        self,
        *,
        runner: CommandRunner | None = None,
        resolver: ExecutableResolver | None = None,
    ) -> "Future[BuildResult]":
        """Run configure and build on a background thread.

        The returned future resolves to the same :class:`BuildResult`, or
        raises the same exception, that :meth:`build` would have.
        """

        invocation = self.freeze()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="cmakr")
        try:
            return executor.submit(execute, invocation, runner=runner, resolver=resolver)
        finally:
            executor.shutdown(wait=False)


def resolve_preset(source_path: Path, preset_name: str | None) -> str | None:
    """Return the catalog name of the visible preset ``preset_name``, loading a fresh catalog."""

    if preset_name is None:
        return None
    presets = CMakePresets.load(source_path)
    preset = presets.get_preset(preset_name)
    if preset is None:
        raise PresetNotFoundError(preset_name, presets.available())
    logger.debug("Using preset '%s' from %s", preset.name, presets.path)
    return preset.name


def output_directory_args(output_dir: str) -> List[str]:
    return [f"-D{variable}={output_dir}" for variable in OUTPUT_DIRECTORY_VARIABLES]


def configure_command(
    invocation: Invocation,
    *,
    source_path: Path,
    preset_args: Sequence[str],
    output_dir: str,
) -> List[str]:
    return [
        CMAKE_PROGRAM,
        "-S",
        str(source_path),
        "-B",
        str(invocation.binary_path),
        *preset_args,
        *(definition.flag() for definition in invocation.definitions),
        *output_directory_args(output_dir),
        *invocation.args,
    ]


def build_command(invocation: Invocation) -> List[str]:
    return [CMAKE_PROGRAM, "--build", str(invocation.binary_path), *invocation.args]


def _run_phase(
    runner: CommandRunner,
    command: List[str],
    *,
    note: str,
    failure: type[ConfigureFailedError] | type[BuildFailedError],
) -> CommandResult:
    logger.debug("%s: %s", note, format_command(command))
    try:
        result = runner.run(command, note=note)
    except OSError as exc:
        raise failure(None) from exc
    if not result.succeeded:
        raise failure(result.returncode, result)
    return result


def execute(
    invocation: Invocation,
    *,
    runner: CommandRunner | None = None,
    resolver: ExecutableResolver | None = None,
) -> BuildResult:
    """Run the configure phase and, if it succeeds, the build phase.

    Preset lookup happens before any directory is touched, and both
    directories exist before the output directory is canonicalized.
    """

    runner = runner or SubprocessCommandRunner()
    resolver = resolver or PathExecutableResolver()

    if resolver.which(CMAKE_PROGRAM) is None:
        raise ToolNotFoundError(CMAKE_PROGRAM)

    source_path = invocation.source_path or Path(DEFAULT_SOURCE_DIR)
    preset = resolve_preset(source_path, invocation.preset)
    preset_args = [f"--preset={preset}"] if preset is not None else []

    ensure_directory(invocation.binary_path)
    ensure_directory(invocation.output_path)
    output_dir = canonical_directory(invocation.output_path)

    configure = configure_command(
        invocation,
        source_path=source_path,
        preset_args=preset_args,
        output_dir=output_dir,
    )
    configure_result = _run_phase(runner, configure, note="Configure project", failure=ConfigureFailedError)

    build = build_command(invocation)
    build_result = _run_phase(runner, build, note="Build project", failure=BuildFailedError)

    return BuildResult(
        source_path=source_path,
        binary_path=invocation.binary_path,
        output_dir=output_dir,
        preset=preset,
        configure=configure_result,
        build=build_result,
        commands=[configure, build],
    )


__all__ = [
    "BuildResult",
    "CMAKE_PROGRAM",
    "Cmd",
    "DEFAULT_BINARY_DIR",
    "DEFAULT_OUTPUT_DIR",
    "DEFAULT_SOURCE_DIR",
    "Definition",
    "Invocation",
    "OUTPUT_DIRECTORY_VARIABLES",
    "build_command",
    "configure_command",
    "execute",
    "format_cmake_value",
    "resolve_preset",
]
