"""Command line interface for cmakr."""
from __future__ import annotations

from argparse import ArgumentParser, ArgumentTypeError, Namespace
from typing import Iterable, Tuple
import logging
import sys

from .cmd import DEFAULT_BINARY_DIR, DEFAULT_OUTPUT_DIR, BuildResult, Cmd
from .command_runner import CommandRunner, RecordingCommandRunner, SubprocessCommandRunner
from .errors import CMakrError, PhaseFailedError
from .presets import CMakePresets


def _parse_definition(raw: str) -> Tuple[str, str]:
    name, separator, value = raw.partition("=")
    name = name.strip()
    if not separator or not name:
        raise ArgumentTypeError(f"invalid definition '{raw}'; expected NAME=VALUE")
    return name, value


def _exit_status(error: PhaseFailedError) -> int:
    """Map a phase failure to a process exit status; signals follow the shell's 128+N rule."""

    if error.returncode is None or error.returncode == 0:
        return 1
    if error.returncode < 0:
        return 128 + abs(error.returncode)
    return error.returncode


def _parse_arguments(argv: Iterable[str]) -> Namespace:
    parser = ArgumentParser(prog="cmakr", description="Configure and build CMake projects")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser("build", help="Configure and build a project")
    build_parser.add_argument("-S", "--source", dest="source", help="Source directory (default: current directory)")
    build_parser.add_argument("-B", "--binary-dir", dest="binary_dir", default=DEFAULT_BINARY_DIR, help="Build directory")
    build_parser.add_argument("-O", "--output-dir", dest="output_dir", default=DEFAULT_OUTPUT_DIR, help="Artifact output directory")
    build_parser.add_argument("--preset", help="Configure preset from CMakePresets.json")
    build_parser.add_argument(
        "-D",
        dest="definitions",
        action="append",
        default=[],
        type=_parse_definition,
        metavar="NAME=VALUE",
        help="Cache variable definition (repeatable)",
    )
    build_parser.add_argument(
        "-X",
        dest="extra_args",
        action="append",
        default=[],
        metavar="ARG",
        help="Extra argument passed to both configure and build (repeatable)",
    )
    build_parser.add_argument("--dry-run", action="store_true", help="Print commands without executing them")
    build_parser.add_argument("--background", action="store_true", help="Run the build on a background thread")

    presets_parser = subparsers.add_parser("presets", help="List visible configure presets")
    presets_parser.add_argument("path", nargs="?", default=".", help="Source directory or presets file")

    return parser.parse_args(list(argv))


def main(argv: Iterable[str] | None = None) -> int:
    args = _parse_arguments(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s - %(name)s - %(message)s",
    )

    handler = _handle_build if args.command == "build" else _handle_presets
    try:
        return handler(args)
    except PhaseFailedError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return _exit_status(exc)
    except CMakrError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


def build_cmd(args: Namespace) -> Cmd:
    cmd = Cmd().set_binary_path(args.binary_dir).set_output_path(args.output_dir)
    if args.source:
        cmd.set_path(args.source)
    if args.preset:
        cmd.set_preset(args.preset)
    for name, value in args.definitions:
        cmd.add_define(name, value)
    for extra in args.extra_args:
        cmd.add_arg(extra)
    return cmd


def _handle_build(args: Namespace) -> int:
    cmd = build_cmd(args)
    runner: CommandRunner
    if args.dry_run:
        runner = RecordingCommandRunner()
    else:
        runner = SubprocessCommandRunner()

    result: BuildResult
    if args.background:
        future = cmd.spawn(runner=runner)
        result = future.result()
    else:
        result = cmd.build(runner=runner)

    if isinstance(runner, RecordingCommandRunner):
        for line in runner.iter_formatted():
            print(line)
    print(f"Build succeeded; artifacts in {result.output_dir}")
    return 0


def _handle_presets(args: Namespace) -> int:
    presets = CMakePresets.load(args.path)
    for name in presets.available():
        print(name)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
