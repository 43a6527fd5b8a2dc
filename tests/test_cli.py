from __future__ import annotations

from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
import io
import os
import tempfile
import unittest
from unittest.mock import patch

from cmakr import cli


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.workspace = Path(self.temp_dir.name).resolve()
        self._previous_cwd = os.getcwd()
        os.chdir(self.workspace)
        (self.workspace / "CMakePresets.json").write_text(
            '{"configurePresets": [{"name": "base", "hidden": true}, {"name": "default"}, {"name": "release"}]}',
            encoding="utf-8",
        )
        which_patcher = patch("cmakr.environment.shutil.which", side_effect=lambda exe: f"/usr/bin/{exe}")
        which_patcher.start()
        self.addCleanup(which_patcher.stop)

    def tearDown(self) -> None:
        os.chdir(self._previous_cwd)
        self.temp_dir.cleanup()

    def _run(self, *argv: str) -> tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = cli.main(list(argv))
        return code, stdout.getvalue(), stderr.getvalue()

    def test_build_dry_run_outputs_formatted_commands(self) -> None:
        code, output, _ = self._run(
            "build", "--dry-run", "--preset", "default", "-D", "CMAKE_BUILD_TYPE=Release", "-X-Wno-dev", "-O", "bin"
        )
        self.assertEqual(code, 0)
        lines = output.splitlines()
        self.assertTrue(lines[0].startswith("[dry-run] Configure project: cmake -S . -B build --preset=default"))
        self.assertIn("-DCMAKE_BUILD_TYPE=Release", lines[0])
        self.assertIn(f"-DCMAKE_RUNTIME_OUTPUT_DIRECTORY={self.workspace / 'bin'}", lines[0])
        self.assertEqual(lines[1], "[dry-run] Build project: cmake --build build -Wno-dev")
        self.assertIn("Build succeeded", lines[2])

    def test_background_dry_run(self) -> None:
        code, output, _ = self._run("build", "--dry-run", "--background")
        self.assertEqual(code, 0)
        self.assertIn("[dry-run] Build project: cmake --build build", output)

    def test_missing_preset_reports_error(self) -> None:
        code, output, errors = self._run("build", "--dry-run", "--preset", "base")
        self.assertEqual(code, 1)
        self.assertEqual(output, "")
        self.assertIn("error: preset base not found", errors)
        self.assertFalse((self.workspace / "build").exists())

    def test_missing_tool_reports_error(self) -> None:
        with patch("cmakr.environment.shutil.which", return_value=None):
            code, _, errors = self._run("build", "--dry-run")
        self.assertEqual(code, 1)
        self.assertIn("cmake not found", errors)

    def test_invalid_definition(self) -> None:
        stderr = io.StringIO()
        with redirect_stderr(stderr), self.assertRaises(SystemExit) as exc_info:
            cli.main(["build", "--dry-run", "-D", "NOVALUE"])
        self.assertEqual(exc_info.exception.code, 2)
        self.assertIn("expected NAME=VALUE", stderr.getvalue())
        self.assertFalse((self.workspace / "build").exists())

    def _run_with_returncodes(self, *returncodes: int) -> tuple[int, str, str]:
        class ScriptedRunner(cli.RecordingCommandRunner):
            def __init__(self) -> None:
                super().__init__(returncodes=returncodes)

        with patch("cmakr.cli.SubprocessCommandRunner", ScriptedRunner):
            return self._run("build")

    def test_phase_failure_exit_code(self) -> None:
        code, _, errors = self._run_with_returncodes(0, 7)
        self.assertEqual(code, 7)
        self.assertIn("cmake build failed with status: 7", errors)

    def test_signal_killed_phase_maps_to_shell_status(self) -> None:
        code, _, errors = self._run_with_returncodes(-9)
        self.assertEqual(code, 137)
        self.assertIn("cmake configure failed with status: -9", errors)

    def test_phase_that_cannot_start_exits_one(self) -> None:
        class BrokenRunner(cli.RecordingCommandRunner):
            def run(self, command, **kwargs):  # type: ignore[override]
                raise FileNotFoundError(2, "No such file or directory", command[0])

        with patch("cmakr.cli.SubprocessCommandRunner", BrokenRunner):
            code, _, errors = self._run("build")
        self.assertEqual(code, 1)
        self.assertIn("could not be started", errors)

    def test_presets_lists_visible_names(self) -> None:
        code, output, _ = self._run("presets")
        self.assertEqual(code, 0)
        self.assertEqual(output.splitlines(), ["default", "release"])

    def test_presets_reports_missing_file(self) -> None:
        code, _, errors = self._run("presets", str(self.workspace / "nowhere"))
        self.assertEqual(code, 1)
        self.assertIn("Failed to load presets", errors)

    def test_presets_reports_undecodable_file(self) -> None:
        (self.workspace / "CMakePresets.json").write_bytes(b'{"configurePresets": [{"name": "\xff"}]}')
        code, output, errors = self._run("presets")
        self.assertEqual(code, 1)
        self.assertEqual(output, "")
        self.assertIn("not valid UTF-8", errors)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
