"""Tests for pintmerge.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from pintmerge.core.result import Err, Ok
from pintmerge.platform.process import ProcessError, run_output


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(command=("git", "status"), returncode=1, stdout="", stderr="fatal")
        assert str(error) == "git status failed (exit 1)"

    def test_str_hides_trailing_arguments(self) -> None:
        error = ProcessError(
            command=("git", "-C", "/repo", "push", "upstream", "secret"),
            returncode=128,
            stdout="",
            stderr="denied",
        )
        assert str(error) == "git -C /repo ... failed (exit 128)"
        assert "secret" not in str(error)

    def test_output_joins_streams(self) -> None:
        error = ProcessError(("git",), 1, stdout="out\n", stderr="err\n")
        assert error.output == "out\nerr"

    def test_output_skips_empty_stream(self) -> None:
        error = ProcessError(("git",), 1, stdout="", stderr="err")
        assert error.output == "err"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRunResults:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run_output([sys.executable, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "hello" in result.value.stdout

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run_output([sys.executable, "-c", "import sys; sys.exit(42)"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 42

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run_output(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert len(result.error.stderr) > 0

    def test_timeout(self, tmp_path: Path) -> None:
        result = run_output([sys.executable, "-c", "import time; time.sleep(5)"], cwd=tmp_path, timeout=0.2)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.stderr


class TestRunOutput:
    def test_captures_both_streams(self, tmp_path: Path) -> None:
        result = run_output(
            [sys.executable, "-c", "import sys; print('out'); sys.stderr.write('err')"],
            cwd=tmp_path,
        )

        assert isinstance(result, Ok)
        assert result.value.stdout.strip() == "out"
        assert result.value.stderr == "err"

    def test_env_is_layered_over_current(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PINTMERGE_TEST_BASE", "base")
        result = run_output(
            [
                sys.executable,
                "-c",
                "import os; print(os.environ['PINTMERGE_TEST_BASE'], os.environ['PINTMERGE_TEST_EXTRA'])",
            ],
            cwd=tmp_path,
            env={"PINTMERGE_TEST_EXTRA": "extra"},
        )

        assert isinstance(result, Ok)
        assert result.value.stdout.strip() == "base extra"
