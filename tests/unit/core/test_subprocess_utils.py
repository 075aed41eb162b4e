"""Tests for core subprocess utilities."""

import subprocess
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from kitsub.core.subprocess_utils import CommandResult, run_command


class TestRunCommand:
    """Tests for run_command function."""

    def test_successful_command(self):
        """run_command captures stdout and the exit status."""
        result = run_command([sys.executable, "-c", "print('hello')"])

        assert result.stdout.strip() == "hello"
        assert result.returncode == 0
        assert result.ok

    def test_failure_is_returned_not_raised(self):
        result = run_command(
            [sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"]
        )

        assert result.returncode == 3
        assert not result.ok
        assert result.stderr == "bad"

    def test_path_args_converted(self):
        """Path arguments are passed to subprocess.run as strings."""
        completed = MagicMock(stdout="", stderr="", returncode=0)
        with patch("subprocess.run", return_value=completed) as mock_run:
            result = run_command([Path("/opt/tools/ffprobe"), "-version"])

        args = mock_run.call_args.args[0]
        assert args == ("/opt/tools/ffprobe", "-version")
        assert result.args == ("/opt/tools/ffprobe", "-version")

    def test_decodes_utf8_with_replacement(self):
        completed = MagicMock(stdout=None, stderr=None, returncode=0)
        with patch("subprocess.run", return_value=completed) as mock_run:
            result = run_command(["mkvmerge", "-J", "x.mkv"], timeout=5)

        kwargs = mock_run.call_args.kwargs
        assert kwargs["encoding"] == "utf-8"
        assert kwargs["errors"] == "replace"
        assert kwargs["timeout"] == 5
        assert result.stdout == ""
        assert result.stderr == ""

    def test_timeout_is_logged_and_raised(self, caplog):
        error = subprocess.TimeoutExpired(["ffprobe"], 1)
        with patch("subprocess.run", side_effect=error):
            with pytest.raises(subprocess.TimeoutExpired):
                run_command(["/usr/bin/ffprobe", "x.mkv"], timeout=1)

        assert "timed out" in caplog.text
        assert "ffprobe" in caplog.text

    def test_missing_executable_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            run_command([str(tmp_path / "no-such-tool")])


class TestCommandResult:
    def test_command_line(self):
        result = CommandResult(("mkvmerge", "-J", "a b.mkv"), "", "", 0)
        assert result.command_line == "mkvmerge -J a b.mkv"
