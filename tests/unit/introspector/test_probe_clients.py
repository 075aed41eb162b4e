"""Tests for the ffprobe and mkvmerge clients."""

import subprocess
from pathlib import Path

import pytest

from kitsub.core.subprocess_utils import CommandResult
from kitsub.introspector import (
    ExternalToolError,
    FFprobeClient,
    MediaInfoParseError,
    MediaIntrospectionError,
    MkvmergeClient,
)


class FakeRunner:
    """Records commands and returns a canned result."""

    def __init__(self, stdout="", stderr="", returncode=0, error=None):
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
        self.error = error
        self.calls = []

    def __call__(self, args, timeout):
        self.calls.append((list(args), timeout))
        if self.error is not None:
            raise self.error
        return CommandResult(
            args=tuple(str(a) for a in args),
            stdout=self.stdout,
            stderr=self.stderr,
            returncode=self.returncode,
        )


@pytest.fixture
def media_file(tmp_path) -> Path:
    path = tmp_path / "episode.mkv"
    path.write_bytes(b"\x1a\x45\xdf\xa3")
    return path


@pytest.fixture
def probe_fixture(fixtures_dir):
    def _read(name: str) -> str:
        return (fixtures_dir / "probe" / name).read_text()

    return _read


class TestFFprobeClient:
    def test_builds_command(self, media_file, probe_fixture):
        runner = FakeRunner(stdout=probe_fixture("ffprobe_three_tracks.json"))
        client = FFprobeClient("/opt/tools/ffprobe", timeout=30, runner=runner)

        info = client.probe(media_file)

        assert runner.calls == [
            (
                [
                    "/opt/tools/ffprobe",
                    "-v",
                    "error",
                    "-print_format",
                    "json",
                    "-show_streams",
                    "-show_format",
                    str(media_file),
                ],
                30,
            )
        ]
        assert info.file_path == str(media_file)
        assert len(info.tracks) == 3

    def test_nonzero_exit_raises_tool_error(self, media_file):
        runner = FakeRunner(stderr="Invalid data found\n", returncode=1)
        client = FFprobeClient("ffprobe", runner=runner)

        with pytest.raises(ExternalToolError) as exc_info:
            client.probe(media_file)

        error = exc_info.value
        assert error.tool == "ffprobe"
        assert error.returncode == 1
        assert "Invalid data found" in str(error)
        assert str(media_file) in error.command

    def test_empty_stderr_message(self, media_file):
        client = FFprobeClient("ffprobe", runner=FakeRunner(returncode=183))

        with pytest.raises(ExternalToolError, match="no error output"):
            client.probe(media_file)

    def test_unparseable_output(self, media_file):
        client = FFprobeClient("ffprobe", runner=FakeRunner(stdout="garbage"))

        with pytest.raises(MediaInfoParseError):
            client.probe(media_file)

    def test_missing_executable(self, media_file):
        runner = FakeRunner(error=FileNotFoundError("ffprobe"))
        client = FFprobeClient("/missing/ffprobe", runner=runner)

        with pytest.raises(MediaIntrospectionError, match="not found"):
            client.probe(media_file)

    def test_timeout(self, media_file):
        runner = FakeRunner(error=subprocess.TimeoutExpired(["ffprobe"], 60))
        client = FFprobeClient("ffprobe", runner=runner)

        with pytest.raises(MediaIntrospectionError, match="timed out"):
            client.probe(media_file)

    def test_missing_file_does_not_run_tool(self, tmp_path):
        runner = FakeRunner()
        client = FFprobeClient("ffprobe", runner=runner)

        with pytest.raises(MediaIntrospectionError, match="File not found"):
            client.probe(tmp_path / "absent.mkv")
        assert runner.calls == []


class TestMkvmergeClient:
    def test_identify(self, media_file, probe_fixture):
        runner = FakeRunner(stdout=probe_fixture("mkvmerge_three_tracks.json"))
        client = MkvmergeClient(Path("/opt/tools/mkvmerge"), runner=runner)

        info = client.identify(media_file)

        assert runner.calls[0][0] == ["/opt/tools/mkvmerge", "-J", str(media_file)]
        assert info.container == "Matroska"
        assert len(info.attachments) == 1

    def test_nonzero_exit(self, media_file):
        runner = FakeRunner(stdout='{"errors": ["unsupported"]}', returncode=2)
        client = MkvmergeClient("mkvmerge", runner=runner)

        with pytest.raises(ExternalToolError) as exc_info:
            client.identify(media_file)
        assert exc_info.value.tool == "mkvmerge"
        assert exc_info.value.returncode == 2
