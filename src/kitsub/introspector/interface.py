"""Media introspection errors and the probe client base class."""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - only for TimeoutExpired
from collections.abc import Callable
from pathlib import Path

from kitsub.core.subprocess_utils import CommandResult, run_command
from kitsub.introspector.models import MediaInfo

logger = logging.getLogger(__name__)

# Prevent hangs on corrupted files
DEFAULT_PROBE_TIMEOUT = 60


class MediaIntrospectionError(Exception):
    """Raised when media introspection fails."""


class ExternalToolError(MediaIntrospectionError):
    """An external tool exited with a non-zero status.

    Attributes:
        tool: Tool name (e.g., "ffprobe").
        returncode: Exit status.
        stderr: Captured standard error text.
        command: Command line that was run.
    """

    def __init__(
        self, tool: str, returncode: int, stderr: str, command: str = ""
    ) -> None:
        self.tool = tool
        self.returncode = returncode
        self.stderr = stderr
        self.command = command
        detail = stderr.strip() or "no error output"
        super().__init__(f"{tool} failed with exit code {returncode}: {detail}")


class MediaInfoParseError(MediaIntrospectionError):
    """A tool succeeded but its output did not match the expected schema."""

    def __init__(self, tool: str, message: str) -> None:
        self.tool = tool
        super().__init__(f"Could not parse {tool} output: {message}")


class ProbeClient:
    """Base for wrappers that run a probe tool and normalize its JSON.

    Subclasses set ``tool_name`` and implement ``build_command`` and
    ``parse``.
    """

    tool_name = ""

    def __init__(
        self,
        executable: str | Path,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
        runner: Callable[..., CommandResult] = run_command,
    ) -> None:
        """Initialize the client.

        Args:
            executable: Resolved tool path (or bare name for PATH lookup).
            timeout: Seconds before the tool is killed.
            runner: Command runner, replaceable in tests.
        """
        self.executable = str(executable)
        self._timeout = timeout
        self._runner = runner

    def build_command(self, path: Path) -> list[str]:
        raise NotImplementedError

    def parse(self, path: Path, output: str) -> MediaInfo:
        raise NotImplementedError

    def get_media_info(self, path: Path) -> MediaInfo:
        """Run the tool against a file and normalize the result.

        Raises:
            MediaIntrospectionError: If the file or the tool is missing, or
                the tool times out.
            ExternalToolError: If the tool exits non-zero.
            MediaInfoParseError: If the tool's output cannot be parsed.
        """
        if not path.exists():
            raise MediaIntrospectionError(f"File not found: {path}")

        command = self.build_command(path)
        try:
            result = self._runner(command, timeout=self._timeout)
        except FileNotFoundError as e:
            raise MediaIntrospectionError(
                f"{self.tool_name} not found: {self.executable}"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise MediaIntrospectionError(
                f"{self.tool_name} timed out for {path} after {e.timeout}s"
            ) from e

        if result.returncode != 0:
            raise ExternalToolError(
                self.tool_name, result.returncode, result.stderr, result.command_line
            )

        info = self.parse(path, result.stdout)
        logger.debug(
            "Parsed %s output for %s",
            self.tool_name,
            path,
            extra={"tracks": len(info.tracks), "attachments": len(info.attachments)},
        )
        return info
