"""Subprocess wrapper for external tool invocation.

Every probe and muxer call goes through run_command so encoding, timeout
and logging behave the same for ffprobe, mkvmerge and friends.
"""

from __future__ import annotations

import logging
import os
import subprocess  # nosec B404 - external media tools are invoked by design
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120


@dataclass(frozen=True)
class CommandResult:
    """Captured output of a finished command."""

    args: tuple[str, ...]
    stdout: str
    stderr: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command_line(self) -> str:
        return " ".join(self.args)


def run_command(
    args: list[str | Path],
    timeout: float = DEFAULT_TIMEOUT,
    **kwargs: Any,
) -> CommandResult:
    """Run an external command, capturing text output.

    Output is decoded as UTF-8 with undecodable bytes replaced.

    Args:
        args: Command and arguments. Path objects are converted to strings.
        timeout: Timeout in seconds.
        **kwargs: Additional subprocess.run arguments.

    Returns:
        The captured result. A non-zero exit is not an error here; callers
        decide what it means.

    Raises:
        FileNotFoundError: If the executable does not exist.
        subprocess.TimeoutExpired: If the command times out (the child is
            killed before this is raised).
    """
    str_args = tuple(str(arg) for arg in args)
    command_name = os.path.basename(str_args[0]) if str_args else "unknown"

    logger.debug(
        "Executing command: %s",
        " ".join(str_args),
        extra={"command": command_name, "arg_count": len(str_args)},
    )
    start_time = time.monotonic()

    try:
        completed = subprocess.run(  # nosec B603 - args are built by callers
            str_args,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            **kwargs,
        )
    except subprocess.TimeoutExpired:
        logger.warning(
            "Command timed out after %ss: %s",
            timeout,
            command_name,
            extra={
                "command": command_name,
                "elapsed_seconds": round(time.monotonic() - start_time, 3),
            },
        )
        raise

    logger.debug(
        "Command completed",
        extra={
            "command": command_name,
            "elapsed_seconds": round(time.monotonic() - start_time, 3),
            "returncode": completed.returncode,
        },
    )
    return CommandResult(
        args=str_args,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
        returncode=completed.returncode,
    )
