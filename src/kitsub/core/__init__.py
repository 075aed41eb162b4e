"""Shared helpers used across kitsub packages."""

from kitsub.core.subprocess_utils import CommandResult, run_command

__all__ = ["CommandResult", "run_command"]
