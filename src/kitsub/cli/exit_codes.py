"""Process exit codes for the kitsub CLI."""

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    GENERAL_ERROR = 1
    TARGET_NOT_FOUND = 2
    TOOL_FAILED = 3  # External tool exited non-zero
    PARSE_ERROR = 4  # Tool succeeded but its output was not understood
    INTEGRITY_ERROR = 5
    PROVISIONING_ERROR = 6
    CONFIG_ERROR = 7
