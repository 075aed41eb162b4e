"""Environment variable reader with dependency injection support.

All kitsub environment variables share the ``KITSUB_`` prefix. Values that
are empty or whitespace-only are treated as unset, so ``KITSUB_FFPROBE_PATH=``
clears an override rather than pointing it at the current directory.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

ENV_PREFIX = "KITSUB_"

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
_FALSE_VALUES = frozenset({"false", "0", "no", "off"})


class EnvReader:
    """Environment variable reader with type conversion.

    Accepts an optional env mapping so tests never have to touch
    os.environ:

        reader = EnvReader(env={"KITSUB_PREFER_PATH": "yes"})
        reader.get_bool("KITSUB_PREFER_PATH")  # True
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        """Initialize the environment reader.

        Args:
            env: Optional mapping to use instead of os.environ.
        """
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def _raw(self, var: str) -> str | None:
        value = self._env.get(var)
        if value is None or not value.strip():
            return None
        return value.strip()

    def get_str(self, var: str, default: str | None = None) -> str | None:
        """Get a string from an environment variable.

        Returns:
            The stripped value, or default if unset or blank.
        """
        value = self._raw(var)
        return default if value is None else value

    def get_int(self, var: str, default: int | None = None) -> int | None:
        """Get an integer, logging a warning and using default if invalid."""
        value = self._raw(var)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid integer value for %s: %s", var, value)
            return default

    def get_float(self, var: str, default: float | None = None) -> float | None:
        """Get a float, logging a warning and using default if invalid."""
        value = self._raw(var)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            logger.warning("Invalid float value for %s: %s", var, value)
            return default

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Get a boolean from an environment variable.

        Recognizes (case-insensitive) "true", "1", "yes", "on" and
        "false", "0", "no", "off". Anything else logs a warning and
        returns default.

        Args:
            var: Environment variable name.
            default: Default value if unset or unrecognized.

        Returns:
            Boolean value, or default.
        """
        value = self._raw(var)
        if value is None:
            return default
        lowered = value.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        logger.warning("Invalid boolean value for %s: %s", var, value)
        return default

    def get_path(
        self, var: str, must_exist: bool = True, default: Path | None = None
    ) -> Path | None:
        """Get a path from an environment variable.

        Args:
            var: Environment variable name.
            must_exist: If True, a path that does not exist logs a warning
                and yields default.
            default: Default value if unset (or missing when must_exist).

        Returns:
            User-expanded Path, or default.
        """
        value = self._raw(var)
        if value is None:
            return default

        path = Path(value).expanduser()
        if must_exist and not path.exists():
            logger.warning(
                "Environment variable %s points to non-existent path: %s",
                var,
                value,
            )
            return default
        return path
