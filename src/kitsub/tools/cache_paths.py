"""Filesystem layout for extracted toolsets and startup state.

Cache layout:

    <cache_root>/<rid>/<toolset_version>/<tool relative paths...>
    <cache_root>/<rid>/.extract.lock

The cache root is, in order of precedence: an explicit override, the
KITSUB_TOOLS_CACHE_DIR environment variable, or the per-user data
directory conventional for the operating system.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from kitsub.config.env import EnvReader
from kitsub.config.paths import get_user_data_dir

logger = logging.getLogger(__name__)

CACHE_DIR_ENV = "KITSUB_TOOLS_CACHE_DIR"
LOCK_FILE_NAME = ".extract.lock"


class ToolCachePaths:
    """Computes cache and state directories for toolsets."""

    def __init__(
        self,
        cache_dir: Path | str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the path calculator.

        Args:
            cache_dir: Explicit cache root override (highest precedence).
            env: Optional environment mapping (defaults to os.environ).
        """
        self._override = Path(cache_dir) if cache_dir else None
        self._env = env

    def get_cache_root(self) -> Path:
        """Get the root directory holding all extracted toolsets."""
        if self._override is not None:
            return self._override.expanduser().absolute()

        env_override = EnvReader(env=self._env).get_str(CACHE_DIR_ENV)
        if env_override and env_override.strip():
            return Path(env_override.strip()).expanduser().absolute()

        root = get_user_data_dir(self._env) / "tools"
        logger.debug("Using default tools cache root %s", root)
        return root

    def get_rid_root(self, rid: str) -> Path:
        """Get the directory holding every cached version for a RID."""
        return self.get_cache_root() / rid

    def get_toolset_root(self, rid: str, toolset_version: str) -> Path:
        """Get the directory for one RID and toolset version."""
        return self.get_rid_root(rid) / toolset_version

    def get_lock_path(self, rid: str) -> Path:
        """Get the extraction lock file for a RID."""
        return self.get_rid_root(rid) / LOCK_FILE_NAME

    def get_state_dir(self) -> Path:
        """Get the directory for small per-user state files."""
        return get_user_data_dir(self._env) / "state"
