"""Per-user directory locations.

- Windows: %LOCALAPPDATA%\\Kitsub
- macOS: ~/Library/Application Support/Kitsub
- Other: $XDG_DATA_HOME/kitsub or ~/.local/share/kitsub
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from pathlib import Path

from kitsub.config.env import EnvReader

APP_NAME = "Kitsub"
CONFIG_FILE_NAME = "config.toml"
CONFIG_PATH_ENV = "KITSUB_CONFIG_PATH"


def get_user_data_dir(env: Mapping[str, str] | None = None) -> Path:
    """Get the per-user application data directory.

    Args:
        env: Optional environment mapping (defaults to os.environ).

    Returns:
        Path to the data directory (not created).
    """
    reader = EnvReader(env=env)
    if sys.platform == "win32":
        local_app_data = reader.get_path("LOCALAPPDATA", must_exist=False)
        base = local_app_data or Path.home() / "AppData" / "Local"
        return base / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME

    xdg_data_home = reader.get_str("XDG_DATA_HOME")
    if xdg_data_home and Path(xdg_data_home).is_absolute():
        return Path(xdg_data_home) / APP_NAME.casefold()
    return Path.home() / ".local" / "share" / APP_NAME.casefold()


def get_default_config_path(env: Mapping[str, str] | None = None) -> Path:
    """Get the config file path.

    KITSUB_CONFIG_PATH wins; otherwise ``config.toml`` in the data directory.
    """
    env_path = EnvReader(env=env).get_path(CONFIG_PATH_ENV, must_exist=False)
    if env_path is not None:
        return env_path
    return get_user_data_dir(env) / CONFIG_FILE_NAME
