"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to get_config)
2. Environment variables (KITSUB_*)
3. Config file (config.toml in the per-user data directory)
4. Default values

Environment variables:
- KITSUB_FFMPEG_PATH, KITSUB_FFPROBE_PATH, KITSUB_MKVMERGE_PATH,
  KITSUB_MKVPROPEDIT_PATH: Tool path overrides
- KITSUB_TOOLS_CACHE_DIR: Root directory for extracted toolsets
- KITSUB_PREFER_BUNDLED: Consult bundled/cached tools before PATH
- KITSUB_PREFER_PATH: Consult PATH before bundled/cached tools
- KITSUB_CONFIG_PATH: Path to config file (overrides default location)
- KITSUB_LOG_LEVEL, KITSUB_LOG_FILE, KITSUB_LOG_FORMAT: Logging

Config file layout:

    [tools]
    prefer_bundled = true
    prefer_path = false
    cache_dir = "/var/cache/kitsub"
    lock_timeout_seconds = 10
    check_interval_hours = 24

    [tools.paths]
    ffprobe = "/opt/ffmpeg/bin/ffprobe"

    [logging]
    level = "info"
    file = "~/kitsub.log"
    format = "json"
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from kitsub.config.env import EnvReader
from kitsub.config.models import (
    KitsubConfig,
    LoggingConfig,
    ToolPathsConfig,
    ToolsConfig,
)
from kitsub.config.paths import get_default_config_path
from kitsub.tools.errors import ConfigurationError
from kitsub.tools.models import TOOL_NAMES

logger = logging.getLogger(__name__)


def load_config_file(path: Path | None = None) -> dict:
    """Load configuration from a TOML file.

    Args:
        path: Path to config file. If None, uses the default location.

    Returns:
        Parsed configuration dict. Empty dict if the file doesn't exist.

    Raises:
        ConfigurationError: If the file exists but cannot be read or parsed.
    """
    if path is None:
        path = get_default_config_path()

    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}

    try:
        with open(path, "rb") as f:
            config = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Failed to load config file {path}: {e}") from e

    logger.debug("Loaded config from %s", path)
    return config


def _section(data: Mapping[str, Any], name: str, source: str) -> Mapping[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"[{source}{name}] must be a table")
    return value


def _file_bool(section: Mapping[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ConfigurationError(f"{key} must be true or false, got {value!r}")
    return value


def _file_number(section: Mapping[str, Any], key: str, default: float) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ConfigurationError(f"{key} must be a number, got {value!r}")
    return value


def _file_path(section: Mapping[str, Any], key: str) -> Path | None:
    value = section.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{key} must be a string path, got {value!r}")
    if not value.strip():
        return None
    return Path(value.strip()).expanduser()


def _file_str(section: Mapping[str, Any], key: str, default: str) -> str:
    value = section.get(key, default)
    if not isinstance(value, str):
        raise ConfigurationError(f"{key} must be a string, got {value!r}")
    return value


def get_config(
    config_path: Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
    # CLI overrides (highest precedence)
    ffmpeg_path: Path | None = None,
    ffprobe_path: Path | None = None,
    mkvmerge_path: Path | None = None,
    mkvpropedit_path: Path | None = None,
    cache_dir: Path | None = None,
    prefer_bundled: bool | None = None,
    prefer_path: bool | None = None,
) -> KitsubConfig:
    """Get kitsub configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides KITSUB_CONFIG_PATH).
        env: Environment mapping (defaults to os.environ).
        ffmpeg_path: CLI override for ffmpeg path.
        ffprobe_path: CLI override for ffprobe path.
        mkvmerge_path: CLI override for mkvmerge path.
        mkvpropedit_path: CLI override for mkvpropedit path.
        cache_dir: CLI override for the tools cache root.
        prefer_bundled: CLI override for bundled tool preference.
        prefer_path: CLI override for PATH preference.

    Returns:
        KitsubConfig with merged configuration.

    Raises:
        ConfigurationError: If the config file or a setting is malformed.
    """
    reader = EnvReader(env=env)
    file_config = load_config_file(config_path or get_default_config_path(env))

    tools_file = _section(file_config, "tools", "")
    paths_file = _section(tools_file, "paths", "tools.")
    logging_file = _section(file_config, "logging", "")

    cli_paths = {
        "ffmpeg": ffmpeg_path,
        "ffprobe": ffprobe_path,
        "mkvmerge": mkvmerge_path,
        "mkvpropedit": mkvpropedit_path,
    }
    tool_paths = ToolPathsConfig(
        **{
            name: (
                cli_paths[name]
                or reader.get_path(f"KITSUB_{name.upper()}_PATH", must_exist=False)
                or _file_path(paths_file, name)
            )
            for name in TOOL_NAMES
        }
    )

    try:
        tools = ToolsConfig(
            prefer_bundled=(
                prefer_bundled
                if prefer_bundled is not None
                else reader.get_bool(
                    "KITSUB_PREFER_BUNDLED",
                    _file_bool(tools_file, "prefer_bundled", True),
                )
            ),
            prefer_path=(
                prefer_path
                if prefer_path is not None
                else reader.get_bool(
                    "KITSUB_PREFER_PATH",
                    _file_bool(tools_file, "prefer_path", False),
                )
            ),
            cache_dir=(
                cache_dir
                or reader.get_path("KITSUB_TOOLS_CACHE_DIR", must_exist=False)
                or _file_path(tools_file, "cache_dir")
            ),
            lock_timeout_seconds=float(
                _file_number(tools_file, "lock_timeout_seconds", 10.0)
            ),
            check_interval_hours=int(
                _file_number(tools_file, "check_interval_hours", 24)
            ),
        )

        logging_config = LoggingConfig(
            level=reader.get_str(
                "KITSUB_LOG_LEVEL", _file_str(logging_file, "level", "warning")
            ),
            file=(
                reader.get_path("KITSUB_LOG_FILE", must_exist=False)
                or _file_path(logging_file, "file")
            ),
            format=reader.get_str(
                "KITSUB_LOG_FORMAT", _file_str(logging_file, "format", "text")
            ),
            include_stderr=_file_bool(logging_file, "include_stderr", False),
            max_bytes=int(_file_number(logging_file, "max_bytes", 10_485_760)),
            backup_count=int(_file_number(logging_file, "backup_count", 5)),
        )
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    return KitsubConfig(tool_paths=tool_paths, tools=tools, logging=logging_config)
