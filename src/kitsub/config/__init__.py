"""Configuration management for kitsub.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (KITSUB_*)
3. Config file (config.toml)
4. Default values (lowest priority)
"""

from kitsub.config.env import EnvReader
from kitsub.config.loader import get_config, load_config_file
from kitsub.config.logging_factory import build_logging_config
from kitsub.config.models import (
    KitsubConfig,
    LoggingConfig,
    ToolPathsConfig,
    ToolsConfig,
)
from kitsub.config.paths import get_default_config_path, get_user_data_dir

__all__ = [
    "EnvReader",
    "KitsubConfig",
    "LoggingConfig",
    "ToolPathsConfig",
    "ToolsConfig",
    "build_logging_config",
    "get_config",
    "get_default_config_path",
    "get_user_data_dir",
    "load_config_file",
]
