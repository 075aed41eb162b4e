"""Configuration data models.

This module defines dataclasses for kitsub configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path

from kitsub.tools.models import ToolPaths, ToolResolverOptions

VALID_LOG_LEVELS = frozenset({"debug", "info", "warning", "error"})
VALID_LOG_FORMATS = frozenset({"text", "json"})


@dataclass
class ToolPathsConfig:
    """Explicit tool path overrides.

    All paths are optional. Unset tools go through normal resolution
    (bundled, cached, then PATH).
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None
    mkvmerge: Path | None = None
    mkvpropedit: Path | None = None

    def to_overrides(self) -> ToolPaths:
        """Convert to the resolver's override value type."""
        return ToolPaths(
            ffmpeg=str(self.ffmpeg) if self.ffmpeg else None,
            ffprobe=str(self.ffprobe) if self.ffprobe else None,
            mkvmerge=str(self.mkvmerge) if self.mkvmerge else None,
            mkvpropedit=str(self.mkvpropedit) if self.mkvpropedit else None,
        )


@dataclass
class ToolsConfig:
    """Tool resolution and provisioning behavior."""

    # Consult bundled/cached toolsets before PATH
    prefer_bundled: bool = True

    # Consult PATH before bundled/cached toolsets
    prefer_path: bool = False

    # Cache root override (None = per-user data directory)
    cache_dir: Path | None = None

    # Upper bound on waiting for another process's extraction
    lock_timeout_seconds: float = 10.0

    # Minimum hours between "tool updates available" notices
    check_interval_hours: int = 24

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.lock_timeout_seconds < 0:
            raise ValueError(
                f"lock_timeout_seconds must be >= 0, got {self.lock_timeout_seconds}"
            )
        if self.check_interval_hours < 1:
            raise ValueError(
                f"check_interval_hours must be >= 1, got {self.check_interval_hours}"
            )

    def to_resolver_options(self) -> ToolResolverOptions:
        return ToolResolverOptions(
            prefer_bundled=self.prefer_bundled,
            prefer_path=self.prefer_path,
            tools_cache_directory=self.cache_dir,
        )


@dataclass
class LoggingConfig:
    """Configuration for logging output."""

    # Log level: debug, info, warning, error
    level: str = "warning"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.level.lower() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"level must be one of {sorted(VALID_LOG_LEVELS)}, got {self.level}"
            )
        if self.format.lower() not in VALID_LOG_FORMATS:
            raise ValueError(
                f"format must be one of {sorted(VALID_LOG_FORMATS)}, got {self.format}"
            )


@dataclass
class KitsubConfig:
    """Main configuration container for kitsub."""

    tool_paths: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def get_tool_path(self, tool_name: str) -> Path | None:
        """Get the configured override for a tool, if any."""
        return getattr(self.tool_paths, tool_name.lower(), None)
