"""Tests for configuration dataclasses."""

from __future__ import annotations

from pathlib import Path

import pytest

from kitsub.config.logging_factory import build_logging_config
from kitsub.config.models import (
    KitsubConfig,
    LoggingConfig,
    ToolPathsConfig,
    ToolsConfig,
)
from kitsub.tools.models import ToolPaths


class TestToolPathsConfig:
    def test_to_overrides(self) -> None:
        config = ToolPathsConfig(ffprobe=Path("/opt/ffprobe"))
        assert config.to_overrides() == ToolPaths(ffprobe="/opt/ffprobe")

    def test_get_tool_path(self) -> None:
        config = KitsubConfig(tool_paths=ToolPathsConfig(mkvmerge=Path("/m")))
        assert config.get_tool_path("MKVMERGE") == Path("/m")
        assert config.get_tool_path("ffmpeg") is None


class TestToolsConfig:
    def test_to_resolver_options(self) -> None:
        options = ToolsConfig(
            prefer_bundled=False, prefer_path=True, cache_dir=Path("/c")
        ).to_resolver_options()

        assert options.prefer_bundled is False
        assert options.prefer_path is True
        assert options.tools_cache_directory == Path("/c")

    def test_negative_lock_timeout_rejected(self) -> None:
        with pytest.raises(ValueError, match="lock_timeout_seconds"):
            ToolsConfig(lock_timeout_seconds=-0.5)

    def test_zero_interval_rejected(self) -> None:
        with pytest.raises(ValueError, match="check_interval_hours"):
            ToolsConfig(check_interval_hours=0)


class TestLoggingConfig:
    def test_defaults(self) -> None:
        config = LoggingConfig()
        assert config.level == "warning"
        assert config.format == "text"
        assert config.file is None

    def test_level_is_case_insensitive(self) -> None:
        assert LoggingConfig(level="DEBUG").level == "DEBUG"

    def test_invalid_format_rejected(self) -> None:
        with pytest.raises(ValueError, match="format"):
            LoggingConfig(format="xml")


class TestBuildLoggingConfig:
    def test_overrides_apply(self, tmp_path: Path) -> None:
        base = LoggingConfig(level="info", backup_count=2)

        merged = build_logging_config(
            base, level="DEBUG", file=tmp_path / "k.log", json_output=True
        )

        assert merged.level == "debug"
        assert merged.file == tmp_path / "k.log"
        assert merged.format == "json"
        assert merged.backup_count == 2

    def test_none_keeps_base(self) -> None:
        base = LoggingConfig(level="error", include_stderr=True)
        assert build_logging_config(base) == base

    def test_default_level_is_warning(self) -> None:
        assert build_logging_config(LoggingConfig()).level == "warning"

    def test_json_flag_off_keeps_configured_format(self) -> None:
        base = LoggingConfig(format="json")
        assert build_logging_config(base, json_output=False).format == "json"

    def test_invalid_override_raises(self) -> None:
        with pytest.raises(ValueError):
            build_logging_config(LoggingConfig(), level="loud")
