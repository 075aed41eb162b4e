"""Tests for resolution value types."""

import pytest

from kitsub.tools.models import (
    ToolPathResolution,
    ToolPaths,
    ToolPathsResolved,
    ToolSource,
)


def make_resolved() -> ToolPathsResolved:
    return ToolPathsResolved(
        runtime_rid="linux-x64",
        toolset_version="2024.10.1",
        ffmpeg=ToolPathResolution("/t/ffmpeg", ToolSource.BUNDLED),
        ffprobe=ToolPathResolution("/o/ffprobe", ToolSource.OVERRIDE),
        mkvmerge=ToolPathResolution("mkvmerge", ToolSource.PATH),
        mkvpropedit=ToolPathResolution("/c/mkvpropedit", ToolSource.EXTRACTED),
    )


class TestToolPaths:
    def test_get_ignores_case(self):
        assert ToolPaths(ffprobe="/x").get("FFprobe") == "/x"

    def test_unknown_tool_raises(self):
        with pytest.raises(KeyError):
            ToolPaths().get("mediainfo")


class TestToolPathsResolved:
    def test_items_follow_fixed_order(self):
        names = [name for name, _ in make_resolved().items()]
        assert names == ["ffmpeg", "ffprobe", "mkvmerge", "mkvpropedit"]

    def test_summary(self):
        summary = make_resolved().summary()
        assert summary["ffprobe"] == {"path": "/o/ffprobe", "source": "override"}
        assert summary["mkvpropedit"]["source"] == "extracted"

    def test_get_unknown_raises(self):
        with pytest.raises(KeyError):
            make_resolved().get("ffplay")
