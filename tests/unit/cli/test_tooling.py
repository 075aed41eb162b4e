"""Tests for build_tooling."""

from pathlib import Path

from kitsub.cli.tooling import build_tooling
from kitsub.config.models import KitsubConfig, ToolPathsConfig, ToolsConfig
from kitsub.tools.models import ToolSource


def test_wires_cache_and_lock_settings(resource_dir, cache_dir, bundled_root):
    config = KitsubConfig(
        tools=ToolsConfig(cache_dir=cache_dir, prefer_path=True, lock_timeout_seconds=2)
    )

    tooling = build_tooling(
        config,
        resource_root=resource_dir,
        bundled_root=bundled_root,
        rid_provider=lambda: "osx-x64",
    )

    assert tooling.rid == "osx-x64"
    assert tooling.cache_paths.get_cache_root() == cache_dir
    assert tooling.resolver.options.prefer_path is True
    assert tooling.bundle_manager.get_bundled_directory("osx-x64") == bundled_root / "osx-x64"
    assert tooling.state_store.state_path.name == "startup.json"


def test_resolve_applies_configured_overrides(resource_dir, cache_dir, bundled_root, tmp_path):
    override = tmp_path / "my-mkvmerge"
    config = KitsubConfig(
        tool_paths=ToolPathsConfig(mkvmerge=override),
        tools=ToolsConfig(cache_dir=cache_dir),
    )
    tooling = build_tooling(
        config,
        resource_root=resource_dir,
        bundled_root=bundled_root,
        rid_provider=lambda: "linux-x64",
    )

    resolved = tooling.resolve()

    assert resolved.mkvmerge.source == ToolSource.OVERRIDE
    assert Path(resolved.mkvmerge.path) == override
    assert resolved.ffmpeg.source == ToolSource.EXTRACTED
