"""Data models for resolved external tools.

This module defines the value types passed between the bundle manager,
the resolver, and the CLI layer.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

# Order matters: resolution results and log output follow this order.
TOOL_NAMES: tuple[str, ...] = ("ffmpeg", "ffprobe", "mkvmerge", "mkvpropedit")


class ToolSource(Enum):
    """Tier that produced a resolved tool path."""

    OVERRIDE = "override"  # Explicit path from CLI, env, or config
    BUNDLED = "bundled"  # tools/<rid>/ next to the running program
    EXTRACTED = "extracted"  # Versioned per-user cache
    PATH = "path"  # PATH lookup, or bare tool name as last resort


class ToolBundleLocation(Enum):
    """Where a complete toolset was found."""

    BUNDLED = "bundled"
    EXTRACTED = "extracted"


@dataclass(frozen=True)
class ToolPaths:
    """One path per tool.

    Used both for fully-populated toolset paths and for sparse user
    overrides, where any field may be None.
    """

    ffmpeg: str | None = None
    ffprobe: str | None = None
    mkvmerge: str | None = None
    mkvpropedit: str | None = None

    def get(self, name: str) -> str | None:
        """Get the path for a tool by name.

        Raises:
            KeyError: If the tool name is unknown.
        """
        key = name.casefold()
        if key not in TOOL_NAMES:
            raise KeyError(f"Unknown tool: {name}")
        return getattr(self, key)

    def as_dict(self) -> dict[str, str | None]:
        return {name: getattr(self, name) for name in TOOL_NAMES}


@dataclass(frozen=True)
class ToolBundleResult:
    """A complete toolset found on disk.

    All paths in ``paths`` are rooted under ``base_directory``.
    """

    base_directory: Path
    location: ToolBundleLocation
    paths: ToolPaths


@dataclass(frozen=True)
class ToolResolverOptions:
    """Caller preferences for tool resolution."""

    prefer_bundled: bool = True
    prefer_path: bool = False
    tools_cache_directory: Path | None = None


@dataclass(frozen=True)
class ToolPathResolution:
    """A resolved tool path together with the tier that produced it."""

    path: str
    source: ToolSource


@dataclass(frozen=True)
class ToolPathsResolved:
    """Resolution result for every tool on the current platform."""

    runtime_rid: str
    toolset_version: str
    ffmpeg: ToolPathResolution
    ffprobe: ToolPathResolution
    mkvmerge: ToolPathResolution
    mkvpropedit: ToolPathResolution

    def get(self, name: str) -> ToolPathResolution:
        """Get the resolution for a tool by name.

        Raises:
            KeyError: If the tool name is unknown.
        """
        key = name.casefold()
        if key not in TOOL_NAMES:
            raise KeyError(f"Unknown tool: {name}")
        return getattr(self, key)

    def items(self) -> list[tuple[str, ToolPathResolution]]:
        return [(name, getattr(self, name)) for name in TOOL_NAMES]

    def summary(self) -> dict[str, dict[str, str]]:
        """Get summary of all resolutions for display."""
        return {
            name: {"path": res.path, "source": res.source.value}
            for name, res in self.items()
        }


@dataclass(frozen=True)
class ToolsetStatus:
    """Diagnostic snapshot of bundled and cached toolsets for one RID."""

    rid: str
    toolset_version: str
    in_manifest: bool
    bundled_directory: Path
    bundled_present: bool
    cache_directory: Path
    cache_present: bool
    cache_verified: bool
    unpinned_tools: tuple[str, ...] = ()
    installed_versions: tuple[str, ...] = ()
