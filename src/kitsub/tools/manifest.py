"""Tool manifest model and loader.

The manifest describes, per platform identifier (RID), where each tool
binary lives relative to a toolset root and which SHA-256 it must have.
It ships as package data next to one zip archive per RID:

    kitsub/tools/data/tools-manifest.json
    kitsub/tools/data/<rid>.zip

Manifest JSON format (unknown fields are ignored, property names are
matched case-insensitively):

    {
      "toolsetVersion": "2024.10.1",
      "rids": {
        "linux-x64": {
          "ffmpeg": {"path": "ffmpeg/ffmpeg", "sha256": "..."},
          ...
        }
      }
    }
"""

from __future__ import annotations

import json
import logging
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any, BinaryIO

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from kitsub.tools.models import TOOL_NAMES

logger = logging.getLogger(__name__)

MANIFEST_FILE_NAME = "tools-manifest.json"
ARCHIVE_SUFFIX = ".zip"
UNKNOWN_TOOLSET_VERSION = "unknown"


def _casefold_keys(value: Any) -> Any:
    """Recursively casefold mapping keys so property matching ignores case."""
    if isinstance(value, dict):
        return {str(k).casefold(): _casefold_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_casefold_keys(v) for v in value]
    return value


class ToolManifestEntry(BaseModel):
    """Location and expected hash of one tool binary."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    relative_path: str = Field(alias="path", min_length=1)
    sha256: str | None = None

    @field_validator("sha256")
    @classmethod
    def normalize_sha256(cls, v: str | None) -> str | None:
        """Treat blank hashes as unpinned and compare hex case-insensitively."""
        if v is None or not v.strip():
            return None
        return v.strip().casefold()


class ToolManifestRid(BaseModel):
    """Tool entries for a single platform identifier.

    Every tool is optional in the file, but a RID can only yield a toolset
    when all of ffmpeg, ffprobe, mkvmerge and mkvpropedit are present.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    ffmpeg: ToolManifestEntry | None = None
    ffprobe: ToolManifestEntry | None = None
    mkvmerge: ToolManifestEntry | None = None
    mkvpropedit: ToolManifestEntry | None = None
    mediainfo: ToolManifestEntry | None = None

    def get(self, name: str) -> ToolManifestEntry | None:
        return getattr(self, name.casefold(), None)

    def is_complete(self) -> bool:
        """Return True if every required tool has an entry."""
        return all(self.get(name) is not None for name in TOOL_NAMES)

    def unpinned_tools(self) -> tuple[str, ...]:
        """Names of required tools whose entry has no sha256."""
        return tuple(
            name
            for name in TOOL_NAMES
            if (entry := self.get(name)) is not None and entry.sha256 is None
        )


class ToolManifest(BaseModel):
    """Versioned description of known tool binaries per platform."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    toolset_version: str = Field(
        default=UNKNOWN_TOOLSET_VERSION, alias="toolsetversion", min_length=1
    )
    rids: dict[str, ToolManifestRid] = Field(default_factory=dict)

    @field_validator("rids")
    @classmethod
    def casefold_rids(cls, v: dict[str, ToolManifestRid]) -> dict[str, ToolManifestRid]:
        return {rid.casefold(): entry for rid, entry in v.items()}

    def get_rid(self, rid: str) -> ToolManifestRid | None:
        """Look up a RID entry, ignoring case."""
        return self.rids.get(rid.casefold())


def parse_manifest(content: str | bytes) -> ToolManifest:
    """Parse manifest JSON into a ToolManifest.

    Args:
        content: Raw manifest JSON.

    Returns:
        Parsed manifest.

    Raises:
        json.JSONDecodeError: If content is not valid JSON.
        pydantic.ValidationError: If content does not match the schema.
    """
    data = json.loads(content)
    return ToolManifest.model_validate(_casefold_keys(data))


class ToolManifestLoader:
    """Loads the packaged tool manifest and its per-RID archives.

    The loader does not cache. Its owner (the bundle manager) memoizes
    the loaded manifest for the lifetime of that owner.
    """

    def __init__(self, resource_root: Traversable | Path | None = None) -> None:
        """Initialize the loader.

        Args:
            resource_root: Directory holding the manifest and archives.
                Defaults to the ``kitsub.tools.data`` package.
        """
        self._root: Traversable | Path = (
            resource_root
            if resource_root is not None
            else resources.files("kitsub.tools.data")
        )

    def load(self) -> ToolManifest:
        """Load the manifest.

        Never raises. A missing or unparseable manifest yields an empty
        manifest (no RIDs) so callers fall back to PATH resolution.

        Returns:
            The loaded manifest, or an empty one.
        """
        manifest_file = self._root.joinpath(MANIFEST_FILE_NAME)
        try:
            if not manifest_file.is_file():
                logger.warning(
                    "Tools manifest %s not found; bundled tools will not be available",
                    MANIFEST_FILE_NAME,
                )
                return ToolManifest()
            manifest = parse_manifest(manifest_file.read_bytes())
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(
                "Failed to load tools manifest; bundled tools will not be available: %s",
                e,
            )
            return ToolManifest()

        logger.debug(
            "Loaded tools manifest",
            extra={
                "toolset_version": manifest.toolset_version,
                "rid_count": len(manifest.rids),
            },
        )
        return manifest

    def try_open_archive_stream(self, rid: str) -> BinaryIO | None:
        """Open the packaged zip archive for a RID.

        Args:
            rid: Platform identifier; matched case-insensitively against
                ``<rid>.zip``.

        Returns:
            Readable binary stream positioned at the start of the archive
            (caller must close it), or None if no archive is packaged.
        """
        wanted = f"{rid}{ARCHIVE_SUFFIX}".casefold()
        try:
            for entry in self._root.iterdir():
                if entry.name.casefold() == wanted and entry.is_file():
                    logger.debug("Found tool archive %s", entry.name)
                    return entry.open("rb")
        except OSError as e:
            logger.warning("Failed to open tool archive for RID %s: %s", rid, e)
            return None

        logger.debug("No tool archive packaged for RID %s", rid)
        return None
