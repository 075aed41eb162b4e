"""Shared test fixtures for kitsub."""

import hashlib
import json
import logging
import os
import zipfile
from collections.abc import Callable
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest
from click.testing import CliRunner

# Relative tool paths used by every test toolset
TOOL_LAYOUT: dict[str, str] = {
    "ffmpeg": "ffmpeg/ffmpeg",
    "ffprobe": "ffmpeg/ffprobe",
    "mkvmerge": "mkvtoolnix/mkvmerge",
    "mkvpropedit": "mkvtoolnix/mkvpropedit",
}

TEST_RID = "linux-x64"
TEST_TOOLSET_VERSION = "2024.10.1"


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep tests away from the real user data directory and KITSUB_* vars."""
    for var in list(os.environ):
        if var.startswith("KITSUB_"):
            monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "localappdata"))


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Remove handlers installed by configure_logging during a test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, RotatingFileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def tool_payloads() -> dict[str, bytes]:
    """Distinct fake binary content per tool."""
    return {name: f"#!/bin/sh\necho {name}\n".encode() for name in TOOL_LAYOUT}


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


@pytest.fixture
def build_manifest(tool_payloads: dict[str, bytes]) -> Callable[..., dict]:
    """Return a factory for manifest dicts.

    ``pinned=True`` records the SHA-256 of each payload; ``pinned=False``
    leaves every hash null.
    """

    def _build(
        rids: tuple[str, ...] = (TEST_RID,),
        version: str = TEST_TOOLSET_VERSION,
        pinned: bool = True,
        hashes: dict[str, str] | None = None,
    ) -> dict:
        entries = {
            name: {
                "path": rel_path,
                "sha256": (
                    (hashes or {}).get(name, sha256_hex(tool_payloads[name]))
                    if pinned
                    else None
                ),
            }
            for name, rel_path in TOOL_LAYOUT.items()
        }
        return {"toolsetVersion": version, "rids": {rid: entries for rid in rids}}

    return _build


@pytest.fixture
def write_zip() -> Callable[[Path, dict[str, bytes]], Path]:
    """Return a helper that writes a zip archive from name -> content."""

    def _write(path: Path, entries: dict[str, bytes]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w") as archive:
            for name, content in entries.items():
                archive.writestr(name, content)
        return path

    return _write


@pytest.fixture
def tool_archive_entries(tool_payloads: dict[str, bytes]) -> dict[str, bytes]:
    """Archive entries matching TOOL_LAYOUT."""
    return {TOOL_LAYOUT[name]: data for name, data in tool_payloads.items()}


@pytest.fixture
def resource_dir(
    tmp_path: Path,
    build_manifest: Callable[..., dict],
    write_zip: Callable[[Path, dict[str, bytes]], Path],
    tool_archive_entries: dict[str, bytes],
) -> Path:
    """Resource directory with a pinned manifest and a linux-x64 archive."""
    root = tmp_path / "resources"
    root.mkdir()
    (root / "tools-manifest.json").write_text(json.dumps(build_manifest()))
    write_zip(root / f"{TEST_RID}.zip", tool_archive_entries)
    return root


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """Cache root override for tests."""
    return tmp_path / "cache"


@pytest.fixture
def bundled_root(tmp_path: Path) -> Path:
    """Empty directory standing in for tools/ next to the executable."""
    root = tmp_path / "bundled"
    root.mkdir()
    return root


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the JSON fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def tool_layout() -> dict[str, str]:
    """Relative tool paths used by the test manifest and archives."""
    return dict(TOOL_LAYOUT)
