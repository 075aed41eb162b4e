"""Bundled and cached toolset management.

Answers "is there a complete, verified toolset for RID X, and if not, can
one be materialized?". Two locations are considered:

- Bundled: ``tools/<rid>/`` next to the running program. Trusted as
  shipped, so only presence is checked.
- Extracted: ``<cache_root>/<rid>/<toolset_version>/``, populated from the
  packaged ``<rid>.zip`` archive under an inter-process lock and verified
  against the manifest hashes every time it is used.
"""

from __future__ import annotations

import hashlib
import logging
import os
import shutil
import sys
import threading
import zipfile
from pathlib import Path
from typing import BinaryIO

from kitsub.tools.cache_paths import ToolCachePaths
from kitsub.tools.errors import IntegrityError, ProvisioningError
from kitsub.tools.locking import ExtractionLock
from kitsub.tools.manifest import ToolManifest, ToolManifestLoader, ToolManifestRid
from kitsub.tools.models import (
    TOOL_NAMES,
    ToolBundleLocation,
    ToolBundleResult,
    ToolPaths,
    ToolsetStatus,
)
from kitsub.tools.runtime import make_executable

logger = logging.getLogger(__name__)

# Seconds to keep retrying the extraction lock before failing soft
DEFAULT_LOCK_TIMEOUT = 10.0

_HASH_CHUNK_SIZE = 1024 * 1024


def default_bundled_root() -> Path:
    """Get the ``tools`` directory next to the running program."""
    return Path(sys.executable).resolve().parent / "tools"


def compute_sha256(path: Path | str) -> str:
    """Compute the lowercase hex SHA-256 of a file."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_HASH_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _is_within(root: str, candidate: str) -> bool:
    return candidate == root or candidate.startswith(root.rstrip(os.sep) + os.sep)


def _resolve_entry_target(destination: str, name: str) -> str:
    """Map an archive entry name to an absolute path under destination.

    Raises:
        IntegrityError: If the normalized path escapes destination.
    """
    normalized = name.replace("\\", "/")
    target = os.path.abspath(os.path.join(destination, *normalized.split("/")))
    if not _is_within(destination, target):
        raise IntegrityError(
            f"Archive entry escapes extraction directory: {name}", path=name
        )
    return target


def extract_archive(stream: BinaryIO, destination: Path) -> int:
    """Extract a zip archive under destination.

    Every entry is validated before anything is written, so an archive
    containing a path-traversal entry leaves the destination untouched.

    Args:
        stream: Readable, seekable zip stream.
        destination: Directory to extract into (created if missing).

    Returns:
        Number of files written.

    Raises:
        IntegrityError: If any entry resolves outside destination.
        zipfile.BadZipFile: If the stream is not a zip archive.
        OSError: On filesystem errors.
    """
    root = os.path.abspath(destination)
    files_written = 0
    with zipfile.ZipFile(stream) as archive:
        plan: list[tuple[zipfile.ZipInfo, str]] = []
        for info in archive.infolist():
            if not info.filename:
                continue
            plan.append((info, _resolve_entry_target(root, info.filename)))

        os.makedirs(root, exist_ok=True)
        for info, target in plan:
            if info.filename.endswith(("/", "\\")):
                os.makedirs(target, exist_ok=True)
                continue
            os.makedirs(os.path.dirname(target), exist_ok=True)
            with archive.open(info) as src, open(target, "wb") as dst:
                shutil.copyfileobj(src, dst)
            files_written += 1
    return files_written


class ToolBundleManager:
    """Locates, verifies, and extracts toolsets for a platform."""

    def __init__(
        self,
        manifest_loader: ToolManifestLoader,
        cache_paths: ToolCachePaths,
        bundled_root: Path | None = None,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    ) -> None:
        """Initialize the bundle manager.

        Args:
            manifest_loader: Source of the manifest and per-RID archives.
            cache_paths: Cache layout calculator.
            bundled_root: Directory containing ``<rid>/`` bundled toolsets.
                Defaults to ``tools/`` next to the running program.
            lock_timeout: Maximum seconds to wait for the extraction lock.
        """
        self._loader = manifest_loader
        self._cache_paths = cache_paths
        self._bundled_root = bundled_root or default_bundled_root()
        self._lock_timeout = lock_timeout
        self._manifest: ToolManifest | None = None
        self._manifest_lock = threading.Lock()

    @property
    def manifest(self) -> ToolManifest:
        """The manifest, loaded once per manager."""
        if self._manifest is None:
            with self._manifest_lock:
                if self._manifest is None:
                    self._manifest = self._loader.load()
        return self._manifest

    @property
    def cache_paths(self) -> ToolCachePaths:
        return self._cache_paths

    def get_bundled_directory(self, rid: str) -> Path:
        return self._bundled_root / rid

    def get_extracted_directory(self, rid: str) -> Path:
        return self._cache_paths.get_toolset_root(rid, self.manifest.toolset_version)

    # ------------------------------------------------------------------
    # Bundled toolsets
    # ------------------------------------------------------------------

    def try_get_bundled_toolset(self, rid: str) -> ToolBundleResult | None:
        """Find a complete toolset under ``tools/<rid>/``.

        No hash check is performed; bundled binaries ship with the build.

        Returns:
            The bundled toolset, or None if any tool file is missing.
        """
        rid_entry = self._get_complete_rid(rid)
        if rid_entry is None:
            return None

        base_directory = self.get_bundled_directory(rid)
        paths = self._build_tool_paths(rid, base_directory, rid_entry)
        if not self._all_tools_present(paths):
            logger.debug("Bundled tools not present for RID %s", rid)
            return None

        logger.info("Using bundled tools from %s", base_directory)
        return ToolBundleResult(base_directory, ToolBundleLocation.BUNDLED, paths)

    # ------------------------------------------------------------------
    # Extracted (cached) toolsets
    # ------------------------------------------------------------------

    def try_get_extracted_toolset(self, rid: str) -> ToolBundleResult | None:
        """Find or extract a verified toolset in the cache.

        Provisioning failures are logged and returned as None so callers can
        fall back to PATH. Integrity failures are raised.

        Returns:
            The extracted toolset, or None if it is not available.

        Raises:
            IntegrityError: If extraction produced untrustworthy files.
        """
        try:
            return self.ensure_extracted_toolset(rid)
        except ProvisioningError as e:
            logger.warning("Cached tools unavailable: %s", e)
            return None

    def ensure_extracted_toolset(self, rid: str) -> ToolBundleResult:
        """Return a verified cached toolset, extracting it if needed.

        A fully present and verified cache is returned without locking.
        Otherwise the RID's extraction lock is taken, the cache is
        re-checked, and the packaged archive is extracted and verified.

        Args:
            rid: Platform identifier.

        Returns:
            The extracted toolset.

        Raises:
            ProvisioningError: If the RID is unknown or incomplete, the lock
                is unavailable, no archive is packaged, or extraction fails.
            IntegrityError: If an archive entry escapes the destination or
                the extracted files fail hash verification.
        """
        rid_entry = self._get_complete_rid(rid)
        if rid_entry is None:
            raise ProvisioningError(rid, "No complete toolset entry in tools manifest")

        version_directory = self.get_extracted_directory(rid)
        paths = self._build_tool_paths(rid, version_directory, rid_entry)
        result = ToolBundleResult(
            version_directory, ToolBundleLocation.EXTRACTED, paths
        )

        if self._is_toolset_valid(paths, rid_entry):
            logger.info("Using cached tools from %s", version_directory)
            return result

        lock = ExtractionLock.try_acquire(
            self._cache_paths.get_lock_path(rid), timeout=self._lock_timeout
        )
        if lock is None:
            raise ProvisioningError(rid, "Could not acquire tool extraction lock")

        with lock:
            if self._is_toolset_valid(paths, rid_entry):
                logger.info(
                    "Cached tools became available while waiting: %s",
                    version_directory,
                )
                return result

            self._extract_toolset(rid, rid_entry, version_directory)

            if not self._is_toolset_valid(paths, rid_entry):
                shutil.rmtree(version_directory, ignore_errors=True)
                raise IntegrityError(
                    f"Extracted tools for {rid} failed hash verification",
                    path=str(version_directory),
                )

        logger.info("Extracted tools for RID %s to %s", rid, version_directory)
        return result

    def _extract_toolset(
        self, rid: str, rid_entry: ToolManifestRid, version_directory: Path
    ) -> None:
        """Replace version_directory with the contents of the RID archive.

        The archive is unpacked into a hidden sibling staging directory and
        renamed into place only once every entry is written and the tools are
        executable. A failure at any point removes the staging directory, so
        version_directory never holds a partial toolset.
        """
        stream = self._loader.try_open_archive_stream(rid)
        if stream is None:
            raise ProvisioningError(rid, "No tool archive packaged for this platform")

        staging_directory = version_directory.with_name(
            f".{version_directory.name}.tmp-{os.getpid()}"
        )
        logger.info("Extracting tools for RID %s to %s", rid, version_directory)
        try:
            with stream:
                entries = self._validate_archive(stream, staging_directory)
                shutil.rmtree(staging_directory, ignore_errors=True)
                stream.seek(0)
                files_written = extract_archive(stream, staging_directory)

            self._ensure_executables(
                self._build_tool_paths(rid, staging_directory, rid_entry)
            )
            if version_directory.exists():
                shutil.rmtree(version_directory)
            os.replace(staging_directory, version_directory)
        except (OSError, zipfile.BadZipFile) as e:
            raise ProvisioningError(rid, f"Tool extraction failed: {e}") from e
        finally:
            if staging_directory.exists():
                shutil.rmtree(staging_directory, ignore_errors=True)

        logger.debug(
            "Extracted tool archive",
            extra={"rid": rid, "entries": entries, "files_written": files_written},
        )

    @staticmethod
    def _validate_archive(stream: BinaryIO, destination: Path) -> int:
        """Check every entry path before the old toolset is removed.

        Returns:
            Number of entries in the archive.
        """
        root = os.path.abspath(destination)
        with zipfile.ZipFile(stream) as archive:
            names = [info.filename for info in archive.infolist() if info.filename]
        for name in names:
            _resolve_entry_target(root, name)
        return len(names)

    def clean_cache(self) -> bool:
        """Delete the whole cache root.

        Returns:
            True if a directory was removed, False if it did not exist.
        """
        cache_root = self._cache_paths.get_cache_root()
        if not cache_root.exists():
            logger.info("Tools cache directory does not exist: %s", cache_root)
            return False

        shutil.rmtree(cache_root)
        logger.info("Deleted tools cache directory %s", cache_root)
        return True

    def installed_versions(self, rid: str) -> tuple[str, ...]:
        """List toolset versions present in the cache for a RID."""
        rid_root = self._cache_paths.get_rid_root(rid)
        if not rid_root.is_dir():
            return ()
        return tuple(
            sorted(
                p.name
                for p in rid_root.iterdir()
                if p.is_dir() and not p.name.startswith(".")
            )
        )

    def describe(self, rid: str) -> ToolsetStatus:
        """Build a diagnostic snapshot for ``tools status``. Never extracts."""
        manifest = self.manifest
        rid_entry = manifest.get_rid(rid)
        bundled_directory = self.get_bundled_directory(rid)
        cache_directory = self.get_extracted_directory(rid)

        bundled_present = cache_present = cache_verified = False
        unpinned: tuple[str, ...] = ()
        if rid_entry is not None and rid_entry.is_complete():
            bundled_present = self._all_tools_present(
                self._build_tool_paths(rid, bundled_directory, rid_entry)
            )
            cache_tool_paths = self._build_tool_paths(rid, cache_directory, rid_entry)
            cache_present = self._all_tools_present(cache_tool_paths)
            cache_verified = cache_present and self._verify_hashes(
                cache_tool_paths, rid_entry
            )
            unpinned = rid_entry.unpinned_tools()

        return ToolsetStatus(
            rid=rid,
            toolset_version=manifest.toolset_version,
            in_manifest=rid_entry is not None,
            bundled_directory=bundled_directory,
            bundled_present=bundled_present,
            cache_directory=cache_directory,
            cache_present=cache_present,
            cache_verified=cache_verified,
            unpinned_tools=unpinned,
            installed_versions=self.installed_versions(rid),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_complete_rid(self, rid: str) -> ToolManifestRid | None:
        rid_entry = self.manifest.get_rid(rid)
        if rid_entry is None:
            logger.debug("Tools manifest does not include RID %s", rid)
            return None
        if not rid_entry.is_complete():
            logger.debug("Tools manifest entry for RID %s is incomplete", rid)
            return None
        return rid_entry

    @staticmethod
    def _build_tool_paths(
        rid: str, base_directory: Path, rid_entry: ToolManifestRid
    ) -> ToolPaths:
        """Resolve manifest relative paths under base_directory.

        Raises:
            ProvisioningError: If the RID entry lacks one of the tools.
            IntegrityError: If a manifest path escapes base_directory.
        """
        root = os.path.abspath(base_directory)
        resolved: dict[str, str] = {}
        for name in TOOL_NAMES:
            entry = rid_entry.get(name)
            if entry is None:
                raise ProvisioningError(rid, f"Tools manifest has no entry for {name}")
            target = os.path.abspath(
                os.path.join(root, *entry.relative_path.replace("\\", "/").split("/"))
            )
            if not _is_within(root, target) or target == root:
                raise IntegrityError(
                    f"Manifest path for {name} escapes toolset directory: "
                    f"{entry.relative_path}",
                    path=entry.relative_path,
                )
            resolved[name] = target
        return ToolPaths(**resolved)

    @staticmethod
    def _all_tools_present(paths: ToolPaths) -> bool:
        return all(os.path.isfile(paths.get(name) or "") for name in TOOL_NAMES)

    def _is_toolset_valid(self, paths: ToolPaths, rid_entry: ToolManifestRid) -> bool:
        return self._all_tools_present(paths) and self._verify_hashes(paths, rid_entry)

    def _verify_hashes(self, paths: ToolPaths, rid_entry: ToolManifestRid) -> bool:
        """Compare file hashes with the manifest; unpinned tools pass."""
        for name in TOOL_NAMES:
            entry = rid_entry.get(name)
            expected = entry.sha256 if entry is not None else None
            if expected is None:
                logger.debug("Skipping hash verification for unpinned %s", name)
                continue

            path = paths.get(name)
            try:
                actual = compute_sha256(path or "")
            except OSError as e:
                logger.debug("Cannot hash %s: %s", path, e)
                return False

            if actual != expected:
                logger.debug(
                    "Hash mismatch for %s",
                    name,
                    extra={"expected": expected, "actual": actual},
                )
                return False
        return True

    @staticmethod
    def _ensure_executables(paths: ToolPaths) -> None:
        for name in TOOL_NAMES:
            path = paths.get(name)
            if path and os.path.isfile(path):
                make_executable(path)
