"""Startup check ledger.

Records when kitsub last compared the cached toolset with the packaged
manifest, so the "newer tools available" notice is shown at most once per
check interval. Stored as ``<state_dir>/startup.json``.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from pathlib import Path

from kitsub.tools.bundle import ToolBundleManager

logger = logging.getLogger(__name__)

STATE_FILE_NAME = "startup.json"
DEFAULT_CHECK_INTERVAL_HOURS = 24


def _parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp, assuming UTC when no offset is given."""
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass(frozen=True)
class StartupState:
    """Persisted startup check state."""

    last_startup_check_utc: datetime | None = None
    last_installed_toolset_version_seen: str | None = None

    def to_dict(self) -> dict:
        return {
            "lastStartupCheckUtc": (
                self.last_startup_check_utc.isoformat()
                if self.last_startup_check_utc
                else None
            ),
            "lastInstalledToolsetVersionSeen": self.last_installed_toolset_version_seen,
        }

    @classmethod
    def from_dict(cls, data: dict) -> StartupState:
        version = data.get("lastInstalledToolsetVersionSeen")
        return cls(
            last_startup_check_utc=_parse_timestamp(data.get("lastStartupCheckUtc")),
            last_installed_toolset_version_seen=(
                str(version) if version is not None else None
            ),
        )


class StartupStateStore:
    """Loads and saves the startup ledger file."""

    def __init__(self, state_dir: Path) -> None:
        self.state_path = state_dir / STATE_FILE_NAME

    def load(self) -> StartupState:
        """Load the ledger.

        Never raises. A missing or unreadable file yields an empty state.
        """
        if not self.state_path.exists():
            logger.debug("Startup state file does not exist: %s", self.state_path)
            return StartupState()

        try:
            with open(self.state_path, encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("startup state must be a JSON object")
            return StartupState.from_dict(data)
        except (OSError, ValueError) as e:
            logger.warning(
                "Failed to load startup state from %s: %s", self.state_path, e
            )
            return StartupState()

    def save(self, state: StartupState) -> None:
        """Save the ledger with an atomic write (temp file + rename).

        I/O failures are logged, not raised.
        """
        try:
            self.state_path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path_str = tempfile.mkstemp(
                suffix=self.state_path.suffix,
                dir=self.state_path.parent,
                text=True,
            )
            temp_path = Path(temp_path_str)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(state.to_dict(), f, indent=2)
                temp_path.replace(self.state_path)
                logger.debug("Saved startup state to %s", self.state_path)
            except Exception:
                temp_path.unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.warning(
                "Failed to write startup state to %s: %s", self.state_path, e
            )


def should_check(
    state: StartupState,
    now: datetime,
    interval_hours: int = DEFAULT_CHECK_INTERVAL_HOURS,
) -> bool:
    """Return True if the last check is older than the interval.

    Intervals below one hour fall back to the default.
    """
    if state.last_startup_check_utc is None:
        return True
    if interval_hours < 1:
        interval_hours = DEFAULT_CHECK_INTERVAL_HOURS
    return now - state.last_startup_check_utc >= timedelta(hours=interval_hours)


def installed_toolset_version(bundle_manager: ToolBundleManager, rid: str) -> str | None:
    """Get the cached toolset version for a RID when it is unambiguous.

    The manifest version wins whenever it is among the cached versions, so
    leftovers from older releases never trigger an update notice. Otherwise a
    version is returned only when exactly one is cached; version names are not
    ordered, so several older versions yield None.
    """
    versions = bundle_manager.installed_versions(rid)
    manifest_version = bundle_manager.manifest.toolset_version.casefold()
    for version in versions:
        if version.casefold() == manifest_version:
            return version
    return versions[0] if len(versions) == 1 else None


def run_startup_check(
    store: StartupStateStore,
    bundle_manager: ToolBundleManager,
    rid: str,
    interval_hours: int = DEFAULT_CHECK_INTERVAL_HOURS,
    now: datetime | None = None,
) -> str | None:
    """Compare the cached toolset version with the manifest, throttled.

    Args:
        store: Ledger store.
        bundle_manager: Provides the manifest and the cache contents.
        rid: Platform identifier.
        interval_hours: Minimum hours between checks.
        now: Current time (defaults to UTC now).

    Returns:
        The manifest toolset version if a different cached version was found
        and a notice was logged, otherwise None.
    """
    now = now or datetime.now(timezone.utc)
    state = store.load()
    if not should_check(state, now, interval_hours):
        return None

    installed = installed_toolset_version(bundle_manager, rid)
    store.save(
        replace(
            state,
            last_startup_check_utc=now,
            last_installed_toolset_version_seen=installed,
        )
    )

    manifest_version = bundle_manager.manifest.toolset_version
    if not installed or installed.casefold() == manifest_version.casefold():
        return None

    logger.info(
        "Tool updates available (%s -> %s); run 'kitsub tools extract' to update",
        installed,
        manifest_version,
    )
    return manifest_version
