"""Cross-process extraction lock.

Wraps an advisory lock on a lock file (``fcntl.flock`` on POSIX,
``msvcrt.locking`` on Windows). Acquisition is non-blocking with an
optional bounded retry window; failure to acquire is returned as a value
rather than raised, since another process holding the lock is an expected
condition.
"""

from __future__ import annotations

import logging
import os
import sys
import time
from pathlib import Path
from types import TracebackType
from typing import IO

if sys.platform == "win32":
    import msvcrt
else:
    import fcntl

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.1


def _lock_fd(fd: int) -> None:
    """Take an exclusive non-blocking lock, raising OSError if held."""
    if sys.platform == "win32":
        os.lseek(fd, 0, os.SEEK_SET)
        msvcrt.locking(fd, msvcrt.LK_NBLCK, 1)
    else:
        fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)


def _unlock_fd(fd: int) -> None:
    if sys.platform == "win32":
        os.lseek(fd, 0, os.SEEK_SET)
        msvcrt.locking(fd, msvcrt.LK_UNLCK, 1)
    else:
        fcntl.flock(fd, fcntl.LOCK_UN)


class ExtractionLock:
    """Exclusive lock held on ``<cache_root>/<rid>/.extract.lock``.

    Use ``try_acquire`` to obtain an instance, then hold it with ``with``;
    the lock is released on every exit path. The lock file itself is left
    in place so that waiting processes keep locking the same file.
    """

    def __init__(self, lock_path: Path, handle: IO[str]) -> None:
        self.lock_path = lock_path
        self._handle: IO[str] | None = handle

    @classmethod
    def try_acquire(
        cls,
        lock_path: Path,
        timeout: float = 0.0,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> ExtractionLock | None:
        """Try to acquire the lock, waiting at most ``timeout`` seconds.

        Args:
            lock_path: Lock file to create/open.
            timeout: Maximum seconds to keep retrying. 0 means one attempt.
            poll_interval: Seconds between attempts.

        Returns:
            Held lock, or None if it could not be acquired (held elsewhere
            or an I/O error occurred).
        """
        try:
            lock_path.parent.mkdir(parents=True, exist_ok=True)
            handle = open(lock_path, "a+", encoding="utf-8")
        except OSError as e:
            logger.warning("Cannot open extraction lock %s: %s", lock_path, e)
            return None

        deadline = time.monotonic() + max(timeout, 0.0)
        while True:
            try:
                _lock_fd(handle.fileno())
            except OSError:
                if time.monotonic() >= deadline:
                    handle.close()
                    logger.debug("Extraction lock busy: %s", lock_path)
                    return None
                time.sleep(poll_interval)
                continue

            logger.debug("Acquired extraction lock %s", lock_path)
            return cls(lock_path, handle)

    @property
    def held(self) -> bool:
        return self._handle is not None

    def release(self) -> None:
        """Release the lock. Safe to call more than once."""
        handle = self._handle
        if handle is None:
            return
        self._handle = None
        try:
            _unlock_fd(handle.fileno())
        except OSError as e:
            logger.debug("Failed to unlock %s: %s", self.lock_path, e)
        finally:
            handle.close()
        logger.debug("Released extraction lock %s", self.lock_path)

    def __enter__(self) -> ExtractionLock:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
