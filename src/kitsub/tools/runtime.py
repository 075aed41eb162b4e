"""Platform identification and capability checks.

Keeps OS-specific branching out of the provisioning algorithms: callers ask
what the platform can do rather than which platform it is.
"""

import os
import platform
import sys

# File mode applied to extracted binaries on POSIX: rwxr-xr-x
EXECUTABLE_MODE = 0o755

_ARM64_MACHINES = frozenset({"arm64", "aarch64", "armv8l", "armv8b"})

# Used when PATHEXT is unset on Windows
_DEFAULT_PATHEXT = ".COM;.EXE;.BAT;.CMD"


def is_windows() -> bool:
    """Return True when running on Windows."""
    return sys.platform == "win32"


def supports_posix_permissions() -> bool:
    """Return True if the platform has POSIX execute permission bits."""
    return os.name == "posix"


def get_runtime_rid() -> str:
    """Get the platform identifier for the running interpreter.

    Returns:
        One of win-x64, win-arm64, osx-x64, osx-arm64, linux-x64, linux-arm64.
    """
    arch = "arm64" if platform.machine().casefold() in _ARM64_MACHINES else "x64"
    if is_windows():
        return f"win-{arch}"
    if sys.platform == "darwin":
        return f"osx-{arch}"
    return f"linux-{arch}"


def executable_extensions() -> list[str]:
    """Get executable extensions to try during PATH lookup.

    Returns:
        Extensions from PATHEXT in listed order on Windows, empty elsewhere.
    """
    if not is_windows():
        return []
    pathext = os.environ.get("PATHEXT") or _DEFAULT_PATHEXT
    return [ext for ext in pathext.split(";") if ext]


def make_executable(path: str) -> None:
    """Mark a file executable (mode 0755) where the platform supports it.

    No-op on platforms without POSIX permissions.
    """
    if not supports_posix_permissions():
        return
    os.chmod(path, EXECUTABLE_MODE)
