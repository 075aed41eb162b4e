"""Exceptions raised by tool discovery and provisioning.

Three kinds of failure cross the provisioning boundary:

- ConfigurationError: settings supplied by the caller are malformed.
- IntegrityError: an extracted toolset cannot be trusted (hash mismatch,
  archive entry escaping the destination directory). Always fatal.
- ProvisioningError: a toolset could not be materialized (archive missing,
  extraction I/O failure, extraction lock unavailable). The resolver degrades
  these to PATH lookup.
"""


class ToolingError(Exception):
    """Base exception for tool discovery and provisioning errors."""


class ConfigurationError(ToolingError):
    """Raised when caller-supplied tool settings are malformed."""


class IntegrityError(ToolingError):
    """Raised when extracted tool binaries fail verification.

    Attributes:
        path: File or archive entry that failed verification, if known.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)


class ProvisioningError(ToolingError):
    """Raised when a toolset cannot be located or extracted.

    Attributes:
        rid: Platform identifier the failure concerns.
    """

    def __init__(self, rid: str, message: str) -> None:
        self.rid = rid
        super().__init__(f"{message} (rid={rid})")
