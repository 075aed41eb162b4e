"""Apply the global CLI logging flags to the configured LoggingConfig."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from kitsub.config.models import LoggingConfig


def build_logging_config(
    base: LoggingConfig,
    *,
    level: str | None = None,
    file: Path | None = None,
    json_output: bool = False,
) -> LoggingConfig:
    """Merge ``--log-level``, ``--log-file`` and ``--log-json`` into base.

    The level and file replace the configured values only when given, so the
    ``warning`` default (or ``KITSUB_LOG_LEVEL``) holds otherwise. ``--log-json``
    can only switch JSON on; without it the configured format is kept.
    Rotation settings always come from base.

    Raises:
        ValueError: If the resulting level is not a known level name.
    """
    return replace(
        base,
        level=level.lower() if level else base.level,
        file=file if file is not None else base.file,
        format="json" if json_output else base.format,
    )
