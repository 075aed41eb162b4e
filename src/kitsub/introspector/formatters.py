"""Formatters for MediaInfo.

Used by ``kitsub inspect`` for human-readable and JSON output.
"""

import json
from typing import Any

from kitsub.introspector.models import (
    EXTRA_CHANNELS,
    EXTRA_RESOLUTION,
    EXTRA_SAMPLE_RATE,
    AttachmentInfo,
    MediaInfo,
    TrackInfo,
    TrackType,
)

_SECTION_TITLES = {
    TrackType.VIDEO: "Video",
    TrackType.AUDIO: "Audio",
    TrackType.SUBTITLE: "Subtitles",
}


def format_duration(seconds: float) -> str:
    """Format seconds as H:MM:SS.mmm."""
    total_ms = round(seconds * 1000)
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, ms = divmod(rest, 1000)
    return f"{hours}:{minutes:02d}:{secs:02d}.{ms:03d}"


def format_size(size_bytes: int) -> str:
    """Format a byte count with a binary unit (e.g. "1.5 GiB")."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    value = size_bytes / 1024
    for unit in ("KiB", "MiB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GiB"


def format_track_line(track: TrackInfo) -> str:
    """Format a single track for human output."""
    parts = [f"#{track.index}", track.codec]

    if resolution := track.extra.get(EXTRA_RESOLUTION):
        parts.append(resolution)
    if channels := track.extra.get(EXTRA_CHANNELS):
        parts.append(f"{channels}ch")
    if sample_rate := track.extra.get(EXTRA_SAMPLE_RATE):
        parts.append(f"{sample_rate} Hz")

    if track.language and track.language != "und":
        parts.append(track.language)
    if track.title:
        parts.append(f'"{track.title}"')

    flags = []
    if track.is_default:
        flags.append("default")
    if track.is_forced:
        flags.append("forced")
    if flags:
        parts.append(f"({', '.join(flags)})")

    return " ".join(parts)


def format_attachment_line(attachment: AttachmentInfo) -> str:
    return (
        f"{attachment.file_name} ({attachment.mime_type}, "
        f"{format_size(attachment.size_bytes)})"
    )


def format_human(info: MediaInfo) -> str:
    """Format media info for terminal output.

    Tracks are grouped by type; within a group they keep the tool's order.
    """
    lines: list[str] = [f"File: {info.file_path}"]
    if info.container:
        lines.append(f"Container: {info.container}")
    if info.duration_seconds is not None:
        lines.append(f"Duration: {format_duration(info.duration_seconds)}")
    if info.size_bytes is not None:
        lines.append(f"Size: {format_size(info.size_bytes)}")
    lines.append("")

    lines.append("Tracks:")
    for track_type, title in _SECTION_TITLES.items():
        tracks = info.tracks_of_type(track_type)
        if tracks:
            lines.append(f"  {title}:")
            lines.extend(f"    {format_track_line(t)}" for t in tracks)
    if not info.tracks:
        lines.append("  (no tracks found)")

    if info.attachments:
        lines.append("")
        lines.append("Attachments:")
        lines.extend(f"  {format_attachment_line(a)}" for a in info.attachments)

    return "\n".join(lines)


def track_to_dict(track: TrackInfo) -> dict[str, Any]:
    return {
        "index": track.index,
        "id": track.id,
        "type": track.type.value,
        "codec": track.codec,
        "language": track.language,
        "title": track.title,
        "is_default": track.is_default,
        "is_forced": track.is_forced,
        "extra": dict(track.extra),
    }


def media_info_to_dict(info: MediaInfo) -> dict[str, Any]:
    """Convert MediaInfo to a JSON-serializable dict."""
    return {
        "file": info.file_path,
        "container": info.container,
        "duration_seconds": info.duration_seconds,
        "size_bytes": info.size_bytes,
        "tracks": [track_to_dict(t) for t in info.tracks],
        "attachments": [
            {
                "file_name": a.file_name,
                "mime_type": a.mime_type,
                "size_bytes": a.size_bytes,
            }
            for a in info.attachments
        ],
    }


def format_json(info: MediaInfo) -> str:
    return json.dumps(media_info_to_dict(info), indent=2)
