"""Pure parsing functions for probe tool JSON output.

ffprobe reports streams (``streams[]`` plus ``format``); mkvmerge reports
container tracks (``tracks[]``, ``container``, ``attachments[]``). Each
schema has its own mapping function, and both produce the same MediaInfo.
No I/O happens here.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from kitsub.introspector.interface import MediaInfoParseError
from kitsub.introspector.models import (
    EXTRA_CHANNELS,
    EXTRA_RESOLUTION,
    EXTRA_SAMPLE_RATE,
    AttachmentInfo,
    MediaInfo,
    TrackInfo,
    TrackType,
)

logger = logging.getLogger(__name__)

FFPROBE_TRACK_TYPES: dict[str, TrackType] = {
    "video": TrackType.VIDEO,
    "audio": TrackType.AUDIO,
    "subtitle": TrackType.SUBTITLE,
}

MKVMERGE_TRACK_TYPES: dict[str, TrackType] = {
    "video": TrackType.VIDEO,
    "audio": TrackType.AUDIO,
    "subtitles": TrackType.SUBTITLE,
}


def _load_object(tool: str, output: str) -> dict[str, Any]:
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise MediaInfoParseError(tool, f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MediaInfoParseError(tool, "top-level JSON value is not an object")
    return data


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _optional_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _optional_float(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def format_number(value: float | int) -> str:
    """Render a number as a decimal string without a trailing ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _required(tool: str, container: dict[str, Any], key: str, where: str) -> Any:
    if key not in container or container[key] is None:
        raise MediaInfoParseError(tool, f"{where} is missing '{key}'")
    return container[key]


# ---------------------------------------------------------------------------
# ffprobe
# ---------------------------------------------------------------------------


def parse_ffprobe_stream(stream: dict[str, Any]) -> TrackInfo | None:
    """Map one ffprobe stream to a TrackInfo.

    Returns:
        The track, or None for stream types that are not tracks
        (attachments, data streams).

    Raises:
        MediaInfoParseError: If ``index`` or ``codec_name`` is missing.
    """
    track_type = FFPROBE_TRACK_TYPES.get(str(stream.get("codec_type", "")))
    if track_type is None:
        logger.debug("Skipping ffprobe stream of type %s", stream.get("codec_type"))
        return None

    index = _optional_int(_required("ffprobe", stream, "index", "stream"))
    if index is None:
        raise MediaInfoParseError("ffprobe", "stream 'index' is not an integer")
    codec = str(_required("ffprobe", stream, "codec_name", f"stream {index}"))

    extra: dict[str, str] = {}
    if track_type == TrackType.VIDEO:
        width = _optional_int(stream.get("width"))
        height = _optional_int(stream.get("height"))
        if width is not None and height is not None:
            extra[EXTRA_RESOLUTION] = f"{width}x{height}"
    elif track_type == TrackType.AUDIO:
        channels = _optional_int(stream.get("channels"))
        if channels is not None:
            extra[EXTRA_CHANNELS] = str(channels)
        sample_rate = _optional_str(stream.get("sample_rate"))
        if sample_rate is not None:
            extra[EXTRA_SAMPLE_RATE] = sample_rate

    tags = _as_dict(stream.get("tags"))
    disposition = _as_dict(stream.get("disposition"))

    return TrackInfo(
        index=index,
        id=_optional_int(stream.get("id")),
        type=track_type,
        codec=codec,
        language=_optional_str(tags.get("language")),
        title=_optional_str(tags.get("title")),
        is_default=disposition.get("default") == 1,
        is_forced=disposition.get("forced") == 1,
        extra=extra,
    )


def parse_ffprobe_output(file_path: str, output: str) -> MediaInfo:
    """Normalize ffprobe ``-show_streams -show_format`` JSON.

    Args:
        file_path: File that was probed.
        output: ffprobe standard output.

    Returns:
        Canonical media description. ffprobe does not list attachments
        separately, so ``attachments`` is always empty.

    Raises:
        MediaInfoParseError: If the output is not valid JSON or a stream
            lacks required fields.
    """
    data = _load_object("ffprobe", output)
    streams = data.get("streams", [])
    if not isinstance(streams, list):
        raise MediaInfoParseError("ffprobe", "'streams' is not a list")

    tracks: list[TrackInfo] = []
    for stream in streams:
        if not isinstance(stream, dict):
            raise MediaInfoParseError("ffprobe", "stream entry is not an object")
        track = parse_ffprobe_stream(stream)
        if track is not None:
            tracks.append(track)

    fmt = _as_dict(data.get("format"))
    return MediaInfo(
        file_path=file_path,
        container=_optional_str(fmt.get("format_name")),
        duration_seconds=_optional_float(fmt.get("duration")),
        size_bytes=_optional_int(fmt.get("size")),
        tracks=tuple(tracks),
        attachments=(),
    )


# ---------------------------------------------------------------------------
# mkvmerge
# ---------------------------------------------------------------------------


def parse_mkvmerge_track(track: dict[str, Any]) -> TrackInfo | None:
    """Map one mkvmerge ``-J`` track to a TrackInfo.

    Returns:
        The track, or None for unknown track types (e.g. "buttons").

    Raises:
        MediaInfoParseError: If ``id`` or ``codec`` is missing.
    """
    track_type = MKVMERGE_TRACK_TYPES.get(str(track.get("type", "")))
    if track_type is None:
        logger.debug("Skipping mkvmerge track of type %s", track.get("type"))
        return None

    track_id = _optional_int(_required("mkvmerge", track, "id", "track"))
    if track_id is None:
        raise MediaInfoParseError("mkvmerge", "track 'id' is not an integer")
    codec = str(_required("mkvmerge", track, "codec", f"track {track_id}"))

    properties = _as_dict(track.get("properties"))
    extra: dict[str, str] = {}
    if track_type == TrackType.VIDEO:
        resolution = _optional_str(properties.get("pixel_dimensions"))
        if resolution is not None:
            extra[EXTRA_RESOLUTION] = resolution
    elif track_type == TrackType.AUDIO:
        channels = _optional_int(properties.get("audio_channels"))
        if channels is not None:
            extra[EXTRA_CHANNELS] = str(channels)
        frequency = _optional_float(properties.get("sampling_frequency"))
        if frequency is not None:
            extra[EXTRA_SAMPLE_RATE] = format_number(frequency)

    return TrackInfo(
        index=track_id,
        id=track_id,
        type=track_type,
        codec=codec,
        language=_optional_str(properties.get("language")),
        title=_optional_str(properties.get("track_name")),
        is_default=properties.get("default_track") is True,
        is_forced=properties.get("forced_track") is True,
        extra=extra,
    )


def parse_mkvmerge_attachment(attachment: dict[str, Any]) -> AttachmentInfo:
    """Map one mkvmerge attachment entry.

    Raises:
        MediaInfoParseError: If a required field is missing.
    """
    size = _optional_int(_required("mkvmerge", attachment, "size", "attachment"))
    if size is None:
        raise MediaInfoParseError("mkvmerge", "attachment 'size' is not an integer")
    return AttachmentInfo(
        file_name=str(_required("mkvmerge", attachment, "file_name", "attachment")),
        mime_type=str(_required("mkvmerge", attachment, "content_type", "attachment")),
        size_bytes=size,
    )


def parse_mkvmerge_output(file_path: str, output: str) -> MediaInfo:
    """Normalize mkvmerge ``-J`` identification JSON.

    Args:
        file_path: File that was identified.
        output: mkvmerge standard output.

    Returns:
        Canonical media description.

    Raises:
        MediaInfoParseError: If the output is not valid JSON or a track or
            attachment lacks required fields.
    """
    data = _load_object("mkvmerge", output)

    raw_tracks = data.get("tracks", [])
    raw_attachments = data.get("attachments", [])
    if not isinstance(raw_tracks, list):
        raise MediaInfoParseError("mkvmerge", "'tracks' is not a list")
    if not isinstance(raw_attachments, list):
        raise MediaInfoParseError("mkvmerge", "'attachments' is not a list")

    tracks: list[TrackInfo] = []
    for raw in raw_tracks:
        if not isinstance(raw, dict):
            raise MediaInfoParseError("mkvmerge", "track entry is not an object")
        track = parse_mkvmerge_track(raw)
        if track is not None:
            tracks.append(track)

    attachments: list[AttachmentInfo] = []
    for raw in raw_attachments:
        if not isinstance(raw, dict):
            raise MediaInfoParseError("mkvmerge", "attachment entry is not an object")
        attachments.append(parse_mkvmerge_attachment(raw))

    container = _as_dict(data.get("container"))
    duration_seconds = _optional_float(_as_dict(data.get("duration")).get("seconds"))
    if duration_seconds is None:
        # mkvmerge itself reports nanoseconds under container.properties
        nanoseconds = _optional_float(
            _as_dict(container.get("properties")).get("duration")
        )
        if nanoseconds is not None:
            duration_seconds = nanoseconds / 1_000_000_000

    return MediaInfo(
        file_path=file_path,
        container=_optional_str(container.get("type")),
        duration_seconds=duration_seconds,
        size_bytes=_optional_int(data.get("file_size")),
        tracks=tuple(tracks),
        attachments=tuple(attachments),
    )
