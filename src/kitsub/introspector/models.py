"""Canonical media description.

Both probe tools (ffprobe and mkvmerge) are normalized into these types, so
nothing downstream needs to know which tool produced the data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# Fixed keys used in TrackInfo.extra regardless of source tool
EXTRA_RESOLUTION = "resolution"
EXTRA_CHANNELS = "channels"
EXTRA_SAMPLE_RATE = "sampleRate"


class TrackType(Enum):
    """Category of a media track."""

    VIDEO = "video"
    AUDIO = "audio"
    SUBTITLE = "subtitle"


@dataclass(frozen=True)
class AttachmentInfo:
    """A file embedded in a media container (fonts, cover art)."""

    file_name: str
    mime_type: str
    size_bytes: int


@dataclass(frozen=True)
class TrackInfo:
    """One track, in the order the probing tool reported it.

    Attributes:
        index: Position reported by the tool (ffprobe stream index, or
            mkvmerge track id).
        id: Container-specific track identifier, when numeric.
        type: Track category.
        codec: Codec name as reported by the tool.
        language: Language tag, if any.
        title: Track title, if any.
        is_default: Default disposition flag.
        is_forced: Forced disposition flag.
        extra: Tool-independent details keyed by ``resolution``,
            ``channels`` and ``sampleRate``.
    """

    index: int
    type: TrackType
    codec: str
    id: int | None = None
    language: str | None = None
    title: str | None = None
    is_default: bool = False
    is_forced: bool = False
    extra: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class MediaInfo:
    """Container-level description of a media file."""

    file_path: str
    container: str | None = None
    duration_seconds: float | None = None
    size_bytes: int | None = None
    tracks: tuple[TrackInfo, ...] = ()
    attachments: tuple[AttachmentInfo, ...] = ()

    def tracks_of_type(self, track_type: TrackType) -> list[TrackInfo]:
        return [t for t in self.tracks if t.type == track_type]


def select_track(
    info: MediaInfo, track_type: TrackType, selector: str
) -> TrackInfo | None:
    """Pick a track by number, language or title.

    A numeric selector matches a track's index or id. Any other selector
    matches the language exactly or a substring of the title, both
    case-insensitively. The first match in track order wins.

    Args:
        info: Media description to search.
        track_type: Only tracks of this type are considered.
        selector: Number, language code, or title fragment.

    Returns:
        The matching track, or None.
    """
    candidates = info.tracks_of_type(track_type)
    selector = selector.strip()

    try:
        number = int(selector)
    except ValueError:
        number = None

    if number is not None:
        return next(
            (t for t in candidates if t.index == number or t.id == number), None
        )

    wanted = selector.casefold()
    for track in candidates:
        if track.language and track.language.strip() and (
            track.language.casefold() == wanted
        ):
            return track
        if track.title and track.title.strip() and wanted in track.title.casefold():
            return track
    return None
