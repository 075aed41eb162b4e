"""Media introspection for kitsub.

Runs ffprobe or mkvmerge and normalizes their JSON into one model:

- MediaInfo, TrackInfo, AttachmentInfo, TrackType: canonical model
- parse_ffprobe_output, parse_mkvmerge_output: schema mapping functions
- FFprobeClient, MkvmergeClient: tool wrappers
- format_human, format_json: output formatters
"""

from kitsub.introspector.ffprobe import FFprobeClient
from kitsub.introspector.formatters import (
    format_human,
    format_json,
    format_track_line,
    media_info_to_dict,
)
from kitsub.introspector.interface import (
    ExternalToolError,
    MediaInfoParseError,
    MediaIntrospectionError,
    ProbeClient,
)
from kitsub.introspector.mkvmerge import MkvmergeClient
from kitsub.introspector.models import (
    AttachmentInfo,
    MediaInfo,
    TrackInfo,
    TrackType,
    select_track,
)
from kitsub.introspector.parsers import parse_ffprobe_output, parse_mkvmerge_output

__all__ = [
    "AttachmentInfo",
    "ExternalToolError",
    "FFprobeClient",
    "MediaInfo",
    "MediaInfoParseError",
    "MediaIntrospectionError",
    "MkvmergeClient",
    "ProbeClient",
    "TrackInfo",
    "TrackType",
    "format_human",
    "format_json",
    "format_track_line",
    "media_info_to_dict",
    "parse_ffprobe_output",
    "parse_mkvmerge_output",
    "select_track",
]
