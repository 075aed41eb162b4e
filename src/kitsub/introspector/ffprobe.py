"""ffprobe client."""

from pathlib import Path

from kitsub.introspector.interface import ProbeClient
from kitsub.introspector.models import MediaInfo
from kitsub.introspector.parsers import parse_ffprobe_output


class FFprobeClient(ProbeClient):
    """Extracts stream-level metadata from media files using ffprobe."""

    tool_name = "ffprobe"

    def build_command(self, path: Path) -> list[str]:
        return [
            self.executable,
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_streams",
            "-show_format",
            str(path),
        ]

    def parse(self, path: Path, output: str) -> MediaInfo:
        return parse_ffprobe_output(str(path), output)

    def probe(self, path: Path) -> MediaInfo:
        """Probe a media file.

        Args:
            path: Media file to inspect.

        Returns:
            Canonical media description (no attachments).

        Raises:
            ExternalToolError: If ffprobe exits non-zero.
            MediaInfoParseError: If ffprobe output cannot be parsed.
            MediaIntrospectionError: If the file or ffprobe is missing.
        """
        return self.get_media_info(path)
