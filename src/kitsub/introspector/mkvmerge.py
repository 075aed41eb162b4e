"""mkvmerge identification client."""

from pathlib import Path

from kitsub.introspector.interface import ProbeClient
from kitsub.introspector.models import MediaInfo
from kitsub.introspector.parsers import parse_mkvmerge_output


class MkvmergeClient(ProbeClient):
    """Extracts track and attachment metadata using ``mkvmerge -J``."""

    tool_name = "mkvmerge"

    def build_command(self, path: Path) -> list[str]:
        return [self.executable, "-J", str(path)]

    def parse(self, path: Path, output: str) -> MediaInfo:
        return parse_mkvmerge_output(str(path), output)

    def identify(self, path: Path) -> MediaInfo:
        """Identify a media file, including its attachments.

        Raises:
            ExternalToolError: If mkvmerge exits non-zero.
            MediaInfoParseError: If mkvmerge output cannot be parsed.
            MediaIntrospectionError: If the file or mkvmerge is missing.
        """
        return self.get_media_info(path)
