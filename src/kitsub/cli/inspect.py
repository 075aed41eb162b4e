"""``kitsub inspect`` command."""

import logging
from pathlib import Path

import click

from kitsub.cli.exit_codes import ExitCode
from kitsub.cli.tooling import ToolingContext
from kitsub.introspector import (
    ExternalToolError,
    FFprobeClient,
    MediaInfoParseError,
    MediaIntrospectionError,
    MkvmergeClient,
    format_human,
    format_json,
)
from kitsub.tools.errors import IntegrityError

logger = logging.getLogger(__name__)


@click.command("inspect")
@click.argument("file", type=click.Path(exists=False, path_type=Path))
@click.option(
    "--provider",
    type=click.Choice(["ffprobe", "mkvmerge"]),
    default="mkvmerge",
    help="Tool used to read the file (default: mkvmerge)",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["human", "json"]),
    default="human",
    help="Output format (default: human)",
)
@click.pass_obj
def inspect_command(
    obj: dict, file: Path, provider: str, output_format: str
) -> None:
    """Inspect a media file and display its tracks and attachments.

    FILE is the path to the media file to inspect.
    """
    if not file.exists():
        click.echo(f"Error: File not found: {file}", err=True)
        raise SystemExit(ExitCode.TARGET_NOT_FOUND)

    tooling: ToolingContext = obj["tooling"]
    try:
        resolved = tooling.resolve()
    except IntegrityError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(ExitCode.INTEGRITY_ERROR) from e

    tool_path = resolved.get(provider).path
    client = (
        FFprobeClient(tool_path) if provider == "ffprobe" else MkvmergeClient(tool_path)
    )

    try:
        info = client.get_media_info(file)
    except ExternalToolError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(ExitCode.TOOL_FAILED) from e
    except MediaInfoParseError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(ExitCode.PARSE_ERROR) from e
    except MediaIntrospectionError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(ExitCode.GENERAL_ERROR) from e

    if output_format == "json":
        click.echo(format_json(info))
    else:
        click.echo(format_human(info))
