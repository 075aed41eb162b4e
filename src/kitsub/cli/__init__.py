"""Command-line interface for kitsub."""

import logging
from pathlib import Path

import click

from kitsub import __version__
from kitsub.cli.exit_codes import ExitCode
from kitsub.cli.tooling import build_tooling
from kitsub.config import build_logging_config, get_config
from kitsub.logging import configure_logging
from kitsub.tools.errors import ConfigurationError
from kitsub.tools.startup_state import run_startup_check

logger = logging.getLogger(__name__)

# Commands that manage the toolset themselves skip the update notice
_NO_STARTUP_CHECK = frozenset({"tools"})


def _tool_path_option(name: str):
    return click.option(
        f"--{name}",
        f"{name}_path",
        type=click.Path(path_type=Path, dir_okay=False),
        default=None,
        help=f"Use this {name} executable (overrides all other sources).",
    )


@click.group()
@click.version_option(version=__version__, prog_name="kitsub")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: warning).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Write logs to this file instead of stderr.",
)
@click.option("--log-json", is_flag=True, default=False, help="Use JSON log format.")
@click.option(
    "--tools-cache-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory for extracted toolsets.",
)
@_tool_path_option("ffmpeg")
@_tool_path_option("ffprobe")
@_tool_path_option("mkvmerge")
@_tool_path_option("mkvpropedit")
@click.option(
    "--prefer-path",
    is_flag=True,
    default=False,
    help="Look for tools on PATH before bundled or cached tools.",
)
@click.option(
    "--no-bundled",
    is_flag=True,
    default=False,
    help="Ignore bundled and cached tools.",
)
@click.pass_context
def main(
    ctx: click.Context,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
    tools_cache_dir: Path | None,
    ffmpeg_path: Path | None,
    ffprobe_path: Path | None,
    mkvmerge_path: Path | None,
    mkvpropedit_path: Path | None,
    prefer_path: bool,
    no_bundled: bool,
) -> None:
    """Kitsub - inspect media files with bundled or system media tools."""
    ctx.ensure_object(dict)

    try:
        config = get_config(
            ffmpeg_path=ffmpeg_path,
            ffprobe_path=ffprobe_path,
            mkvmerge_path=mkvmerge_path,
            mkvpropedit_path=mkvpropedit_path,
            cache_dir=tools_cache_dir,
            prefer_bundled=False if no_bundled else None,
            prefer_path=True if prefer_path else None,
        )
        logging_config = build_logging_config(
            config.logging,
            level=log_level,
            file=log_file,
            json_output=log_json,
        )
    except (ConfigurationError, ValueError) as e:
        click.echo(f"Error: Invalid configuration: {e}", err=True)
        ctx.exit(ExitCode.CONFIG_ERROR)

    configure_logging(logging_config)
    ctx.obj["config"] = config

    # Preserve tooling injected by tests
    if "tooling" not in ctx.obj:
        ctx.obj["tooling"] = build_tooling(config)

    if ctx.invoked_subcommand and ctx.invoked_subcommand not in _NO_STARTUP_CHECK:
        tooling = ctx.obj["tooling"]
        run_startup_check(
            tooling.state_store,
            tooling.bundle_manager,
            tooling.rid,
            interval_hours=config.tools.check_interval_hours,
        )


def _register_commands() -> None:
    from kitsub.cli.inspect import inspect_command
    from kitsub.cli.tools import tools_group

    main.add_command(inspect_command)
    main.add_command(tools_group)


_register_commands()
