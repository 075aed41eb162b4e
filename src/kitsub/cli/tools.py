"""``kitsub tools`` commands: status, clean and extract."""

import json
import logging
from typing import Any

import click

from kitsub.cli.exit_codes import ExitCode
from kitsub.cli.tooling import ToolingContext
from kitsub.tools.errors import IntegrityError, ProvisioningError
from kitsub.tools.models import ToolPathsResolved, ToolsetStatus

logger = logging.getLogger(__name__)


def _status_to_dict(
    resolved: ToolPathsResolved, status: ToolsetStatus
) -> dict[str, Any]:
    return {
        "rid": resolved.runtime_rid,
        "toolset_version": resolved.toolset_version,
        "tools": resolved.summary(),
        "in_manifest": status.in_manifest,
        "bundled": {
            "directory": str(status.bundled_directory),
            "present": status.bundled_present,
        },
        "cache": {
            "directory": str(status.cache_directory),
            "present": status.cache_present,
            "verified": status.cache_verified,
            "installed_versions": list(status.installed_versions),
        },
        "unpinned_tools": list(status.unpinned_tools),
    }


def _format_cache_state(status: ToolsetStatus) -> str:
    if not status.cache_present:
        return "missing"
    return "verified" if status.cache_verified else "present, failed verification"


def _format_status(resolved: ToolPathsResolved, status: ToolsetStatus) -> str:
    lines = [
        f"RID: {resolved.runtime_rid}",
        f"Toolset version: {resolved.toolset_version}",
        "",
    ]
    width = max(len(name) for name, _ in resolved.items())
    for name, res in resolved.items():
        lines.append(f"  {name:<{width}}  {res.source.value:<9}  {res.path}")

    lines.append("")
    if not status.in_manifest:
        lines.append(f"No packaged toolset for {status.rid}")
    bundled_state = "present" if status.bundled_present else "missing"
    lines.append(f"Bundled: {status.bundled_directory} ({bundled_state})")
    lines.append(f"Cache: {status.cache_directory} ({_format_cache_state(status)})")
    if status.installed_versions:
        lines.append(f"Cached versions: {', '.join(status.installed_versions)}")
    if status.unpinned_tools:
        lines.append(
            f"Unpinned hashes: {len(status.unpinned_tools)} "
            f"({', '.join(status.unpinned_tools)})"
        )
    return "\n".join(lines)


@click.group("tools")
def tools_group() -> None:
    """Inspect and manage bundled media tools."""


@tools_group.command("status")
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON")
@click.pass_obj
def status_command(obj: dict, json_output: bool) -> None:
    """Show which tool binaries will be used and where they come from."""
    tooling: ToolingContext = obj["tooling"]
    try:
        resolved = tooling.resolve()
    except IntegrityError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(ExitCode.INTEGRITY_ERROR) from e

    status = tooling.bundle_manager.describe(resolved.runtime_rid)
    if json_output:
        click.echo(json.dumps(_status_to_dict(resolved, status), indent=2))
    else:
        click.echo(_format_status(resolved, status))


@tools_group.command("clean")
@click.pass_obj
def clean_command(obj: dict) -> None:
    """Delete all extracted toolsets."""
    tooling: ToolingContext = obj["tooling"]
    cache_root = tooling.cache_paths.get_cache_root()
    try:
        removed = tooling.bundle_manager.clean_cache()
    except OSError as e:
        click.echo(f"Error: Could not delete {cache_root}: {e}", err=True)
        raise SystemExit(ExitCode.GENERAL_ERROR) from e

    if removed:
        click.echo(f"Deleted tools cache: {cache_root}")
    else:
        click.echo(f"Tools cache does not exist: {cache_root}")


@tools_group.command("extract")
@click.option(
    "--rid",
    default=None,
    help="Platform identifier to extract (default: current platform).",
)
@click.pass_obj
def extract_command(obj: dict, rid: str | None) -> None:
    """Extract the packaged toolset into the cache and verify it."""
    tooling: ToolingContext = obj["tooling"]
    rid = rid or tooling.rid
    try:
        result = tooling.bundle_manager.ensure_extracted_toolset(rid)
    except IntegrityError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(ExitCode.INTEGRITY_ERROR) from e
    except ProvisioningError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(ExitCode.PROVISIONING_ERROR) from e

    click.echo(f"Tools for {rid} ready in {result.base_directory}")
