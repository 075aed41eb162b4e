"""Tool path resolution.

Combines explicit overrides, bundled or cached toolsets, and PATH lookup
into one resolution per tool. Each tool is resolved independently, in
this order:

1. A non-empty override for the tool (used verbatim, made absolute).
2. PATH lookup, when ``prefer_path`` is set.
3. The bundled toolset, then the extracted toolset, when
   ``prefer_bundled`` is set.
4. PATH lookup, and finally the bare tool name.

Resolution never fails for "nothing found"; the last tier degrades to the
bare tool name and relies on the operating system to find it.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path

from kitsub.tools.bundle import ToolBundleManager
from kitsub.tools.models import (
    TOOL_NAMES,
    ToolBundleLocation,
    ToolBundleResult,
    ToolPathResolution,
    ToolPaths,
    ToolPathsResolved,
    ToolResolverOptions,
    ToolSource,
)
from kitsub.tools.runtime import executable_extensions, get_runtime_rid

logger = logging.getLogger(__name__)


def find_on_path(
    name: str,
    path_env: str | None = None,
    extensions: list[str] | None = None,
) -> str | None:
    """Search PATH directories for an executable.

    Each directory is checked, in PATH order, for the bare name and then for
    the name with each executable extension appended (lowercased, in the
    order given).

    Args:
        name: Tool name (e.g., "ffprobe").
        path_env: PATH value to search. Defaults to the PATH environment
            variable.
        extensions: Extensions to try. Defaults to PATHEXT on Windows and
            none elsewhere.

    Returns:
        Absolute path of the first match, or None.
    """
    if path_env is None:
        path_env = os.environ.get("PATH", "")
    if extensions is None:
        extensions = executable_extensions()

    candidates = [name]
    for ext in extensions:
        ext = ext.strip().lower()
        if ext and not name.lower().endswith(ext):
            candidates.append(name + ext)

    for directory in path_env.split(os.pathsep):
        directory = directory.strip().strip('"')
        if not directory:
            continue
        for candidate in candidates:
            full_path = os.path.join(directory, candidate)
            if os.path.isfile(full_path):
                return os.path.abspath(full_path)
    return None


class _ToolsetLookup:
    """Lazily consults the bundle manager once per resolve_all call."""

    def __init__(self, bundle_manager: ToolBundleManager, rid: str) -> None:
        self._bundle_manager = bundle_manager
        self._rid = rid
        self._resolved = False
        self._result: ToolBundleResult | None = None

    def get(self) -> ToolBundleResult | None:
        if not self._resolved:
            self._resolved = True
            self._result = self._lookup()
        return self._result

    def _lookup(self) -> ToolBundleResult | None:
        bundled = self._bundle_manager.try_get_bundled_toolset(self._rid)
        if bundled is not None:
            return bundled
        # Soft provisioning failures come back as None; IntegrityError propagates
        return self._bundle_manager.try_get_extracted_toolset(self._rid)


class ToolResolver:
    """Resolves every tool to a path with its provenance."""

    def __init__(
        self,
        bundle_manager: ToolBundleManager,
        options: ToolResolverOptions | None = None,
        rid_provider: Callable[[], str] = get_runtime_rid,
        path_env: str | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            bundle_manager: Source of bundled and extracted toolsets.
            options: Resolution preferences. Defaults to prefer bundled.
            rid_provider: Returns the platform identifier to resolve for.
            path_env: PATH value for lookups. Defaults to the PATH
                environment variable at resolution time.
        """
        self._bundle_manager = bundle_manager
        self._options = options or ToolResolverOptions()
        self._rid_provider = rid_provider
        self._path_env = path_env

    @property
    def options(self) -> ToolResolverOptions:
        return self._options

    def resolve_all(self, overrides: ToolPaths | None = None) -> ToolPathsResolved:
        """Resolve all four tools.

        Args:
            overrides: Optional per-tool override paths. Empty or
                whitespace-only values count as absent.

        Returns:
            Resolution for each tool with its source.

        Raises:
            IntegrityError: If a cached toolset had to be extracted and
                failed verification.
        """
        overrides = overrides or ToolPaths()
        rid = self._rid_provider()
        toolset = _ToolsetLookup(self._bundle_manager, rid)

        resolutions = {
            name: self._resolve_tool(name, overrides.get(name), toolset)
            for name in TOOL_NAMES
        }

        for name in TOOL_NAMES:
            res = resolutions[name]
            logger.info("Resolved %s => %s (%s)", name, res.path, res.source.value)

        return ToolPathsResolved(
            runtime_rid=rid,
            toolset_version=self._bundle_manager.manifest.toolset_version,
            **resolutions,
        )

    def _resolve_tool(
        self,
        name: str,
        override: str | None,
        toolset: _ToolsetLookup,
    ) -> ToolPathResolution:
        if override is not None and override.strip():
            path = str(Path(override.strip()).expanduser().absolute())
            if not os.path.isfile(path):
                logger.warning("Override for %s does not exist: %s", name, path)
            return ToolPathResolution(path, ToolSource.OVERRIDE)

        if self._options.prefer_path:
            found = find_on_path(name, self._path_env)
            if found is not None:
                return ToolPathResolution(found, ToolSource.PATH)

        if self._options.prefer_bundled:
            result = toolset.get()
            if result is not None:
                path = result.paths.get(name)
                if path:
                    source = (
                        ToolSource.BUNDLED
                        if result.location == ToolBundleLocation.BUNDLED
                        else ToolSource.EXTRACTED
                    )
                    return ToolPathResolution(path, source)

        found = find_on_path(name, self._path_env)
        if found is not None:
            return ToolPathResolution(found, ToolSource.PATH)

        logger.warning(
            "%s not found in bundled tools, cache, or PATH; using bare name", name
        )
        return ToolPathResolution(name, ToolSource.PATH)
