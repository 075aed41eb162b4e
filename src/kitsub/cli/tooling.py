"""Construction of the tool provisioning services for a CLI invocation.

The manifest loader, cache paths, bundle manager and resolver are built
once per command from the merged configuration and passed down through
the click context.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from importlib.resources.abc import Traversable
from pathlib import Path

from kitsub.config.models import KitsubConfig
from kitsub.tools.bundle import ToolBundleManager
from kitsub.tools.cache_paths import ToolCachePaths
from kitsub.tools.manifest import ToolManifestLoader
from kitsub.tools.models import ToolPathsResolved
from kitsub.tools.resolver import ToolResolver
from kitsub.tools.runtime import get_runtime_rid
from kitsub.tools.startup_state import StartupStateStore


@dataclass
class ToolingContext:
    """Services shared by the commands of one invocation."""

    config: KitsubConfig
    cache_paths: ToolCachePaths
    bundle_manager: ToolBundleManager
    resolver: ToolResolver
    state_store: StartupStateStore
    rid: str

    def resolve(self) -> ToolPathsResolved:
        """Resolve all tools using the configured overrides."""
        return self.resolver.resolve_all(self.config.tool_paths.to_overrides())


def build_tooling(
    config: KitsubConfig,
    *,
    env: Mapping[str, str] | None = None,
    resource_root: Traversable | Path | None = None,
    bundled_root: Path | None = None,
    rid_provider: Callable[[], str] = get_runtime_rid,
) -> ToolingContext:
    """Wire up provisioning services from configuration.

    Args:
        config: Merged configuration.
        env: Environment mapping (defaults to os.environ).
        resource_root: Directory holding the manifest and archives
            (defaults to packaged data).
        bundled_root: Directory holding bundled ``<rid>/`` toolsets
            (defaults to ``tools/`` next to the interpreter).
        rid_provider: Returns the platform identifier.

    Returns:
        Ready-to-use tooling context.
    """
    options = config.tools.to_resolver_options()
    cache_paths = ToolCachePaths(cache_dir=options.tools_cache_directory, env=env)
    bundle_manager = ToolBundleManager(
        ToolManifestLoader(resource_root),
        cache_paths,
        bundled_root=bundled_root,
        lock_timeout=config.tools.lock_timeout_seconds,
    )
    resolver = ToolResolver(bundle_manager, options, rid_provider=rid_provider)
    return ToolingContext(
        config=config,
        cache_paths=cache_paths,
        bundle_manager=bundle_manager,
        resolver=resolver,
        state_store=StartupStateStore(cache_paths.get_state_dir()),
        rid=rid_provider(),
    )
