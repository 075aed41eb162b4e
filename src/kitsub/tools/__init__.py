"""External tool discovery and provisioning.

Finds ffmpeg, ffprobe, mkvmerge and mkvpropedit for the running platform:

- manifest: packaged description of toolsets per platform identifier
- cache_paths / locking: on-disk cache layout and the extraction lock
- bundle: bundled and cached toolsets, extracted on demand
- resolver: override > bundled/cached > PATH resolution with provenance
- startup_state: throttled "tool updates available" notice

Import from the submodules directly; kitsub.config depends on
kitsub.tools.models and kitsub.tools.errors, so nothing is re-exported here.
"""
