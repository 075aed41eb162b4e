"""Packaged tool manifest and per-platform tool archives."""
