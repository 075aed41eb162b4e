"""Kitsub - subtitle and media toolkit built on external media tools."""

__version__ = "0.1.0"
