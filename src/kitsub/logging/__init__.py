"""Logging setup and formatters for kitsub."""

from kitsub.logging.config import configure_logging
from kitsub.logging.handlers import JSONFormatter

__all__ = ["JSONFormatter", "configure_logging"]
