"""Logging module with structured logging."""

from juris.core.logging.setup import configure_logging


__all__ = [
    "configure_logging",
]
