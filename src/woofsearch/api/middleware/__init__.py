"""API middleware components."""

from .logging import LoggingMiddleware, configure_logging

__all__ = [
    "LoggingMiddleware",
    "configure_logging",
]
