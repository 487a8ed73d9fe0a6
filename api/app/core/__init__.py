"""Core module for configuration, logging and request context."""

from .config import Settings, get_settings
from .logging_config import configure_logging, get_logger
from .context import RequestContextMiddleware

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "RequestContextMiddleware",
]
