"""
Core infrastructure shared by the adapter services.

Only the logging helpers are re-exported here; :mod:`.context` depends on the
API client and is imported explicitly by the layers that need it.
"""

from .logging import bind_context, configure_logging, get_logger, log_progress

__all__ = [
    "bind_context",
    "configure_logging",
    "get_logger",
    "log_progress",
]
