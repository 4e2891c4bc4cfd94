"""Utils module - Logging and utility functions"""

from .logging import setup_logging, get_logger, LogContext, ProgressLogger

__all__ = [
    "setup_logging",
    "get_logger",
    "LogContext",
    "ProgressLogger",
]
