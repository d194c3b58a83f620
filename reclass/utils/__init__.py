"""
Utility modules for ReClass.
"""

from .logging import (
    LogLevel,
    Logger,
    StandardLogger,
    get_logger,
    configure_logging,
)

__all__ = [
    "LogLevel",
    "Logger",
    "StandardLogger",
    "get_logger",
    "configure_logging",
]
