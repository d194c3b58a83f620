"""
Logging Utilities

This module provides the leveled logger handed to the file exchange layer and
logging setup for applications embedding the library.
"""

import sys
import logging
import logging.config
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional

import structlog


class LogLevel(str, Enum):
    """Log levels"""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_STDLIB_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class Logger(ABC):
    """
    Leveled message sink

    Readers, writers and custom node converters report lossy conversions
    through this interface. Implementations must not raise.
    """

    @abstractmethod
    def log(self, level: LogLevel, message: str) -> None:
        """
        Record a message

        Args:
            level: Message level
            message: Message text
        """
        pass


class StandardLogger(Logger):
    """Logger forwarding to a standard library logger"""

    def __init__(self, name: str = "reclass"):
        self._logger = logging.getLogger(name)

    def log(self, level: LogLevel, message: str) -> None:
        self._logger.log(_STDLIB_LEVELS.get(level, logging.INFO), message)


def get_logger(name: str) -> Any:
    """
    Get a structlog logger for the specified name

    Args:
        name: Logger name (usually module or component name)

    Returns:
        Bound structlog logger
    """
    return structlog.get_logger(name)


def configure_logging(
    level: str = "INFO", format_string: Optional[str] = None, use_structlog: bool = True
) -> None:
    """
    Configure logging for ReClass components

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string (for standard logging)
        use_structlog: Whether to route structlog through its console renderer
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=format_string or "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if use_structlog:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        # Hand the event dict to the stdlib formatter as a plain message
        processors.append(structlog.processors.KeyValueRenderer(key_order=["event"]))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
