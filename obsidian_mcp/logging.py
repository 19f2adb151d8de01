"""
Logging configuration module for Obsidian MCP Server.

Configures structlog with appropriate processors for development.
All output goes to stderr: stdout carries the MCP stream in stdio mode.
"""

import logging
import sys

import structlog


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog for the application.

    Uses ConsoleRenderer for readable colored output in development.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ...). Unknown names fall back to INFO.
    """
    min_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Get a configured structlog logger.

    Args:
        name: Optional logger name (typically __name__)

    Returns:
        A bound structlog logger
    """
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()
