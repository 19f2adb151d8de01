"""
Error types for Obsidian MCP Server.

ConfigurationError covers everything the operator can fix (environment,
certificates, ports). ObsidianAPIError wraps non-2xx replies from the Local
REST API plugin.
"""

import sys
from typing import NoReturn

import structlog

logger = structlog.get_logger(__name__)


class ConfigurationError(Exception):
    """Raised when the server cannot start because of operator configuration."""

    def __init__(self, message: str, solution: str | None = None):
        super().__init__(message)
        self.message = message
        self.solution = solution


class ObsidianAPIError(Exception):
    """Raised when the Local REST API answers with an error status."""

    def __init__(self, message: str, status_code: int, error_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


def log_error_and_exit(error: BaseException) -> NoReturn:
    """Log a startup failure (with its solution, if any) and exit with status 1."""
    if isinstance(error, ConfigurationError):
        logger.error("server_start_failed", error=error.message, solution=error.solution)
    else:
        logger.error("server_start_failed", error=str(error), exc_info=error)
    sys.exit(1)
