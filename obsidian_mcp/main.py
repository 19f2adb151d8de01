"""
Main entry point for Obsidian MCP Server.

This module provides the main() function and the process lifecycle: validate
the environment, probe Obsidian, start the configured transport, and stop it
on SIGINT/SIGTERM or when the channel closes.
"""

import asyncio
import contextlib
import os
import signal
import sys

from .config import EnvironmentSettings, validate_config
from .connectivity import check_obsidian_connection
from .errors import ConfigurationError, log_error_and_exit
from .logging import configure_logging, get_logger
from .models import Config
from .tools import create_server
from .transports import create_transport

logger = get_logger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


async def serve(config: Config, shutdown: asyncio.Event | None = None) -> None:
    """Run the server until ``shutdown`` is set, a signal arrives, or the channel closes.

    The transport is owned by this coroutine; signal handlers only reach it
    through the ``shutdown`` event.
    """
    if shutdown is None:
        shutdown = asyncio.Event()

    try:
        await check_obsidian_connection(config.obsidian)
    except ConfigurationError as e:
        logger.warning("obsidian_unreachable", error=e.message, solution=e.solution)

    server = create_server(config)
    transport = create_transport(config, server)

    loop = asyncio.get_running_loop()
    installed = []
    for sig in SHUTDOWN_SIGNALS:
        # add_signal_handler is unavailable on Windows event loops
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, shutdown.set)
            installed.append(sig)

    try:
        await transport.start()
        logger.info("server_running", mode=config.mode)

        shutdown_wait = asyncio.create_task(shutdown.wait())
        channel_wait = asyncio.create_task(transport.wait_closed())
        try:
            await asyncio.wait({shutdown_wait, channel_wait}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            shutdown_wait.cancel()
            channel_wait.cancel()

        if channel_wait.done() and not channel_wait.cancelled():
            channel_wait.result()
            logger.info("channel_closed", mode=config.mode)
        else:
            logger.info("shutdown_requested", mode=config.mode)
    finally:
        await transport.stop()
        for sig in installed:
            loop.remove_signal_handler(sig)


def main():
    """Main entry point."""
    env = EnvironmentSettings()
    configure_logging(env.mcp_log_level)

    try:
        config = validate_config(env)
        asyncio.run(serve(config))
    except Exception as e:
        log_error_and_exit(e)

    logger.info("server_stopped")
    if config.mode == "stdio":
        # The stdin reader thread stays blocked until the next line or EOF and
        # interpreter shutdown would join it, so leave without waiting.
        sys.stdout.flush()
        sys.stderr.flush()
        os._exit(0)
    sys.exit(0)


if __name__ == "__main__":
    main()
