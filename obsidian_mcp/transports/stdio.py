"""
Standard-stream transport.

Runs the MCP server over line-delimited JSON-RPC on stdin/stdout.
"""

import asyncio

import anyio
import structlog
from mcp.server import Server
from mcp.server.stdio import stdio_server

from .base import Transport

logger = structlog.get_logger(__name__)


class StdioTransport(Transport):
    """Serves MCP on the process's standard streams.

    ``stdin`` and ``stdout`` default to the process streams; tests pass
    in-memory files instead.
    """

    def __init__(
        self,
        server: Server,
        stdin: anyio.AsyncFile[str] | None = None,
        stdout: anyio.AsyncFile[str] | None = None,
    ):
        super().__init__(server)
        self._stdin = stdin
        self._stdout = stdout
        self._task: asyncio.Task | None = None

    async def _serve(self) -> None:
        async with stdio_server(stdin=self._stdin, stdout=self._stdout) as (read_stream, write_stream):
            await self.server.run(read_stream, write_stream, self.server.create_initialization_options())

    async def _start(self) -> None:
        self._task = asyncio.create_task(self._serve(), name="mcp-stdio")
        logger.info("transport_started", mode="stdio")

    async def _stop(self) -> None:
        # The stdin reader has no close primitive; it ends at EOF or process exit.
        if self._task is not None:
            self._task.cancel()
            self._task = None
        logger.info("transport_stopped", mode="stdio")

    async def wait_closed(self) -> None:
        task = self._task
        if task is None:
            return
        await asyncio.wait({task})
        if not task.cancelled():
            task.result()
