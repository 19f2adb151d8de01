"""
Transport base class.

A transport moves linearly through created -> running -> stopped and cannot be
restarted. Subclasses implement ``_start``, ``_stop`` and ``wait_closed``.
"""

from abc import ABC, abstractmethod
from enum import Enum

from mcp.server import Server


class TransportState(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"


class Transport(ABC):
    """One communication channel bound to an MCP server."""

    def __init__(self, server: Server):
        self.server = server
        self.state = TransportState.CREATED

    @property
    def is_running(self) -> bool:
        return self.state is TransportState.RUNNING

    async def start(self) -> None:
        """Open the channel.

        Raises:
            RuntimeError: If the transport was already started.
            ConfigurationError: If the channel cannot be opened because of configuration.
        """
        if self.state is not TransportState.CREATED:
            raise RuntimeError(f"Transport cannot be started from state '{self.state.value}'")
        await self._start()
        self.state = TransportState.RUNNING

    async def stop(self) -> None:
        """Close the channel. A no-op unless the transport is running."""
        if self.state is not TransportState.RUNNING:
            return
        try:
            await self._stop()
        finally:
            self.state = TransportState.STOPPED

    @abstractmethod
    async def _start(self) -> None:
        ...

    @abstractmethod
    async def _stop(self) -> None:
        ...

    @abstractmethod
    async def wait_closed(self) -> None:
        """Wait until the channel ends without being stopped (e.g. stdin reaches EOF)."""
