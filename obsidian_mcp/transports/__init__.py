"""Transports for Obsidian MCP Server."""

from .base import Transport, TransportState
from .factory import create_transport
from .http import HttpTransport
from .stdio import StdioTransport

__all__ = [
    "HttpTransport",
    "StdioTransport",
    "Transport",
    "TransportState",
    "create_transport",
]
