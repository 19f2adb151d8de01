"""
Transport factory.
"""

from typing import assert_never

from mcp.server import Server

from ..models import Config, HttpConfig, HttpsConfig, StdioConfig
from .base import Transport
from .http import HttpTransport
from .stdio import StdioTransport


def create_transport(config: Config, server: Server) -> Transport:
    """Create the transport matching ``config.mode``.

    http and https share HttpTransport; https additionally loads a certificate.
    """
    if isinstance(config, StdioConfig):
        return StdioTransport(server)
    if isinstance(config, (HttpConfig, HttpsConfig)):
        return HttpTransport(server, config)
    assert_never(config)
