"""
Pytest configuration and fixtures for obsidian-mcp tests.
"""

import socket
from pathlib import Path

import httpx
import pytest

from obsidian_mcp.client import ObsidianClient
from obsidian_mcp.models import HttpConfig, HttpsConfig, ObsidianConfig, StdioConfig

ENV_VARS = (
    "MCP_TRANSPORT",
    "OBSIDIAN_API_KEY",
    "OBSIDIAN_PROTOCOL",
    "OBSIDIAN_HOST",
    "OBSIDIAN_PORT",
    "MCP_HTTP_PORT",
    "MCP_HTTPS_PORT",
    "MCP_SSL_CERT",
    "MCP_SSL_KEY",
    "MCP_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test from an environment without any server variables."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def api_key_env(monkeypatch):
    monkeypatch.setenv("OBSIDIAN_API_KEY", "test-key")


@pytest.fixture
def ssl_files(tmp_path: Path) -> tuple[Path, Path]:
    """Create dummy certificate and key files (existence only, not valid PEM)."""
    cert_path = tmp_path / "test-cert.pem"
    key_path = tmp_path / "test-key.pem"
    cert_path.write_text("dummy cert", encoding="utf-8")
    key_path.write_text("dummy key", encoding="utf-8")
    return cert_path, key_path


@pytest.fixture
def free_port() -> int:
    """Return a TCP port that was free a moment ago."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def obsidian_config() -> ObsidianConfig:
    return ObsidianConfig(api_key="test-key", protocol="http", host="localhost", port=27123)


@pytest.fixture
def stdio_config(obsidian_config) -> StdioConfig:
    return StdioConfig(obsidian=obsidian_config)


@pytest.fixture
def http_config(obsidian_config, free_port) -> HttpConfig:
    return HttpConfig(obsidian=obsidian_config, port=free_port)


@pytest.fixture
def https_config(obsidian_config, ssl_files, free_port) -> HttpsConfig:
    cert_path, key_path = ssl_files
    return HttpsConfig(obsidian=obsidian_config, port=free_port, cert_path=cert_path, key_path=key_path)


class RecordingHandler:
    """httpx MockTransport handler that records requests and replays one response."""

    def __init__(self, response: httpx.Response | None = None):
        self.response = response if response is not None else httpx.Response(204)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def make_client(obsidian_config):
    """Build an ObsidianClient whose requests go to a RecordingHandler."""

    def factory(response: httpx.Response | None = None) -> tuple[ObsidianClient, RecordingHandler]:
        handler = RecordingHandler(response)
        client = ObsidianClient(obsidian_config, transport=httpx.MockTransport(handler))
        return client, handler

    return factory
