"""
Pydantic models for Obsidian MCP Server.

Contains the validated configuration records (one per transport mode) and the
Local REST API response shapes the server inspects.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

TransportMode = Literal["stdio", "http", "https"]
Protocol = Literal["http", "https"]
Period = Literal["daily", "weekly", "monthly", "quarterly", "yearly"]
PatchOperation = Literal["append", "prepend", "replace"]
TargetType = Literal["heading", "block", "frontmatter"]

TRANSPORT_MODES: tuple[str, ...] = ("stdio", "http", "https")
PROTOCOLS: tuple[str, ...] = ("http", "https")
PERIODS: tuple[str, ...] = ("daily", "weekly", "monthly", "quarterly", "yearly")
PATCH_OPERATIONS: tuple[str, ...] = ("append", "prepend", "replace")
TARGET_TYPES: tuple[str, ...] = ("heading", "block", "frontmatter")


class ObsidianConfig(BaseModel):
    """Connection parameters for the Local REST API plugin."""

    model_config = ConfigDict(frozen=True)

    api_key: str
    protocol: Protocol = "http"
    host: str = "localhost"
    port: int = 27123

    @property
    def base_url(self) -> str:
        return f"{self.protocol}://{self.host}:{self.port}"


class StdioConfig(BaseModel):
    """Configuration for the standard-stream transport."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["stdio"] = "stdio"
    obsidian: ObsidianConfig


class HttpConfig(BaseModel):
    """Configuration for the plain HTTP transport."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["http"] = "http"
    obsidian: ObsidianConfig
    port: int


class HttpsConfig(BaseModel):
    """Configuration for the HTTPS transport."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["https"] = "https"
    obsidian: ObsidianConfig
    port: int
    cert_path: Path
    key_path: Path


Config = StdioConfig | HttpConfig | HttpsConfig


class ObsidianVersions(BaseModel):
    """Version block of the status endpoint."""

    obsidian: str = ""
    plugin: str = Field(default="", alias="self")


class ObsidianStatus(BaseModel):
    """Response of ``GET /`` on the Local REST API."""

    status: str = ""
    service: str = ""
    authenticated: bool = False
    versions: ObsidianVersions = Field(default_factory=ObsidianVersions)
