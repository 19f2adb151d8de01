"""
Configuration module for Obsidian MCP Server.

Uses pydantic-settings to read the raw environment, then validates it into one
of the transport-specific configuration records in ``models``.

Environment variables:
- MCP_TRANSPORT: stdio (default), http or https
- OBSIDIAN_API_KEY: API key of the Local REST API plugin (required)
- OBSIDIAN_PROTOCOL: http (default) or https
- OBSIDIAN_HOST: defaults to localhost
- OBSIDIAN_PORT: defaults to 27123; values that are not numbers fall back to the default
- MCP_HTTP_PORT: required in http mode
- MCP_HTTPS_PORT, MCP_SSL_CERT, MCP_SSL_KEY: required in https mode
- MCP_LOG_LEVEL: log level, defaults to INFO
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError
from .models import (
    PROTOCOLS,
    TRANSPORT_MODES,
    Config,
    HttpConfig,
    HttpsConfig,
    ObsidianConfig,
    StdioConfig,
)
from .utils import is_valid_port, parse_port

DEFAULT_TRANSPORT = "stdio"
DEFAULT_OBSIDIAN_PROTOCOL = "http"
DEFAULT_OBSIDIAN_HOST = "localhost"
DEFAULT_OBSIDIAN_PORT = 27123


class EnvironmentSettings(BaseSettings):
    """Raw, unvalidated view of the process environment.

    Every field is a string (or None when unset or empty); ``validate_config``
    turns it into a typed configuration.
    """

    mcp_transport: str | None = None
    obsidian_api_key: str | None = None
    obsidian_protocol: str | None = None
    obsidian_host: str | None = None
    obsidian_port: str | None = None
    mcp_http_port: str | None = None
    mcp_https_port: str | None = None
    mcp_ssl_cert: str | None = None
    mcp_ssl_key: str | None = None
    mcp_log_level: str = "INFO"

    model_config = SettingsConfigDict(env_ignore_empty=True, extra="ignore")


def _validate_obsidian(env: EnvironmentSettings) -> ObsidianConfig:
    if not env.obsidian_api_key:
        raise ConfigurationError(
            "OBSIDIAN_API_KEY is required",
            "Set OBSIDIAN_API_KEY to the API key shown in the Obsidian Local REST API plugin settings",
        )

    protocol = env.obsidian_protocol or DEFAULT_OBSIDIAN_PROTOCOL
    if protocol not in PROTOCOLS:
        raise ConfigurationError(
            f"Invalid OBSIDIAN_PROTOCOL: {protocol}",
            "Set OBSIDIAN_PROTOCOL to 'http' or 'https'",
        )

    # Unparsable values silently fall back to the default port
    port = parse_port(env.obsidian_port)
    if port is None:
        port = DEFAULT_OBSIDIAN_PORT
    if not is_valid_port(port):
        raise ConfigurationError(
            f"Invalid OBSIDIAN_PORT: {env.obsidian_port}",
            f"Set OBSIDIAN_PORT to a number between 1 and 65535 (default: {DEFAULT_OBSIDIAN_PORT})",
        )

    return ObsidianConfig(
        api_key=env.obsidian_api_key,
        protocol=protocol,
        host=env.obsidian_host or DEFAULT_OBSIDIAN_HOST,
        port=port,
    )


def _validate_listen_port(raw: str | None, variable: str, mode: str) -> int:
    if not raw:
        raise ConfigurationError(
            f"{variable} is required for {mode} mode",
            f"Set {variable} to the port the MCP server should listen on (e.g. {variable}=3000)",
        )

    port = parse_port(raw)
    if port is None or not is_valid_port(port):
        raise ConfigurationError(
            f"Invalid {variable}: {raw}",
            f"Set {variable} to a number between 1 and 65535",
        )
    return port


def _validate_ssl_files(env: EnvironmentSettings) -> tuple[Path, Path]:
    if not env.mcp_ssl_cert or not env.mcp_ssl_key:
        raise ConfigurationError(
            "MCP_SSL_CERT and MCP_SSL_KEY are required for https mode",
            "Set MCP_SSL_CERT and MCP_SSL_KEY to the paths of your certificate and private key files",
        )

    cert_path = Path(env.mcp_ssl_cert)
    key_path = Path(env.mcp_ssl_key)

    if not cert_path.exists():
        raise ConfigurationError(
            f"SSL certificate file not found: {cert_path}",
            "Check that MCP_SSL_CERT points to an existing certificate file",
        )
    if not key_path.exists():
        raise ConfigurationError(
            f"SSL key file not found: {key_path}",
            "Check that MCP_SSL_KEY points to an existing private key file",
        )

    return cert_path, key_path


def validate_config(env: EnvironmentSettings | None = None) -> Config:
    """Read and validate the process environment.

    Args:
        env: Pre-loaded settings. Defaults to a fresh read of the environment.

    Returns:
        A StdioConfig, HttpConfig or HttpsConfig depending on MCP_TRANSPORT.

    Raises:
        ConfigurationError: If any variable is missing or invalid. The error's
            ``solution`` says how to fix it.
    """
    if env is None:
        env = EnvironmentSettings()

    mode = env.mcp_transport or DEFAULT_TRANSPORT
    if mode not in TRANSPORT_MODES:
        raise ConfigurationError(
            f"Invalid MCP_TRANSPORT: {mode}",
            f"Set MCP_TRANSPORT to one of: {', '.join(TRANSPORT_MODES)}",
        )

    obsidian = _validate_obsidian(env)

    if mode == "http":
        port = _validate_listen_port(env.mcp_http_port, "MCP_HTTP_PORT", mode)
        return HttpConfig(obsidian=obsidian, port=port)

    if mode == "https":
        port = _validate_listen_port(env.mcp_https_port, "MCP_HTTPS_PORT", mode)
        cert_path, key_path = _validate_ssl_files(env)
        return HttpsConfig(obsidian=obsidian, port=port, cert_path=cert_path, key_path=key_path)

    return StdioConfig(obsidian=obsidian)
