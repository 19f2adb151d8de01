"""
Connectivity probe for the Obsidian Local REST API.

Calls the status endpoint once and turns any failure into a ConfigurationError
whose message says what went wrong (auth, unreachable, plugin missing).
"""

import httpx
import structlog
from pydantic import ValidationError

from .client import ObsidianClient
from .errors import ConfigurationError, ObsidianAPIError
from .models import ObsidianConfig, ObsidianStatus

logger = structlog.get_logger(__name__)

AUTH_FAILED = "Obsidian API authentication failed"


async def check_obsidian_connection(
    config: ObsidianConfig, transport: httpx.AsyncBaseTransport | None = None
) -> ObsidianStatus:
    """Verify the Local REST API is reachable and accepts the API key.

    Args:
        config: Backing-service connection parameters.
        transport: Optional httpx transport, used by tests.

    Returns:
        The parsed status response.

    Raises:
        ConfigurationError: Classified failure with an operator-facing solution.
    """
    client = ObsidianClient(config, transport=transport)
    logger.info("obsidian_connection_check", url=config.base_url)

    try:
        status = ObsidianStatus.model_validate(await client.status())
    except ObsidianAPIError as e:
        if e.status_code in (401, 403):
            raise ConfigurationError(
                AUTH_FAILED,
                "Check that your OBSIDIAN_API_KEY is correct in the Local REST API plugin settings",
            ) from e
        if e.status_code == 404:
            raise ConfigurationError(
                "Obsidian Local REST API plugin not found",
                "Ensure the Local REST API plugin is installed and enabled in Obsidian",
            ) from e
        raise ConfigurationError(
            f"Obsidian API test failed: {e}",
            "Check Obsidian Local REST API plugin status and configuration",
        ) from e
    except httpx.ConnectError as e:
        raise ConfigurationError(
            f"Cannot connect to Obsidian Local REST API at {config.host}:{config.port}",
            "Ensure Obsidian is running with Local REST API plugin enabled and accessible",
        ) from e
    except httpx.HTTPError as e:
        raise ConfigurationError(
            f"Obsidian API test failed: {e}",
            "Check Obsidian Local REST API plugin status and configuration",
        ) from e
    except ValidationError as e:
        raise ConfigurationError(
            f"Obsidian API test failed: unexpected status response ({e.error_count()} invalid fields)",
            "Check that OBSIDIAN_HOST and OBSIDIAN_PORT point at the Local REST API plugin",
        ) from e

    if not status.authenticated:
        raise ConfigurationError(AUTH_FAILED, "Check that your OBSIDIAN_API_KEY is correct")

    logger.info(
        "obsidian_connected",
        obsidian_version=status.versions.obsidian,
        plugin_version=status.versions.plugin,
    )
    return status
