"""
Tests for the startup connectivity probe.
"""

import httpx
import pytest

from obsidian_mcp.connectivity import check_obsidian_connection
from obsidian_mcp.errors import ConfigurationError


def transport_for(response: httpx.Response) -> httpx.MockTransport:
    return httpx.MockTransport(lambda request: response)


class TestCheckObsidianConnection:

    async def test_connected(self, obsidian_config):
        response = httpx.Response(200, json={
            "status": "OK",
            "service": "Obsidian Local REST API",
            "authenticated": True,
            "versions": {"obsidian": "1.5.3", "self": "3.0.1"},
        })

        status = await check_obsidian_connection(obsidian_config, transport=transport_for(response))

        assert status.authenticated is True
        assert status.versions.obsidian == "1.5.3"
        assert status.versions.plugin == "3.0.1"

    async def test_not_authenticated(self, obsidian_config):
        response = httpx.Response(200, json={"status": "OK", "authenticated": False})

        with pytest.raises(ConfigurationError, match="authentication failed") as exc_info:
            await check_obsidian_connection(obsidian_config, transport=transport_for(response))

        assert "OBSIDIAN_API_KEY" in exc_info.value.solution

    @pytest.mark.parametrize("status_code", [401, 403])
    async def test_auth_status_codes(self, obsidian_config, status_code):
        response = httpx.Response(status_code, json={"message": "Unauthorized", "errorCode": 40101})

        with pytest.raises(ConfigurationError, match="authentication failed"):
            await check_obsidian_connection(obsidian_config, transport=transport_for(response))

    async def test_plugin_not_found(self, obsidian_config):
        response = httpx.Response(404, text="not here")

        with pytest.raises(ConfigurationError, match="plugin not found"):
            await check_obsidian_connection(obsidian_config, transport=transport_for(response))

    async def test_connection_refused(self, obsidian_config):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with pytest.raises(ConfigurationError, match="Cannot connect to Obsidian Local REST API at localhost:27123"):
            await check_obsidian_connection(obsidian_config, transport=httpx.MockTransport(refuse))

    async def test_generic_failure(self, obsidian_config):
        response = httpx.Response(500, json={"message": "Boom", "errorCode": 50000})

        with pytest.raises(ConfigurationError, match="Obsidian API test failed: Error: Boom"):
            await check_obsidian_connection(obsidian_config, transport=transport_for(response))

    @pytest.mark.parametrize("body", [
        {"authenticated": True, "versions": "1.5.3"},
        [{"status": "OK"}],
    ])
    async def test_unexpected_status_shape(self, obsidian_config, body):
        response = httpx.Response(200, json=body)

        with pytest.raises(ConfigurationError, match="Obsidian API test failed: unexpected status response"):
            await check_obsidian_connection(obsidian_config, transport=transport_for(response))
