"""
HTTP client for the Obsidian Local REST API plugin.

One coroutine per REST endpoint. Every call is a single request: no retries,
no caching, and no timeout.
"""

import json
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from .errors import ObsidianAPIError
from .models import ObsidianConfig, PatchOperation, Period, TargetType
from .utils import encode_vault_path, normalize_target

logger = structlog.get_logger(__name__)

NOTE_JSON = "application/vnd.olrapi.note+json"
MARKDOWN = "text/markdown"
DATAVIEW_DQL = "application/vnd.olrapi.dataview.dql+txt"
JSON_LOGIC = "application/vnd.olrapi.jsonlogic+json"
DEFAULT_TARGET_DELIMITER = "::"
DEFAULT_CONTEXT_LENGTH = 100


class ObsidianClient:
    """Async client for one Obsidian vault exposed through the Local REST API."""

    def __init__(self, config: ObsidianConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self.config.base_url

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.api_key}"}

    async def _request(
        self,
        method: str,
        path: str,
        headers: dict[str, str] | None = None,
        content: str | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        """Send one request and decode the reply.

        Returns the decoded JSON body, or ``{}`` when the reply is empty or not JSON.

        Raises:
            ObsidianAPIError: If the plugin answers with a non-2xx status.
            httpx.HTTPError: On network failures.
        """
        logger.debug("obsidian_request", method=method, url=f"{self.base_url}{path}")

        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=None,
            transport=self._transport,
        ) as http:
            response = await http.request(method, path, headers=headers, content=content, params=params)

        if not response.is_success:
            raise self._error_from_response(response)

        content_type = response.headers.get("content-type", "")
        if response.headers.get("content-length") == "0" or "json" not in content_type:
            return {}

        try:
            return response.json()
        except ValueError:
            logger.warning("obsidian_response_not_json", method=method, path=path)
            return {}

    @staticmethod
    def _error_from_response(response: httpx.Response) -> ObsidianAPIError:
        try:
            body = response.json()
        except ValueError:
            return ObsidianAPIError(
                f"Error: {response.reason_phrase} ({response.status_code})",
                status_code=response.status_code,
            )

        if not isinstance(body, dict):
            body = {}
        logger.warning("obsidian_error_response", status=response.status_code, body=body)
        error_code = body.get("errorCode")
        return ObsidianAPIError(
            f"Error: {body.get('message')} ({error_code})",
            status_code=response.status_code,
            error_code=error_code,
        )

    @staticmethod
    def _patch_headers(
        operation: PatchOperation,
        target_type: TargetType,
        target: str,
        trim_target_whitespace: bool | None = None,
        target_delimiter: str | None = None,
        content_type: str | None = None,
    ) -> dict[str, str]:
        headers = {
            "Operation": operation,
            "Target-Type": target_type,
            "Target": normalize_target(target, target_type),
            "Content-Type": content_type or MARKDOWN,
            "Target-Delimiter": target_delimiter if target_delimiter is not None else DEFAULT_TARGET_DELIMITER,
        }
        if trim_target_whitespace is not None:
            headers["Trim-Target-Whitespace"] = "true" if trim_target_whitespace else "false"
        return headers

    # ============== Server ==============

    async def status(self) -> dict[str, Any]:
        return await self._request("GET", "/")

    # ============== Active file ==============

    async def get_active(self) -> dict[str, Any]:
        return await self._request("GET", "/active/", headers={"Accept": NOTE_JSON})

    async def put_active(self, content: str) -> None:
        await self._request("PUT", "/active/", headers={"Content-Type": MARKDOWN}, content=content)

    async def post_active(self, content: str) -> None:
        await self._request("POST", "/active/", headers={"Content-Type": MARKDOWN}, content=content)

    async def patch_active(
        self,
        operation: PatchOperation,
        target_type: TargetType,
        target: str,
        content: str,
        trim_target_whitespace: bool | None = None,
        target_delimiter: str | None = None,
        content_type: str | None = None,
    ) -> dict[str, Any]:
        headers = self._patch_headers(
            operation, target_type, target, trim_target_whitespace, target_delimiter, content_type
        )
        return await self._request("PATCH", "/active/", headers=headers, content=content)

    async def delete_active(self) -> None:
        await self._request("DELETE", "/active/")

    # ============== Commands ==============

    async def get_commands(self) -> dict[str, Any]:
        return await self._request("GET", "/commands/")

    async def execute_command(self, command_id: str) -> None:
        await self._request("POST", f"/commands/{quote(command_id, safe='')}/")

    async def open_file(self, filename: str, new_leaf: bool | None = None) -> None:
        params = {"newLeaf": "true"} if new_leaf else None
        await self._request("POST", f"/open/{encode_vault_path(filename)}", params=params)

    # ============== Periodic notes ==============

    async def get_periodic(self, period: Period) -> dict[str, Any]:
        return await self._request("GET", f"/periodic/{period}/", headers={"Accept": NOTE_JSON})

    async def put_periodic(self, period: Period, content: str) -> None:
        await self._request("PUT", f"/periodic/{period}/", headers={"Content-Type": MARKDOWN}, content=content)

    async def post_periodic(self, period: Period, content: str) -> None:
        await self._request("POST", f"/periodic/{period}/", headers={"Content-Type": MARKDOWN}, content=content)

    async def patch_periodic(
        self,
        period: Period,
        operation: PatchOperation,
        target_type: TargetType,
        target: str,
        content: str,
        trim_target_whitespace: bool | None = None,
        target_delimiter: str | None = None,
        content_type: str | None = None,
    ) -> None:
        headers = self._patch_headers(
            operation, target_type, target, trim_target_whitespace, target_delimiter, content_type
        )
        await self._request("PATCH", f"/periodic/{period}/", headers=headers, content=content)

    async def delete_periodic(self, period: Period) -> None:
        await self._request("DELETE", f"/periodic/{period}/")

    # ============== Search ==============

    async def search_dataview(self, query: str) -> list[dict[str, Any]]:
        return await self._request("POST", "/search/", headers={"Content-Type": DATAVIEW_DQL}, content=query)

    async def search_json_logic(self, logic: Any) -> list[dict[str, Any]]:
        return await self._request(
            "POST", "/search/", headers={"Content-Type": JSON_LOGIC}, content=json.dumps(logic)
        )

    async def simple_search(self, query: str, context_length: int | None = None) -> list[dict[str, Any]]:
        params = {
            "query": query,
            "contextLength": str(context_length if context_length is not None else DEFAULT_CONTEXT_LENGTH),
        }
        return await self._request("POST", "/search/simple/", params=params)

    # ============== Vault files ==============

    async def list_vault_root(self) -> dict[str, Any]:
        return await self._request("GET", "/vault/")

    async def list_vault_directory(self, path_to_directory: str) -> dict[str, Any]:
        return await self._request("GET", f"/vault/{encode_vault_path(path_to_directory)}/")

    async def get_file(self, filename: str) -> dict[str, Any]:
        return await self._request("GET", f"/vault/{encode_vault_path(filename)}", headers={"Accept": NOTE_JSON})

    async def put_file(self, filename: str, content: str) -> None:
        await self._request(
            "PUT", f"/vault/{encode_vault_path(filename)}", headers={"Content-Type": MARKDOWN}, content=content
        )

    async def post_file(self, filename: str, content: str) -> None:
        await self._request(
            "POST", f"/vault/{encode_vault_path(filename)}", headers={"Content-Type": MARKDOWN}, content=content
        )

    async def patch_file(
        self,
        filename: str,
        operation: PatchOperation,
        target_type: TargetType,
        target: str,
        content: str,
        trim_target_whitespace: bool | None = None,
        target_delimiter: str | None = None,
        content_type: str | None = None,
    ) -> None:
        headers = self._patch_headers(
            operation, target_type, target, trim_target_whitespace, target_delimiter, content_type
        )
        await self._request("PATCH", f"/vault/{encode_vault_path(filename)}", headers=headers, content=content)

    async def delete_file(self, filename: str) -> None:
        await self._request("DELETE", f"/vault/{encode_vault_path(filename)}")
