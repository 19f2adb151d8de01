"""
Tests for the Local REST API client.
"""

import json

import httpx
import pytest

from obsidian_mcp.errors import ObsidianAPIError


class TestRequests:
    """Request shapes sent to the Local REST API."""

    async def test_status_sends_bearer_token(self, make_client):
        client, handler = make_client(httpx.Response(200, json={"status": "OK", "authenticated": True}))

        result = await client.status()

        assert result == {"status": "OK", "authenticated": True}
        assert handler.last.method == "GET"
        assert str(handler.last.url) == "http://localhost:27123/"
        assert handler.last.headers["Authorization"] == "Bearer test-key"

    async def test_get_active_requests_note_json(self, make_client):
        client, handler = make_client(httpx.Response(200, json={"content": "# Hello"}))

        note = await client.get_active()

        assert note == {"content": "# Hello"}
        assert handler.last.url.path == "/active/"
        assert handler.last.headers["Accept"] == "application/vnd.olrapi.note+json"

    async def test_put_file_encodes_path_and_sends_markdown(self, make_client):
        client, handler = make_client()

        await client.put_file("/Daily Notes/2024 01.md", "# Today")

        request = handler.last
        assert request.method == "PUT"
        assert request.url.raw_path == b"/vault/Daily%20Notes/2024%2001.md"
        assert request.headers["Content-Type"] == "text/markdown"
        assert request.content == b"# Today"

    async def test_list_vault_directory_trailing_slash(self, make_client):
        client, handler = make_client(httpx.Response(200, json={"files": ["a.md"]}))

        result = await client.list_vault_directory("Projects/")

        assert result == {"files": ["a.md"]}
        assert handler.last.url.raw_path == b"/vault/Projects/"

    async def test_patch_file_headers(self, make_client):
        client, handler = make_client()

        await client.patch_file(
            "notes/todo.md",
            operation="append",
            target_type="heading",
            target="## Tasks",
            content="- new task",
        )

        headers = handler.last.headers
        assert handler.last.method == "PATCH"
        assert headers["Operation"] == "append"
        assert headers["Target-Type"] == "heading"
        assert headers["Target"] == "Tasks"
        assert headers["Target-Delimiter"] == "::"
        assert headers["Content-Type"] == "text/markdown"
        assert "Trim-Target-Whitespace" not in headers

    async def test_patch_periodic_optional_headers(self, make_client):
        client, handler = make_client()

        await client.patch_periodic(
            "daily",
            operation="replace",
            target_type="frontmatter",
            target="status",
            content='"done"',
            trim_target_whitespace=True,
            target_delimiter="/",
            content_type="application/json",
        )

        headers = handler.last.headers
        assert handler.last.url.path == "/periodic/daily/"
        assert headers["Target"] == "status"
        assert headers["Trim-Target-Whitespace"] == "true"
        assert headers["Target-Delimiter"] == "/"
        assert headers["Content-Type"] == "application/json"

    async def test_execute_command_encodes_id(self, make_client):
        client, handler = make_client()

        await client.execute_command("editor:toggle-bold")

        assert handler.last.method == "POST"
        assert handler.last.url.raw_path == b"/commands/editor%3Atoggle-bold/"

    async def test_open_file_new_leaf(self, make_client):
        client, handler = make_client()

        await client.open_file("Inbox.md", new_leaf=True)
        assert handler.last.url.params["newLeaf"] == "true"

        await client.open_file("Inbox.md")
        assert "newLeaf" not in handler.last.url.params

    async def test_simple_search_default_context_length(self, make_client):
        client, handler = make_client(httpx.Response(200, json=[]))

        await client.simple_search("meeting notes")

        assert handler.last.method == "POST"
        assert handler.last.url.path == "/search/simple/"
        assert handler.last.url.params["query"] == "meeting notes"
        assert handler.last.url.params["contextLength"] == "100"

    async def test_search_dataview_content_type(self, make_client):
        client, handler = make_client(httpx.Response(200, json=[{"filename": "a.md"}]))

        results = await client.search_dataview("LIST FROM #tag")

        assert results == [{"filename": "a.md"}]
        assert handler.last.headers["Content-Type"] == "application/vnd.olrapi.dataview.dql+txt"
        assert handler.last.content == b"LIST FROM #tag"

    async def test_search_json_logic_serializes_body(self, make_client):
        client, handler = make_client(httpx.Response(200, json=[]))
        logic = {"glob": ["*.md", {"var": "path"}]}

        await client.search_json_logic(logic)

        assert handler.last.headers["Content-Type"] == "application/vnd.olrapi.jsonlogic+json"
        assert json.loads(handler.last.content) == logic


class TestResponses:
    """Decoding of replies and errors."""

    async def test_empty_success_returns_empty_dict(self, make_client):
        client, _ = make_client(httpx.Response(204))

        assert await client.get_commands() == {}

    async def test_non_json_success_returns_empty_dict(self, make_client):
        client, _ = make_client(httpx.Response(200, text="# plain markdown"))

        assert await client.get_file("a.md") == {}

    async def test_plugin_error_message(self, make_client):
        client, _ = make_client(
            httpx.Response(404, json={"message": "File not found", "errorCode": 40400})
        )

        with pytest.raises(ObsidianAPIError) as exc_info:
            await client.get_file("missing.md")

        assert str(exc_info.value) == "Error: File not found (40400)"
        assert exc_info.value.status_code == 404
        assert exc_info.value.error_code == 40400

    async def test_non_json_error_uses_reason_phrase(self, make_client):
        client, _ = make_client(httpx.Response(500, text="boom"))

        with pytest.raises(ObsidianAPIError, match=r"Error: Internal Server Error \(500\)"):
            await client.delete_file("a.md")
