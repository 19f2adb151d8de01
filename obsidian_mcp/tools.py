"""
MCP Tools module for Obsidian MCP Server.

Declares one tool per Local REST API endpoint and dispatches tool calls to
ObsidianClient. ``create_server`` binds both to a low-level MCP Server.
"""

import json
from typing import Any

from mcp.server import Server
from mcp.types import TextContent, Tool

from . import __version__
from .client import ObsidianClient
from .models import PATCH_OPERATIONS, PERIODS, TARGET_TYPES, Config

SERVER_NAME = "obsidian-mcp"
SERVER_INSTRUCTIONS = (
    "This is a MCP server for Obsidian. It is a simple server that can be used to run commands "
    "and get responses from the client running Local REST API community plugin."
)

PATCH_DESCRIPTION = (
    "IMPORTANT: The target (heading/block) is a LOCATOR ONLY - DO NOT include it in content!\n\n"
    "For headings:\n"
    "- Use 'Title' for any heading (no # symbols)\n"
    "- Use 'Parent::Child' for nested headings where Parent is the exact text of the parent heading "
    "and Child is the nested heading\n"
    "- The hierarchy path must include ALL parent headings from the target back to its root\n"
    "- Example: To target ### Subsection under ## Section under # Main, use: 'Main::Section::Subsection'\n"
    "- Example: To target ## Section at root level, use just: 'Section'\n"
    "- Heading hierarchy is determined by markdown heading levels (#, ##, ###, etc.), not visual appearance\n\n"
    "For blocks: Use block ID without ^\n"
    "For frontmatter: Use field name\n\n"
    "Content will be inserted UNDER the target. Use actual newlines, not \\n."
)

PERIOD_PROPERTY = {
    "type": "string",
    "description": "Period of the note",
    "enum": list(PERIODS),
}

FILENAME_PROPERTY = {
    "type": "string",
    "description": "Path to file relative to vault root. No URL encoding needed.",
}

APPEND_CONTENT_PROPERTY = {
    "type": "string",
    "description": "Content to append at the end of file",
}

REPLACE_CONTENT_PROPERTY = {
    "type": "string",
    "description": "Complete file content including frontmatter if needed",
}

PATCH_PROPERTIES = {
    "operation": {
        "type": "string",
        "description": "append: add after, prepend: add before, replace: replace content UNDER target",
        "enum": list(PATCH_OPERATIONS),
    },
    "target_type": {
        "type": "string",
        "description": "Type of target locator",
        "enum": list(TARGET_TYPES),
    },
    "target": {
        "type": "string",
        "description": "Target locator: For heading use 'Title' (no #), for nested 'Parent::Child', "
                       "for block use ID without ^, for frontmatter use field name",
    },
    "content": {
        "type": "string",
        "description": "Content to insert - DO NOT include the target heading! Will be placed UNDER the target. "
                       "Use actual line breaks, not \\n",
    },
    "trim_target_whitespace": {"type": "boolean"},
    "target_delimiter": {
        "type": "string",
        "description": "Delimiter for nested headings (default: ::)",
    },
    "content_type": {"type": "string"},
}

PATCH_REQUIRED = ["operation", "target_type", "target", "content"]

NO_ARGUMENTS = {"type": "object", "properties": {}}


def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="obsidian_status",
            description="Returns Obsidian REST API server status and authentication info. Good for testing connection.",
            inputSchema=NO_ARGUMENTS,
        ),
        Tool(
            name="obsidian_delete_active",
            description="Permanently deletes the currently-active file in Obsidian. Cannot be undone!",
            inputSchema=NO_ARGUMENTS,
        ),
        Tool(
            name="obsidian_get_active",
            description="Returns the content of the currently-active file as JSON with 'content' field "
                        "containing the full file text including frontmatter.",
            inputSchema=NO_ARGUMENTS,
        ),
        Tool(
            name="obsidian_patch_active",
            description=f"PATCH content into the active file. {PATCH_DESCRIPTION}",
            inputSchema={
                "type": "object",
                "properties": PATCH_PROPERTIES,
                "required": PATCH_REQUIRED,
            },
        ),
        Tool(
            name="obsidian_post_active",
            description="Appends content to the END of the active file (after all existing content).",
            inputSchema={
                "type": "object",
                "properties": {"content": APPEND_CONTENT_PROPERTY},
                "required": ["content"],
            },
        ),
        Tool(
            name="obsidian_put_active",
            description="Replaces ENTIRE content of the active file including frontmatter. Previous content will be lost.",
            inputSchema={
                "type": "object",
                "properties": {"content": REPLACE_CONTENT_PROPERTY},
                "required": ["content"],
            },
        ),
        Tool(
            name="obsidian_get_commands",
            description="Returns all available Obsidian commands as JSON array with id and name fields. "
                        "Use command IDs with obsidian_execute_command.",
            inputSchema=NO_ARGUMENTS,
        ),
        Tool(
            name="obsidian_execute_command",
            description="Executes an Obsidian command by ID. Use obsidian_get_commands first to find available command IDs.",
            inputSchema={
                "type": "object",
                "properties": {
                    "command_id": {
                        "type": "string",
                        "description": "Command ID to execute (e.g. 'editor:toggle-bold')",
                    }
                },
                "required": ["command_id"],
            },
        ),
        Tool(
            name="obsidian_open_file",
            description="Opens a file in Obsidian UI. Creates the file if it doesn't exist. "
                        "File will become the active note.",
            inputSchema={
                "type": "object",
                "properties": {
                    "filename": FILENAME_PROPERTY,
                    "new_leaf": {
                        "type": ["boolean", "null"],
                        "description": "Open in new pane/tab (true) or current pane (false/null)",
                    },
                },
                "required": ["filename"],
            },
        ),
        Tool(
            name="obsidian_delete_periodic",
            description="Permanently deletes the periodic note for today/this week/month/etc. Cannot be undone!",
            inputSchema={
                "type": "object",
                "properties": {"period": PERIOD_PROPERTY},
                "required": ["period"],
            },
        ),
        Tool(
            name="obsidian_get_periodic",
            description="Returns the periodic note for a given period as JSON with 'content' field "
                        "containing the full file text.",
            inputSchema={
                "type": "object",
                "properties": {"period": PERIOD_PROPERTY},
                "required": ["period"],
            },
        ),
        Tool(
            name="obsidian_patch_periodic",
            description=f"PATCH content into a periodic note. {PATCH_DESCRIPTION}",
            inputSchema={
                "type": "object",
                "properties": {"period": PERIOD_PROPERTY, **PATCH_PROPERTIES},
                "required": ["period", *PATCH_REQUIRED],
            },
        ),
        Tool(
            name="obsidian_post_periodic",
            description="Appends content to the END of the periodic note (after all existing content). "
                        "Creates note if it doesn't exist.",
            inputSchema={
                "type": "object",
                "properties": {"period": PERIOD_PROPERTY, "content": APPEND_CONTENT_PROPERTY},
                "required": ["period", "content"],
            },
        ),
        Tool(
            name="obsidian_put_periodic",
            description="Replaces ENTIRE content of the periodic note including frontmatter. Previous content will be lost.",
            inputSchema={
                "type": "object",
                "properties": {"period": PERIOD_PROPERTY, "content": REPLACE_CONTENT_PROPERTY},
                "required": ["period", "content"],
            },
        ),
        Tool(
            name="obsidian_search_dataview",
            description="Searches vault using a Dataview DQL query. Returns results as JSON array. Requires Dataview plugin.",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Dataview DQL query (e.g. 'LIST FROM #tag WHERE date > date(2024-01-01)')",
                    }
                },
                "required": ["query"],
            },
        ),
        Tool(
            name="obsidian_search_json_logic",
            description="Searches vault metadata using JsonLogic query syntax. Returns matching files as JSON array.",
            inputSchema={
                "type": "object",
                "properties": {
                    "logic": {"description": "JsonLogic query object for searching file metadata"}
                },
                "required": ["logic"],
            },
        ),
        Tool(
            name="obsidian_simple_search",
            description="Full-text search across all vault files. Returns matches with surrounding context.",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Search text (fuzzy matching supported)",
                    },
                    "context_length": {
                        "type": "integer",
                        "description": "Number of characters to show around match (default: 100)",
                    },
                },
                "required": ["query"],
            },
        ),
        Tool(
            name="obsidian_list_vault_root",
            description="Lists all files and folders in the vault root directory. Returns array of names.",
            inputSchema=NO_ARGUMENTS,
        ),
        Tool(
            name="obsidian_list_vault_directory",
            description="Lists files and subdirectories in a specified directory. Returns array of file/folder names.",
            inputSchema={
                "type": "object",
                "properties": {
                    "path_to_directory": {
                        "type": "string",
                        "description": "Path to directory relative to vault root. No URL encoding needed.",
                    }
                },
                "required": ["path_to_directory"],
            },
        ),
        Tool(
            name="obsidian_delete_file",
            description="Deletes a file or folder in the vault. Be careful - this is permanent!",
            inputSchema={
                "type": "object",
                "properties": {
                    "filename": {
                        "type": "string",
                        "description": "Path to file or folder relative to vault root. No URL encoding needed.",
                    }
                },
                "required": ["filename"],
            },
        ),
        Tool(
            name="obsidian_get_file",
            description="Returns content of a vault file as JSON with 'content' field containing the full file text "
                        "including frontmatter. Path must be relative to vault root, no URL encoding needed.",
            inputSchema={
                "type": "object",
                "properties": {
                    "filename": {
                        "type": "string",
                        "description": "Path to file relative to vault root (e.g. 'folder/file.md'). "
                                       "No URL encoding needed.",
                    }
                },
                "required": ["filename"],
            },
        ),
        Tool(
            name="obsidian_patch_file",
            description=f"PATCH content into a vault file. {PATCH_DESCRIPTION}",
            inputSchema={
                "type": "object",
                "properties": {"filename": FILENAME_PROPERTY, **PATCH_PROPERTIES},
                "required": ["filename", *PATCH_REQUIRED],
            },
        ),
        Tool(
            name="obsidian_post_file",
            description="Appends content to the END of a vault file (after all existing content). "
                        "Creates file if it doesn't exist.",
            inputSchema={
                "type": "object",
                "properties": {"filename": FILENAME_PROPERTY, "content": APPEND_CONTENT_PROPERTY},
                "required": ["filename", "content"],
            },
        ),
        Tool(
            name="obsidian_put_file",
            description="Creates new file or replaces ENTIRE content of existing file including frontmatter. "
                        "Previous content will be lost if file exists.",
            inputSchema={
                "type": "object",
                "properties": {"filename": FILENAME_PROPERTY, "content": REPLACE_CONTENT_PROPERTY},
                "required": ["filename", "content"],
            },
        ),
    ]


def _text(value: Any) -> list[TextContent]:
    return [TextContent(type="text", text=value if isinstance(value, str) else json.dumps(value))]


def _ok() -> list[TextContent]:
    return _text("OK")


def _patch_arguments(arguments: dict[str, Any]) -> dict[str, Any]:
    return {
        "operation": arguments["operation"],
        "target_type": arguments["target_type"],
        "target": arguments["target"],
        "content": arguments["content"],
        "trim_target_whitespace": arguments.get("trim_target_whitespace"),
        "target_delimiter": arguments.get("target_delimiter"),
        "content_type": arguments.get("content_type"),
    }


async def call_tool(client: ObsidianClient, name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls.

    Client errors are not caught here; the MCP server reports them to the
    caller as error results.
    """

    if name == "obsidian_status":
        return _text(await client.status())

    elif name == "obsidian_delete_active":
        await client.delete_active()
        return _ok()

    elif name == "obsidian_get_active":
        return _text(await client.get_active())

    elif name == "obsidian_patch_active":
        return _text(await client.patch_active(**_patch_arguments(arguments)))

    elif name == "obsidian_post_active":
        await client.post_active(arguments["content"])
        return _ok()

    elif name == "obsidian_put_active":
        await client.put_active(arguments["content"])
        return _ok()

    elif name == "obsidian_get_commands":
        return _text(await client.get_commands())

    elif name == "obsidian_execute_command":
        await client.execute_command(arguments["command_id"])
        return _ok()

    elif name == "obsidian_open_file":
        await client.open_file(arguments["filename"], arguments.get("new_leaf"))
        return _ok()

    elif name == "obsidian_delete_periodic":
        await client.delete_periodic(arguments["period"])
        return _ok()

    elif name == "obsidian_get_periodic":
        return _text(await client.get_periodic(arguments["period"]))

    elif name == "obsidian_patch_periodic":
        await client.patch_periodic(arguments["period"], **_patch_arguments(arguments))
        return _ok()

    elif name == "obsidian_post_periodic":
        await client.post_periodic(arguments["period"], arguments["content"])
        return _ok()

    elif name == "obsidian_put_periodic":
        await client.put_periodic(arguments["period"], arguments["content"])
        return _ok()

    elif name == "obsidian_search_dataview":
        return _text(await client.search_dataview(arguments["query"]))

    elif name == "obsidian_search_json_logic":
        return _text(await client.search_json_logic(arguments["logic"]))

    elif name == "obsidian_simple_search":
        return _text(await client.simple_search(arguments["query"], arguments.get("context_length")))

    elif name == "obsidian_list_vault_root":
        return _text(await client.list_vault_root())

    elif name == "obsidian_list_vault_directory":
        return _text(await client.list_vault_directory(arguments["path_to_directory"]))

    elif name == "obsidian_delete_file":
        await client.delete_file(arguments["filename"])
        return _ok()

    elif name == "obsidian_get_file":
        return _text(await client.get_file(arguments["filename"]))

    elif name == "obsidian_patch_file":
        await client.patch_file(arguments["filename"], **_patch_arguments(arguments))
        return _ok()

    elif name == "obsidian_post_file":
        await client.post_file(arguments["filename"], arguments["content"])
        return _ok()

    elif name == "obsidian_put_file":
        await client.put_file(arguments["filename"], arguments["content"])
        return _ok()

    raise ValueError(f"Unknown tool: {name}")


def create_server(config: Config, client: ObsidianClient | None = None) -> Server:
    """Create the MCP server with every tool bound to an ObsidianClient."""
    if client is None:
        client = ObsidianClient(config.obsidian)

    server = Server(SERVER_NAME, version=__version__, instructions=SERVER_INSTRUCTIONS)

    @server.list_tools()
    async def handle_list_tools() -> list[Tool]:
        return list_tools()

    @server.call_tool()
    async def handle_call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        return await call_tool(client, name, arguments or {})

    return server
