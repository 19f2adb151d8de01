"""
Utility functions and compiled regex patterns for Obsidian MCP Server.

Contains port parsing, vault path encoding and PATCH target normalisation.
"""

import re
from urllib.parse import quote

# Pre-compiled regex patterns
HEADING_PREFIX_PATTERN = re.compile(r'^#+\s*')

MIN_PORT = 1
MAX_PORT = 65535


def parse_port(raw: str | None) -> int | None:
    """Parse a port string, returning None when it is missing or not a number."""
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def is_valid_port(port: int) -> bool:
    """Check that a port lies in the TCP range 1-65535."""
    return MIN_PORT <= port <= MAX_PORT


def encode_vault_path(path: str) -> str:
    """URL-encode a vault-relative path segment by segment.

    Leading and trailing slashes and empty segments are dropped, so
    ``"/Daily Notes//2024-01-01.md"`` becomes ``"Daily%20Notes/2024-01-01.md"``.
    """
    segments = [segment for segment in path.strip().split("/") if segment]
    return "/".join(quote(segment, safe="") for segment in segments)


def normalize_target(target: str, target_type: str) -> str:
    """Strip leading '#' markers from heading targets; other targets pass through."""
    if target_type == "heading":
        return HEADING_PREFIX_PATTERN.sub('', target)
    return target
