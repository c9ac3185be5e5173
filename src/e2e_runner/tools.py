"""
Tools Configuration
===================

Tool allowlist for the test agent. The agent only acts through its MCP
servers; built-in file and shell tools stay disabled.
"""

from typing import Dict, Iterable, List


MCP_TOOL_PREFIX = "mcp__"

# Built-in tools the agent must never use while running a test
DISALLOWED_BUILTIN_TOOLS = [
    "Read",
    "Write",
    "Edit",
    "Glob",
    "Grep",
    "Bash",
]


def get_mcp_tool_pattern(server_name: str) -> str:
    """Allowlist entry covering every tool of one MCP server."""
    return f"{MCP_TOOL_PREFIX}{server_name}"


def get_all_allowed_tools(mcp_servers: Dict[str, dict]) -> List[str]:
    """
    Get all tools the agent is allowed to call.

    Args:
        mcp_servers: Configured MCP servers keyed by name

    Returns:
        One allowlist entry per MCP server, in configuration order
    """
    return [get_mcp_tool_pattern(name) for name in mcp_servers]


def get_disallowed_tools() -> List[str]:
    """Get the list of built-in tools disabled for test runs."""
    return DISALLOWED_BUILTIN_TOOLS.copy()


def is_mcp_tool(tool_name: str, server_names: Iterable[str]) -> bool:
    """Check whether a tool name belongs to one of the configured servers."""
    return any(
        tool_name.startswith(get_mcp_tool_pattern(name) + "__")
        for name in server_names
    )
