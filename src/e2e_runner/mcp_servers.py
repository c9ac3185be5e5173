"""
MCP Servers Configuration
=========================

Configuration for the Model Context Protocol (MCP) servers that give the
agent its tools. The default is a single Playwright browser-automation server.
"""

import json
from typing import Any, Dict, List, Optional

from .exceptions import ConfigurationError


PLAYWRIGHT_SERVER_NAME = "playwright"
PLAYWRIGHT_MCP_PACKAGE = "@playwright/mcp@latest"


def get_playwright_config(
    headless: bool = False,
    extra_args: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Get Playwright MCP server configuration.

    Args:
        headless: Whether to run the browser in headless mode
        extra_args: Additional arguments passed to the MCP server

    Returns:
        MCP server configuration dictionary
    """
    args = [PLAYWRIGHT_MCP_PACKAGE]

    if headless:
        args.append("--headless")

    if extra_args:
        args.extend(extra_args)

    return {
        "command": "npx",
        "args": args,
    }


def get_default_mcp_servers() -> Dict[str, Dict[str, Any]]:
    """Get the default tool providers: one browser-automation server."""
    return {PLAYWRIGHT_SERVER_NAME: get_playwright_config()}


def create_custom_mcp_server(
    command: str,
    args: Optional[List[str]] = None,
    env: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """
    Create a custom MCP server configuration.

    Args:
        command: The command to run the MCP server
        args: Optional list of arguments
        env: Optional environment variables

    Returns:
        MCP server configuration dictionary
    """
    config: Dict[str, Any] = {"command": command, "args": list(args or [])}

    if env:
        config["env"] = dict(env)

    return config


def validate_mcp_servers(servers: Any) -> Dict[str, Dict[str, Any]]:
    """
    Normalize a mapping of server name to launch command and arguments.

    Raises:
        ConfigurationError: If the mapping or any entry is malformed
    """
    if not isinstance(servers, dict) or not servers:
        raise ConfigurationError("MCP servers must be a non-empty mapping of name to {command, args}")

    normalized: Dict[str, Dict[str, Any]] = {}
    for name, entry in servers.items():
        if not isinstance(name, str) or not name:
            raise ConfigurationError(f"Invalid MCP server name: {name!r}")
        if not isinstance(entry, dict):
            raise ConfigurationError(f"MCP server '{name}' must be an object")

        command = entry.get("command")
        if not isinstance(command, str) or not command:
            raise ConfigurationError(f"MCP server '{name}' is missing a command")

        args = entry.get("args", [])
        if not isinstance(args, list) or not all(isinstance(a, str) for a in args):
            raise ConfigurationError(f"MCP server '{name}' args must be a list of strings")

        env = entry.get("env")
        if env is not None and not isinstance(env, dict):
            raise ConfigurationError(f"MCP server '{name}' env must be an object")

        normalized[name] = create_custom_mcp_server(command, args, env)

    return normalized


def parse_mcp_servers(raw: str) -> Dict[str, Dict[str, Any]]:
    """Parse the MCP_SERVERS environment value (a JSON object)."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"MCP_SERVERS is not valid JSON: {e}") from e
    return validate_mcp_servers(data)
