#!/usr/bin/env python3
"""
Tests for run configuration and MCP server settings.
"""

import json
import sys
from pathlib import Path

import pytest

from e2e_runner.config import DEFAULT_MAX_STEPS, DEFAULT_MODEL, RunnerConfig
from e2e_runner.exceptions import ConfigurationError
from e2e_runner.mcp_servers import get_playwright_config, parse_mcp_servers
from e2e_runner.tools import get_all_allowed_tools, is_mcp_tool


def test_defaults():
    config = RunnerConfig.from_env({"ANTHROPIC_API_KEY": "sk-test"})

    assert config.api_key == "sk-test"
    assert config.model == DEFAULT_MODEL
    assert config.base_url is None
    assert config.tests_dir == Path("./tests")
    assert config.max_steps == DEFAULT_MAX_STEPS == 20
    assert config.mcp_servers == {"playwright": {"command": "npx", "args": ["@playwright/mcp@latest"]}}
    assert config.strict_response is False
    assert config.validate() is config


def test_environment_values():
    servers = {"browser": {"command": "node", "args": ["server.js", "--port", "0"]}}
    config = RunnerConfig.from_env({
        "API_KEY": "sk-fallback",
        "MODEL_NAME": "claude-haiku-4-5-20251001",
        "BASE_URL": "https://proxy.internal/anthropic",
        "TESTS_DIR": "/srv/e2e",
        "MAX_STEPS": "35",
        "MCP_SERVERS": json.dumps(servers),
        "STRICT_RESPONSE": "yes",
    })

    assert config.api_key == "sk-fallback"
    assert config.model == "claude-haiku-4-5-20251001"
    assert config.tests_dir == Path("/srv/e2e")
    assert config.max_steps == 35
    assert config.mcp_servers == servers
    assert config.strict_response is True
    assert config.client_env() == {
        "ANTHROPIC_API_KEY": "sk-fallback",
        "ANTHROPIC_BASE_URL": "https://proxy.internal/anthropic",
    }


def test_overrides_skip_none():
    config = RunnerConfig.from_env({"ANTHROPIC_API_KEY": "sk-test", "MAX_STEPS": "5"})

    updated = config.with_overrides(max_steps=None, tests_dir="e2e", model="other-model")

    assert updated.max_steps == 5
    assert updated.tests_dir == Path("e2e")
    assert updated.model == "other-model"


def test_missing_credential_is_rejected():
    with pytest.raises(ConfigurationError, match="ANTHROPIC_API_KEY"):
        RunnerConfig.from_env({}).validate()


def test_invalid_max_steps():
    with pytest.raises(ConfigurationError):
        RunnerConfig.from_env({"MAX_STEPS": "many"})

    with pytest.raises(ConfigurationError):
        RunnerConfig(api_key="sk-test", max_steps=0).validate()


def test_bedrock_requires_region():
    with pytest.raises(ConfigurationError, match="AWS_REGION"):
        RunnerConfig.from_env({"USE_AWS_BEDROCK": "true"})

    config = RunnerConfig.from_env({"USE_AWS_BEDROCK": "1", "AWS_DEFAULT_REGION": "us-west-2"})

    assert config.validate(check_aws=False) is config
    assert config.client_env() == {"CLAUDE_CODE_USE_BEDROCK": "true", "AWS_REGION": "us-west-2"}


@pytest.mark.parametrize("raw", [
    "not json",
    "[]",
    "{}",
    '{"browser": {"args": []}}',
    '{"browser": {"command": "npx", "args": "not-a-list"}}',
])
def test_malformed_mcp_servers(raw):
    with pytest.raises(ConfigurationError):
        parse_mcp_servers(raw)


def test_playwright_config_and_allowed_tools():
    servers = {"playwright": get_playwright_config(headless=True), "api": {"command": "uvx", "args": []}}

    assert servers["playwright"]["args"] == ["@playwright/mcp@latest", "--headless"]
    assert get_all_allowed_tools(servers) == ["mcp__playwright", "mcp__api"]
    assert is_mcp_tool("mcp__playwright__browser_navigate", servers)
    assert not is_mcp_tool("Bash", servers)
    assert not is_mcp_tool("mcp__playwrightx__click", servers)


def main():
    """Run all tests."""
    sys.exit(pytest.main([__file__, "-v"]))


if __name__ == "__main__":
    main()
