"""
E2E Test Runner Package
=======================

Runs natural-language end-to-end tests through an autonomous browser agent.
"""

from .config import RunnerConfig
from .exceptions import (
    E2ERunnerError,
    ConfigurationError,
    DirectoryAccessError,
    FileReadError,
    GatewayExecutionError,
    GatewayResponseError,
)
from .gateway import AgentGateway, ClaudeAgentGateway, build_agent_options
from .loader import list_test_files, read_test_content, load_test_case
from .models import (
    AgentOutput,
    GatewayResponse,
    PromptEnvelope,
    RunSummary,
    TestCase,
    TestResult,
)
from .orchestrator import TestRunOrchestrator, TestState
from .prompts import build_test_prompt, RESPONSE_FIELDS
from .reporter import format_summary, print_summary, write_json_report

__all__ = [
    "RunnerConfig",
    "E2ERunnerError",
    "ConfigurationError",
    "DirectoryAccessError",
    "FileReadError",
    "GatewayExecutionError",
    "GatewayResponseError",
    "AgentGateway",
    "ClaudeAgentGateway",
    "build_agent_options",
    "list_test_files",
    "read_test_content",
    "load_test_case",
    "AgentOutput",
    "GatewayResponse",
    "PromptEnvelope",
    "RunSummary",
    "TestCase",
    "TestResult",
    "TestRunOrchestrator",
    "TestState",
    "build_test_prompt",
    "RESPONSE_FIELDS",
    "format_summary",
    "print_summary",
    "write_json_report",
]
