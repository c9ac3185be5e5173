"""
Agent Execution Gateway
=======================

Hands prompts to a Claude Agent SDK client that drives the configured MCP
tool servers, and turns the streamed answer into an AgentOutput.
"""

import logging
import time
import uuid
from typing import Optional, Protocol

from claude_agent_sdk import ClaudeAgentOptions, ClaudeSDKClient

from .config import RunnerConfig
from .exceptions import GatewayExecutionError
from .models import AgentOutput, GatewayResponse
from .prompts import DEFAULT_SYSTEM_PROMPT
from .tools import get_all_allowed_tools, get_disallowed_tools, is_mcp_tool

logger = logging.getLogger(__name__)


# 10MB buffer for large tool responses (page snapshots)
MAX_BUFFER_SIZE = 10 * 1024 * 1024
MAX_LOGGED_INPUT_LEN = 200
MAX_LOGGED_ERROR_LEN = 500


class AgentGateway(Protocol):
    """Anything that can execute a prompt against the target system."""

    async def execute(self, prompt: str) -> GatewayResponse:
        ...


def build_agent_options(config: RunnerConfig, system_prompt: Optional[str] = None) -> ClaudeAgentOptions:
    """
    Build Claude Agent SDK options for a test run.

    Args:
        config: Run configuration
        system_prompt: Optional custom system prompt (replaces default)

    Returns:
        Options limiting the agent to the configured MCP servers and step bound
    """
    return ClaudeAgentOptions(
        model=config.model,
        system_prompt=system_prompt or DEFAULT_SYSTEM_PROMPT,
        mcp_servers=config.mcp_servers,
        allowed_tools=get_all_allowed_tools(config.mcp_servers),
        disallowed_tools=get_disallowed_tools(),
        max_turns=config.max_steps,
        max_buffer_size=MAX_BUFFER_SIZE,
        permission_mode="bypassPermissions",
        env=config.client_env(),
    )


def _log_tool_use(tool_name: str, thinking_time: float, tool_input: Optional[object] = None) -> None:
    logger.info(f"[Tool: {tool_name}] (after {thinking_time:.1f}s thinking)")

    if tool_input is not None:
        input_str = str(tool_input)
        if len(input_str) > MAX_LOGGED_INPUT_LEN:
            input_str = f"{input_str[:MAX_LOGGED_INPUT_LEN]}..."
        logger.debug(f"   Input: {input_str}")


def _log_tool_result(result_content: object, is_error: bool, execution_time: Optional[float] = None) -> None:
    time_suffix = f" (took {execution_time:.1f}s)" if execution_time is not None else ""

    if is_error:
        error_str = str(result_content)[:MAX_LOGGED_ERROR_LEN]
        logger.warning(f"   [Error]{time_suffix} {error_str}")
    else:
        logger.info(f"   [Done]{time_suffix}")


class ClaudeAgentGateway:
    """
    Gateway backed by one long-lived ClaudeSDKClient.

    The client (and with it the MCP server processes) is started when the
    gateway is entered and stopped when it exits, so a whole run shares a
    single agent process and browser session. Each message is tagged with a
    per-test session id; conversation history is not reset between tests.

    Example:
        async with ClaudeAgentGateway(config) as gateway:
            orchestrator = TestRunOrchestrator.from_config(config, gateway)
            results = await orchestrator.run_all_tests()
    """

    def __init__(self, config: RunnerConfig, system_prompt: Optional[str] = None):
        self.config = config
        self.options = build_agent_options(config, system_prompt)
        self._client: Optional[ClaudeSDKClient] = None

    async def __aenter__(self) -> "ClaudeAgentGateway":
        logger.info(
            f"Starting agent client (model: {self.config.model}, "
            f"max steps: {self.config.max_steps}, "
            f"MCP servers: {', '.join(self.config.mcp_servers)})"
        )
        client = ClaudeSDKClient(options=self.options)
        await client.connect()
        self._client = client
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        client, self._client = self._client, None
        if client is None:
            return
        try:
            await client.disconnect()
            logger.info("[Cleanup] Client resources released")
        except Exception as e:
            logger.warning(f"[Cleanup] Warning: {e}")

    async def execute(self, prompt: str) -> GatewayResponse:
        """
        Send a prompt and collect the agent's answer.

        Raises:
            GatewayExecutionError: If the client fails or the agent run ends in error
        """
        if self._client is None:
            raise GatewayExecutionError("Agent gateway is not connected; use it as 'async with'")

        session_id = f"test-{uuid.uuid4().hex}"
        try:
            start_time = time.time()
            await self._client.query(prompt, session_id=session_id)
            logger.debug(f"[Query sent in {time.time() - start_time:.1f}s] session {session_id}")

            return await self._collect_response()
        except GatewayExecutionError:
            raise
        except Exception as e:
            raise GatewayExecutionError(f"Agent execution failed: {e}") from e

    async def _collect_response(self) -> GatewayResponse:
        response_text = ""
        tool_calls = []
        last_event_time = time.time()
        tool_start_time: Optional[float] = None
        result_msg = None

        async for msg in self._client.receive_response():
            msg_type = type(msg).__name__

            if msg_type == "ResultMessage":
                result_msg = msg

            elif msg_type == "AssistantMessage" and hasattr(msg, "content"):
                for block in msg.content:
                    block_type = type(block).__name__

                    if block_type == "TextBlock" and hasattr(block, "text"):
                        response_text += block.text
                    elif block_type == "ToolUseBlock" and hasattr(block, "name"):
                        if not is_mcp_tool(block.name, self.config.mcp_servers):
                            logger.warning(f"Agent called a tool outside the configured MCP servers: {block.name}")
                        tool_calls.append(block.name)
                        _log_tool_use(block.name, time.time() - last_event_time, getattr(block, "input", None))
                        tool_start_time = time.time()

            elif msg_type == "UserMessage" and hasattr(msg, "content") and isinstance(msg.content, list):
                for block in msg.content:
                    if type(block).__name__ == "ToolResultBlock":
                        execution_time = None
                        if tool_start_time is not None:
                            execution_time = time.time() - tool_start_time

                        _log_tool_result(
                            getattr(block, "content", ""),
                            bool(getattr(block, "is_error", False)),
                            execution_time,
                        )
                        last_event_time = time.time()
                        tool_start_time = None

        if result_msg is None:
            raise GatewayExecutionError("Agent stream ended without a result message")

        if getattr(result_msg, "is_error", False):
            subtype = getattr(result_msg, "subtype", None)
            if subtype == "error_max_turns":
                message = f"Agent reached the step limit ({self.config.max_steps}) before finishing"
            else:
                detail = getattr(result_msg, "result", None) or subtype or "unknown error"
                message = f"Agent run ended in error: {detail}"
            raise GatewayExecutionError(message, subtype=subtype)

        # The final result text repeats the last assistant turn; prefer it when present
        final_text = getattr(result_msg, "result", None) or response_text

        return GatewayResponse(
            output=AgentOutput.from_response(final_text),
            num_turns=getattr(result_msg, "num_turns", None),
            cost_usd=getattr(result_msg, "total_cost_usd", None),
            tool_calls=tool_calls,
        )
