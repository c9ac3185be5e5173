"""
Prompt Building
===============

Wraps raw test text into the prompt sent to the agent: a timestamp header,
instructions asking for a JSON result, and the verbatim test steps.
"""

from datetime import datetime, timezone
from typing import Optional

from .models import PromptEnvelope


# The four fields the agent is asked to answer with
RESPONSE_FIELDS = ("success", "steps_completed", "observations", "final_status")

TEST_STEPS_LABEL = "Test Steps:"

INSTRUCTION_PREAMBLE = """Instructions:
- Follow the test steps below carefully
- Return your response in JSON format with the following structure:
  {
    "success": boolean,
    "steps_completed": string[],
    "observations": string,
    "final_status": string
  }"""

DEFAULT_SYSTEM_PROMPT = (
    "You are an expert QA engineer executing end-to-end tests. "
    "Use the browser tools to carry out each test step against the live "
    "application, observe what actually happens, and report the outcome honestly."
)


def build_prompt_envelope(test_content: str, now: Optional[datetime] = None) -> PromptEnvelope:
    """
    Capture the current time alongside the test content.

    Args:
        test_content: Raw test text, passed through unmodified
        now: Timestamp to use (default: the current UTC time)
    """
    return PromptEnvelope(
        content=test_content,
        timestamp=now or datetime.now(timezone.utc),
    )


def build_test_prompt(test_content: str, now: Optional[datetime] = None) -> str:
    """
    Build the prompt for one test.

    The timestamp is taken at call time, so two calls with the same content
    give different prompts. The answer format is only requested; nothing
    downstream relies on the agent following it.

    Args:
        test_content: Raw test text
        now: Timestamp to use (default: the current UTC time)

    Returns:
        Prompt text without leading or trailing whitespace
    """
    envelope = build_prompt_envelope(test_content, now)
    return envelope.render(INSTRUCTION_PREAMBLE, TEST_STEPS_LABEL)
