"""
Runner Data Model
=================

Immutable records passed between the loader, the prompt builder, the
agent gateway, the orchestrator and the reporter.
"""

import json
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence


OUTPUT_STRUCTURED = "structured"
OUTPUT_TEXT = "text"
OUTPUT_ABSENT = "absent"

# ```json ... ``` or ``` ... ``` blocks in an agent answer
_FENCED_BLOCK_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


@dataclass(frozen=True)
class TestCase:
    """One natural-language test read from a test file."""
    __test__ = False  # not a pytest test class

    ordinal: int
    path: Path
    content: str

    @property
    def file_name(self) -> str:
        return self.path.name

    @property
    def lines(self) -> List[str]:
        """Instruction lines in file order, blank lines dropped."""
        return [line.strip() for line in self.content.splitlines() if line.strip()]


def _extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Find a JSON object in an agent answer, bare or inside a fenced block."""
    candidates = [text.strip()]
    candidates.extend(block.strip() for block in _FENCED_BLOCK_RE.findall(text))

    # Last resort: the outermost braces in free text
    start, end = text.find("{"), text.rfind("}")
    if 0 <= start < end:
        candidates.append(text[start:end + 1])

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except (json.JSONDecodeError, ValueError):
            continue
        if isinstance(data, dict):
            return data
    return None


@dataclass(frozen=True)
class AgentOutput:
    """
    What the agent returned for a prompt.

    The agent is only asked, never forced, to answer in the result shape,
    so its output is classified rather than validated:

    - structured: a JSON object was found in the answer (see ``data``)
    - text: a non-blank answer without a JSON object
    - absent: no answer at all
    """
    kind: str
    text: str = ""
    data: Optional[Dict[str, Any]] = None

    @classmethod
    def from_response(cls, response: Optional[str]) -> "AgentOutput":
        if response is None or not response.strip():
            return cls(kind=OUTPUT_ABSENT, text=response or "")

        data = _extract_json_object(response)
        if data is not None:
            return cls(kind=OUTPUT_STRUCTURED, text=response, data=data)
        return cls(kind=OUTPUT_TEXT, text=response)

    @property
    def is_structured(self) -> bool:
        return self.kind == OUTPUT_STRUCTURED

    def missing_fields(self, fields: Sequence[str]) -> List[str]:
        """Names from ``fields`` that the structured answer does not carry."""
        if not self.is_structured or self.data is None:
            return list(fields)
        return [name for name in fields if name not in self.data]

    def to_dict(self) -> Dict[str, Any]:
        if self.kind == OUTPUT_STRUCTURED:
            return {"kind": self.kind, "data": self.data}
        if self.kind == OUTPUT_TEXT:
            return {"kind": self.kind, "text": self.text}
        return {"kind": self.kind}

    def __str__(self) -> str:
        if self.kind == OUTPUT_STRUCTURED:
            return json.dumps(self.data, indent=2, ensure_ascii=False)
        if self.kind == OUTPUT_TEXT:
            return self.text
        return "<no response>"


@dataclass(frozen=True)
class PromptEnvelope:
    """Test content wrapped with the time it was sent and the answer instructions."""
    content: str
    timestamp: datetime

    def render(self, preamble: str, steps_label: str = "Test Steps:") -> str:
        text = (
            f"Current Date/Time: {self.timestamp.isoformat()}\n\n"
            f"{preamble}\n\n"
            f"{steps_label}\n"
            f"{self.content}"
        )
        return text.strip()


@dataclass(frozen=True)
class TestResult:
    """Outcome of one test. Exactly one is produced per test file."""
    __test__ = False

    test_file: str
    test_number: int
    prompt: str
    result: Optional[AgentOutput]
    success: bool
    error: Optional[str] = None
    duration_seconds: Optional[float] = None
    num_turns: Optional[int] = None
    cost_usd: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "test_file": self.test_file,
            "test_number": self.test_number,
            "prompt": self.prompt,
            "result": self.result.to_dict() if self.result is not None else None,
            "success": self.success,
            "error": self.error,
            "duration_seconds": self.duration_seconds,
            "num_turns": self.num_turns,
            "cost_usd": self.cost_usd,
        }


@dataclass(frozen=True)
class RunSummary:
    """Pass/fail tally for a run."""
    total: int = 0
    passed: int = 0
    failed: int = 0

    @classmethod
    def from_results(cls, results: Sequence[TestResult]) -> "RunSummary":
        passed = sum(1 for r in results if r.success)
        return cls(total=len(results), passed=passed, failed=len(results) - passed)

    @property
    def pass_rate(self) -> float:
        """Percentage of passed tests."""
        return (self.passed / self.total * 100) if self.total > 0 else 0.0

    @property
    def all_passed(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
        }


@dataclass
class GatewayResponse:
    """What the gateway hands back for one prompt: the answer plus run metadata."""
    output: AgentOutput
    num_turns: Optional[int] = None
    cost_usd: Optional[float] = None
    tool_calls: List[str] = field(default_factory=list)
