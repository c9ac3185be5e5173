"""
Test Run Orchestrator
=====================

Runs every test file in a directory through the agent gateway, one at a
time, and collects one TestResult per file.
"""

import logging
import time
from enum import Enum
from pathlib import Path
from typing import List, Sequence, Union

from .config import RunnerConfig
from .exceptions import GatewayResponseError
from .gateway import AgentGateway
from .loader import list_test_files, load_test_case
from .models import TestResult
from .prompts import RESPONSE_FIELDS, build_test_prompt
from .reporter import print_summary

logger = logging.getLogger(__name__)


BANNER_WIDTH = 60


class TestState(Enum):
    """Lifecycle of a single test. No state is entered twice."""
    __test__ = False

    PENDING = "pending"
    READING = "reading"
    PROMPTING = "prompting"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def _error_message(error: BaseException) -> str:
    return str(error) or type(error).__name__


class TestRunOrchestrator:
    """
    Sequences loading, prompting and execution for a tests directory.

    Args:
        gateway: Agent gateway, owned by the caller for the whole run
        tests_dir: Directory containing ``*.test`` files
        strict_response: Treat answers without the requested JSON fields as failures
    """
    __test__ = False

    def __init__(
        self,
        gateway: AgentGateway,
        tests_dir: Union[str, Path],
        strict_response: bool = False,
    ):
        self.gateway = gateway
        self.tests_dir = Path(tests_dir)
        self.strict_response = strict_response

    @classmethod
    def from_config(cls, config: RunnerConfig, gateway: AgentGateway) -> "TestRunOrchestrator":
        return cls(gateway, config.tests_dir, strict_response=config.strict_response)

    def get_test_files(self) -> List[Path]:
        return list_test_files(self.tests_dir)

    async def run_single_test(self, test_file: Union[str, Path], test_number: int) -> TestResult:
        """
        Run one test file through the agent.

        Never raises for an ordinary exception: read errors, agent errors and
        anything unexpected are returned as a failed TestResult so that one
        test cannot abort the run.
        """
        path = Path(test_file)
        state = TestState.PENDING
        test_content = ""
        start_time = time.time()

        print(f"\n{'=' * BANNER_WIDTH}")
        print(f"Running Test #{test_number}: {path.name}")
        print("=" * BANNER_WIDTH)

        def advance(new_state: TestState) -> TestState:
            logger.debug(f"Test #{test_number} {path.name}: {state.value} -> {new_state.value}")
            return new_state

        try:
            state = advance(TestState.READING)
            test_case = load_test_case(path, test_number)
            test_content = test_case.content
            print(f"\nTest Content:\n{test_content}\n")

            state = advance(TestState.PROMPTING)
            prompt = build_test_prompt(test_content)

            state = advance(TestState.EXECUTING)
            response = await self.gateway.execute(prompt)

            if self.strict_response:
                missing = response.output.missing_fields(RESPONSE_FIELDS)
                if missing:
                    raise GatewayResponseError(
                        f"Agent response is missing required field(s): {', '.join(missing)}"
                    )

            state = advance(TestState.SUCCEEDED)
            print(f"\nResult:\n{response.output}")

            return TestResult(
                test_file=path.name,
                test_number=test_number,
                prompt=test_content,
                result=response.output,
                success=True,
                duration_seconds=round(time.time() - start_time, 3),
                num_turns=response.num_turns,
                cost_usd=response.cost_usd,
            )

        except Exception as e:
            failed_during = state
            state = advance(TestState.FAILED)
            logger.error(f"Test #{test_number} {path.name} failed while {failed_during.value}: {e}")
            print(f"\nError running test: {_error_message(e)}")

            return TestResult(
                test_file=path.name,
                test_number=test_number,
                prompt=test_content,
                result=None,
                success=False,
                error=_error_message(e),
                duration_seconds=round(time.time() - start_time, 3),
            )

    async def run_all_tests(self) -> List[TestResult]:
        """
        Run every test file in name order, sequentially.

        Raises:
            DirectoryAccessError: If the tests directory cannot be listed
        """
        test_files = self.get_test_files()

        print(f"\nFound {len(test_files)} test file(s):")
        for test_file in test_files:
            print(f"  - {test_file.name}")

        results: List[TestResult] = []
        for test_number, test_file in enumerate(test_files, start=1):
            result = await self.run_single_test(test_file, test_number)
            results.append(result)

        return results

    def print_summary(self, results: Sequence[TestResult]) -> None:
        print_summary(results)
