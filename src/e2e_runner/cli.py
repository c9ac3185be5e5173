"""
Natural-Language E2E Test Runner
================================

Reads ``*.test`` files from a directory, has the agent carry out each one
through its browser tools, and prints a pass/fail summary.

Example Usage:
    e2e-runner
    e2e-runner --tests-dir ./tests --max-steps 30
    e2e-runner --json-report reports/results.json
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .config import DEFAULT_MAX_STEPS, DEFAULT_MODEL, DEFAULT_TESTS_DIR, RunnerConfig
from .exceptions import ConfigurationError, DirectoryAccessError
from .gateway import ClaudeAgentGateway
from .loader import list_test_files
from .models import RunSummary, TestResult
from .orchestrator import TestRunOrchestrator
from .reporter import write_json_report

logger = logging.getLogger(__name__)


# Exit codes
EXIT_ALL_PASSED = 0
EXIT_TESTS_FAILED = 1
EXIT_FATAL = 2
EXIT_INTERRUPTED = 130  # Standard exit code for SIGINT


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="e2e-runner",
        description="Run natural-language end-to-end tests with an autonomous browser agent",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  ANTHROPIC_API_KEY    API key (API_KEY is accepted as well)
  ANTHROPIC_BASE_URL   Alternate API endpoint (or BASE_URL)
  MODEL_NAME           Model to use
  TESTS_DIR            Directory with *.test files
  MAX_STEPS            Maximum agent steps per test
  MCP_SERVERS          JSON object: {"name": {"command": ..., "args": [...]}}
  USE_AWS_BEDROCK=true Use AWS Bedrock (with AWS_REGION and AWS credentials)

Variables may also be placed in a .env file in the working directory.
        """,
    )

    parser.add_argument(
        "--tests-dir",
        type=Path,
        default=None,
        help=f"Directory containing *.test files (default: $TESTS_DIR or {DEFAULT_TESTS_DIR})",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help=f"Model to use (default: $MODEL_NAME or {DEFAULT_MODEL})",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help=f"Maximum agent steps per test (default: $MAX_STEPS or {DEFAULT_MAX_STEPS})",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="Alternate API endpoint",
    )
    parser.add_argument(
        "--strict-response",
        action="store_true",
        default=None,
        help="Fail tests whose answer lacks the requested JSON result fields",
    )
    parser.add_argument(
        "--json-report",
        type=Path,
        default=None,
        help="Also write the results to this JSON file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def load_config(args: argparse.Namespace) -> RunnerConfig:
    """
    Build the run configuration from the environment and CLI overrides.

    Raises:
        ConfigurationError: If the configuration is incomplete or invalid
    """
    config = RunnerConfig.from_env().with_overrides(
        tests_dir=args.tests_dir,
        model=args.model,
        max_steps=args.max_steps,
        base_url=args.base_url,
        strict_response=args.strict_response,
    )
    return config.validate()


async def run_tests(config: RunnerConfig) -> List[TestResult]:
    """
    Run the whole tests directory with one agent client for the run.

    Raises:
        DirectoryAccessError: If the tests directory cannot be listed; the
            agent and its MCP servers are not started in that case
    """
    list_test_files(config.tests_dir)

    async with ClaudeAgentGateway(config) as gateway:
        orchestrator = TestRunOrchestrator.from_config(config, gateway)
        results = await orchestrator.run_all_tests()
        orchestrator.print_summary(results)
    return results


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    load_dotenv()
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args)
    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(EXIT_FATAL)

    print(f"Using tests directory: {config.tests_dir}")

    try:
        results = asyncio.run(run_tests(config))
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(EXIT_INTERRUPTED)
    except DirectoryAccessError as e:
        print(f"\nError: {e}")
        sys.exit(EXIT_FATAL)
    except Exception as e:
        logger.exception("Test run aborted")
        print(f"\nFatal error: {e}")
        sys.exit(EXIT_FATAL)

    if args.json_report:
        write_json_report(results, args.json_report)

    summary = RunSummary.from_results(results)
    sys.exit(EXIT_ALL_PASSED if summary.all_passed else EXIT_TESTS_FAILED)


if __name__ == "__main__":
    main()
