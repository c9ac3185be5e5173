"""
Result Reporting
================

Renders the pass/fail summary of a run, and optionally saves the results
as JSON.
"""

import json
import logging
from pathlib import Path
from typing import Sequence, Union

from .models import RunSummary, TestResult

logger = logging.getLogger(__name__)


SUMMARY_WIDTH = 60
PASSED_LABEL = "✅ PASSED"
FAILED_LABEL = "❌ FAILED"


def format_result_line(result: TestResult) -> str:
    status = PASSED_LABEL if result.success else FAILED_LABEL
    return f"{status} - Test #{result.test_number}: {result.test_file}"


def format_summary(results: Sequence[TestResult]) -> str:
    """
    Render the run summary as text.

    One line per result in the given order, an error line under each
    failure, then the totals. Depends only on ``results``.
    """
    lines = [
        "=" * SUMMARY_WIDTH,
        "TEST SUMMARY",
        "=" * SUMMARY_WIDTH,
    ]

    for result in results:
        lines.append(format_result_line(result))
        if not result.success:
            lines.append(f"  Error: {result.error or 'unknown error'}")

    summary = RunSummary.from_results(results)
    lines.append("")
    lines.append(f"Total: {summary.total} | Passed: {summary.passed} | Failed: {summary.failed}")
    return "\n".join(lines)


def print_summary(results: Sequence[TestResult]) -> None:
    print("\n" + format_summary(results))


def write_json_report(results: Sequence[TestResult], report_path: Union[str, Path]) -> Path:
    """
    Save the summary and every result as JSON.

    Returns:
        Path of the written report
    """
    path = Path(report_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    summary = RunSummary.from_results(results)
    report = {
        "summary": {**summary.to_dict(), "pass_rate": round(summary.pass_rate, 1)},
        "results": [r.to_dict() for r in results],
    }

    with open(path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False)

    logger.info(f"Saved JSON report to {path}")
    return path
