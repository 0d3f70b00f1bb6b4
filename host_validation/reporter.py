"""Rendering of reports and selection of the process exit status."""

import logging
from collections.abc import Sequence
from typing import Any

from host_validation.models.report import Report
from host_validation.models.result import CheckResult

STATUS_SYMBOLS = {
    "passed": "✓",
    "failed": "✗",
    "error": "!",
    "timeout": "⏱",
}

EXIT_PASSED = 0
EXIT_FAILED = 1


def describe_result(result: CheckResult) -> str:
    """Outcome of one result as shown to a reader."""
    match result.status:
        case "passed":
            return "passed"
        case "failed":
            return f"failed: {result.message or 'no reason given'}"
        case "timeout":
            return f"timed out: {result.message}" if result.message else "timed out"
        case _:
            return f"errored: {result.message or 'unknown cause'}"


def render_report(report: Report) -> Sequence[str]:
    """Render one line per check in registration order, then the totals."""
    lines = [
        f"{STATUS_SYMBOLS.get(result.status, '?')} {result.name}: "
        f"{describe_result(result)} ({result.duration:.2f}s)"
        for result in report.results
    ]

    counts = report.counts
    lines.append(
        f"{len(report.results)} check(s): {counts['passed']} passed, "
        f"{counts['failed']} failed, {counts['timeout']} timed out, "
        f"{counts['error']} errored"
    )
    lines.append(f"Overall: {'PASSED' if report.passed else 'FAILED'}")
    return lines


def log_report_summary(log: logging.Logger, report: Report) -> None:
    """Log a formatted summary of check results."""
    log.info("=" * 80)
    log.info("Check Results Summary:")
    log.info("=" * 80)

    for line in render_report(report):
        log.info("%s", line)


def format_output(report: Report) -> dict[str, Any]:
    """Format the report for JSON output."""
    counts = report.counts
    return {
        "status": "passed" if report.passed else "failed",
        "total": len(report.results),
        "passed": counts["passed"],
        "failed": counts["failed"],
        "errors": counts["error"],
        "timeouts": counts["timeout"],
        "results": [
            {
                "check": result.name,
                "status": result.status,
                "duration": result.duration,
                "message": result.message,
            }
            for result in report.results
        ],
    }


def exit_code(report: Report) -> int:
    """Zero only when every check passed."""
    return EXIT_PASSED if report.passed else EXIT_FAILED
