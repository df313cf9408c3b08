"""
JSON report generator for Rehearse.

Generates structured JSON output for CI and other programmatic consumers.

Design Principles:
    - Complete data: every outcome with expected and actual values
    - Consistent schema: same structure across all runs
    - JSON-safe values: vectors become {"x": ..., "y": ...}, other
      non-JSON values become strings
"""

import json
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel

from rehearse.schema import AssertionOutcome, RunResult, RunStatus, RunSummary

REPORT_VERSION = "1.0"


def generate_json_report(results: list[RunResult], indent: int = 2) -> str:
    """
    Generate a JSON report for a run.

    Args:
        results: One RunResult per replayed scenario
        indent: JSON indentation level (default: 2)

    Returns:
        JSON string with full run report
    """
    report = build_report_dict(results)
    return json.dumps(report, indent=indent, default=_json_serializer)


def build_report_dict(results: list[RunResult]) -> dict[str, Any]:
    """
    Build a report dictionary for a run.

    Args:
        results: One RunResult per replayed scenario

    Returns:
        Dictionary with full run report
    """
    outcomes = [o for r in results for o in r.outcomes]
    summary = RunSummary.from_outcomes(outcomes)

    return {
        "report_version": REPORT_VERSION,
        "generated_at": datetime.now(UTC).isoformat(),
        "success": bool(results) and all(r.status == RunStatus.COMPLETED for r in results),
        "summary": {
            "scenarios": {
                "total": len(results),
                "completed": sum(1 for r in results if r.status == RunStatus.COMPLETED),
                "failed": sum(1 for r in results if r.status == RunStatus.FAILED),
                "errored": sum(1 for r in results if r.status == RunStatus.ERROR),
            },
            "assertions": summary.model_dump(),
        },
        "scenarios": [_serialize_result(r) for r in results],
    }


def _serialize_result(result: RunResult) -> dict[str, Any]:
    return {
        "name": result.scenario_name,
        "status": result.status.value,
        "counts": {
            "total": result.total,
            "passed": result.passed,
            "failed": result.failed,
            "errors": result.errors,
        },
        "outcomes": [_serialize_outcome(o) for o in result.outcomes],
    }


def _serialize_outcome(outcome: AssertionOutcome) -> dict[str, Any]:
    return {
        "timestamp": outcome.timestamp,
        "path": outcome.path,
        "status": outcome.status.value,
        "expected": _json_value(outcome.expected_value),
        "actual": _json_value(outcome.actual_value),
        "error": outcome.error_detail,
    }


def _json_value(value: Any) -> Any:
    """Make a captured or live value JSON-safe."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump()
    return str(value)


def _json_serializer(obj: Any) -> Any:
    """Custom JSON serializer for non-standard types."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
