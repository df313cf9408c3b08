"""
Tests for the console and JSON report generators.
"""

import json
from io import StringIO

import pytest
from rich.console import Console

from rehearse.report import build_report_dict, generate_json_report, print_run_report
from rehearse.report.console import ICON_ERROR, ICON_FAILURE, ICON_SUCCESS, status_icon
from rehearse.report.json import REPORT_VERSION
from rehearse.schema import AssertionOutcome, AssertionStatus, RunResult, RunStatus, Vector2


def _outcome(path: str, status: AssertionStatus, expected=1.0, actual=1.0, error=None):
    return AssertionOutcome(
        path=path,
        expected_value=expected,
        actual_value=actual,
        status=status,
        error_detail=error,
        timestamp=0.5,
    )


@pytest.fixture
def results() -> list[RunResult]:
    return [
        RunResult.from_outcomes(
            "jump_ok",
            [
                _outcome("Scene.EntityCount", AssertionStatus.PASS, 3, 3),
                _outcome("Entity[Player].Position.X", AssertionStatus.PASS),
            ],
        ),
        RunResult.from_outcomes(
            "jump_broken",
            [
                _outcome(
                    "Entity[Player].Position",
                    AssertionStatus.FAIL,
                    Vector2(x=1.0, y=2.0),
                    Vector2(x=1.5, y=2.0),
                ),
                _outcome(
                    "Entity[Ghost].Position.X",
                    AssertionStatus.ERROR,
                    actual=None,
                    error="Entity 'Ghost' not found in scene",
                ),
            ],
        ),
    ]


def _render(results: list[RunResult], verbose: bool = False) -> str:
    buffer = StringIO()
    console = Console(file=buffer, width=160, no_color=True)
    print_run_report(results, console, verbose=verbose)
    return buffer.getvalue()


class TestConsoleReport:
    """Tests for print_run_report()."""

    def test_status_icons(self) -> None:
        assert status_icon(RunStatus.COMPLETED) == ICON_SUCCESS
        assert status_icon(AssertionStatus.FAIL) == ICON_FAILURE
        assert status_icon(RunStatus.ERROR) == ICON_ERROR

    def test_empty_run(self) -> None:
        assert "No scenarios were run." in _render([])

    def test_scenario_headers(self, results: list[RunResult]) -> None:
        output = _render(results)
        assert "jump_ok" in output
        assert "COMPLETED" in output
        assert "jump_broken" in output
        assert "ERROR" in output
        assert "0/2 passed" in output

    def test_passing_outcomes_collapsed(self, results: list[RunResult]) -> None:
        output = _render(results)
        assert "All 2 assertions passed." in output
        assert "Scene.EntityCount" not in output
        assert "Entity[Player].Position" in output
        assert "Entity[Ghost].Position.X" in output
        assert "not found in scene" in output

    def test_verbose_lists_everything(self, results: list[RunResult]) -> None:
        output = _render(results, verbose=True)
        assert "Scene.EntityCount" in output
        assert "All 2 assertions passed." not in output

    def test_no_assertions(self) -> None:
        output = _render([RunResult.from_outcomes("idle", [])])
        assert "No assertions." in output

    def test_summary(self, results: list[RunResult]) -> None:
        output = _render(results)
        assert "Summary" in output
        assert "1/2 completed" in output


class TestJsonReport:
    """Tests for build_report_dict() and generate_json_report()."""

    def test_structure(self, results: list[RunResult]) -> None:
        report = build_report_dict(results)
        assert report["report_version"] == REPORT_VERSION
        assert report["success"] is False
        assert set(report) == {"report_version", "generated_at", "success", "summary", "scenarios"}

    def test_summary_counts(self, results: list[RunResult]) -> None:
        summary = build_report_dict(results)["summary"]
        assert summary["scenarios"] == {"total": 2, "completed": 1, "failed": 0, "errored": 1}
        assert summary["assertions"] == {
            "total_assertions": 4,
            "passed": 2,
            "failed": 1,
            "errors": 1,
        }

    def test_empty_run_is_not_success(self) -> None:
        assert build_report_dict([])["success"] is False

    def test_scenario_entries(self, results: list[RunResult]) -> None:
        scenarios = build_report_dict(results)["scenarios"]
        assert [s["name"] for s in scenarios] == ["jump_ok", "jump_broken"]
        assert scenarios[1]["status"] == "error"
        assert scenarios[1]["counts"] == {"total": 2, "passed": 0, "failed": 1, "errors": 1}

        failed, errored = scenarios[1]["outcomes"]
        assert failed["expected"] == {"x": 1.0, "y": 2.0}
        assert failed["actual"] == {"x": 1.5, "y": 2.0}
        assert failed["status"] == "fail"
        assert errored["actual"] is None
        assert errored["error"] == "Entity 'Ghost' not found in scene"

    def test_generated_json_parses(self, results: list[RunResult]) -> None:
        data = json.loads(generate_json_report(results))
        assert data["report_version"] == REPORT_VERSION
        assert data["scenarios"][0]["outcomes"][0]["expected"] == 3
        assert "generated_at" in data

    def test_all_completed_is_success(self, results: list[RunResult]) -> None:
        assert build_report_dict(results[:1])["success"] is True

    def test_unusual_values_become_strings(self) -> None:
        result = RunResult.from_outcomes(
            "odd",
            [_outcome("Entity[Player].Tags", AssertionStatus.FAIL, expected={1, 2}, actual=None)],
        )
        data = json.loads(generate_json_report([result]))
        assert data["scenarios"][0]["outcomes"][0]["expected"] == "{1, 2}"
