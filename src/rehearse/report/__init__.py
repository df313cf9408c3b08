"""
Reporting module for Rehearse.

This module turns replay results into human-readable and machine-readable
reports.

Output formats:
    - Console: Rich terminal output with per-scenario tables and status icons
    - JSON: Structured output for CI and programmatic consumption

Example:
    from rehearse.report import generate_json_report, print_run_report

    results = runner.run_results()
    print_run_report(results)
    json_str = generate_json_report(results)
"""

from rehearse.report.console import print_run_report
from rehearse.report.json import build_report_dict, generate_json_report

__all__ = [
    "print_run_report",
    "generate_json_report",
    "build_report_dict",
]
