"""
Storage module for Rehearse.

Persists scenarios as one JSON file each, so every recording can be loaded,
shared and replayed on its own.

Design principles:
    - One file per scenario, named after the scenario
    - The file is a faithful encoding of the Scenario model
    - Loading a directory skips and reports bad files instead of failing

Example:
    from rehearse.store import ScenarioStore

    store = ScenarioStore("tests")
    report = store.load_all()
    for scenario in report.scenarios:
        print(scenario.name, scenario.duration_seconds)
"""

from rehearse.store.files import LoadReport, ScenarioStore, scenario_filename

__all__ = [
    "LoadReport",
    "ScenarioStore",
    "scenario_filename",
]
