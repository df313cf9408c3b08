"""
Unit tests for the JSON file scenario store.

Tests cover:
- Save/load of complete scenarios
- File naming
- Batch loading that skips bad files
- Error mapping
"""

import json
import logging
from pathlib import Path
from typing import Callable

import pytest

from conftest import expect, press, release
from rehearse.errors import (
    ScenarioCorruptError,
    ScenarioDirectoryMissingError,
    ScenarioNotFoundError,
    StorageWriteError,
)
from rehearse.schema import AssertionSet, Scenario, Transition, Vector2
from rehearse.store import ScenarioStore, scenario_filename


class TestScenarioFilename:
    """Tests for scenario_filename()."""

    def test_plain_name(self) -> None:
        assert scenario_filename("Test_20261019_101500") == "Test_20261019_101500.json"

    def test_unsafe_characters(self) -> None:
        assert scenario_filename("jump/over crate") == "jump_over_crate.json"


class TestSaveAndLoad:
    """Tests for save() and load()."""

    def test_round_trip(
        self,
        store: ScenarioStore,
        make_scenario: Callable[..., Scenario],
    ) -> None:
        scenario = make_scenario(
            events=[press("Jump", 0.1), release("Jump", 0.4)],
            assertion_sets=[
                AssertionSet(
                    timestamp=1.0,
                    description="after jump",
                    expectations=[
                        expect("Scene.EntityCount", 3),
                        expect("Entity[Player].Position", Vector2(x=11.0, y=5.0)),
                        expect("Entity[Crate].Rigidbody.IsStatic", True),
                    ],
                )
            ],
        )
        path = store.save(scenario)
        assert path == store.directory / "walk_right.json"

        loaded = store.load("walk_right")
        assert loaded.model_dump() == scenario.model_dump()
        assert loaded.timeline_events[1].transition == Transition.RELEASED
        assert isinstance(loaded.assertion_sets[0].expectations[1].expected_value, Vector2)

    def test_file_is_readable_json(
        self,
        store: ScenarioStore,
        make_scenario: Callable[..., Scenario],
    ) -> None:
        path = store.save(make_scenario())
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["name"] == "walk_right"
        assert data["duration_seconds"] == 2.0
        assert "snapshot" in data

    def test_save_overwrites(
        self,
        store: ScenarioStore,
        make_scenario: Callable[..., Scenario],
    ) -> None:
        store.save(make_scenario(duration=1.0))
        store.save(make_scenario(duration=3.0))
        assert store.load("walk_right").duration_seconds == 3.0

    def test_colliding_names_warn(
        self,
        store: ScenarioStore,
        make_scenario: Callable[..., Scenario],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        first = store.save(make_scenario(name="jump/over"))
        with caplog.at_level(logging.WARNING, logger="rehearse"):
            second = store.save(make_scenario(name="jump_over"))

        assert first == second
        assert store.load("jump_over").name == "jump_over"
        assert any("replaces scenario jump/over" in r.getMessage() for r in caplog.records)

    def test_resave_same_name_is_quiet(
        self,
        store: ScenarioStore,
        make_scenario: Callable[..., Scenario],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        store.save(make_scenario())
        with caplog.at_level(logging.WARNING, logger="rehearse"):
            store.save(make_scenario(duration=5.0))
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

    def test_load_missing(self, store: ScenarioStore) -> None:
        with pytest.raises(ScenarioNotFoundError) as exc_info:
            store.load("nope")
        assert exc_info.value.scenario_name == "nope"

    def test_load_corrupt(self, store: ScenarioStore) -> None:
        store.directory.mkdir(parents=True)
        (store.directory / "broken.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ScenarioCorruptError):
            store.load("broken")

    def test_load_wrong_shape(self, store: ScenarioStore) -> None:
        store.directory.mkdir(parents=True)
        (store.directory / "shape.json").write_text('{"name": "shape"}', encoding="utf-8")
        with pytest.raises(ScenarioCorruptError) as exc_info:
            store.load("shape")
        assert "validation error" in exc_info.value.underlying_error

    def test_save_failure(self, temp_dir: Path, make_scenario: Callable[..., Scenario]) -> None:
        blocker = temp_dir / "blocker"
        blocker.write_text("not a directory")
        store = ScenarioStore(blocker / "scenarios")
        with pytest.raises(StorageWriteError):
            store.save(make_scenario())


class TestLoadAll:
    """Tests for load_all()."""

    def test_loads_in_file_order(
        self,
        store: ScenarioStore,
        make_scenario: Callable[..., Scenario],
    ) -> None:
        store.save(make_scenario(name="b_second"))
        store.save(make_scenario(name="a_first"))
        report = store.load_all()
        assert report.ok
        assert [s.name for s in report.scenarios] == ["a_first", "b_second"]

    def test_skips_bad_files(
        self,
        store: ScenarioStore,
        make_scenario: Callable[..., Scenario],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        store.save(make_scenario(name="good"))
        (store.directory / "bad.json").write_text("[]", encoding="utf-8")
        (store.directory / "notes.txt").write_text("ignored", encoding="utf-8")

        with caplog.at_level(logging.ERROR, logger="rehearse"):
            report = store.load_all()

        assert [s.name for s in report.scenarios] == ["good"]
        assert len(report.errors) == 1
        assert isinstance(report.errors[0], ScenarioCorruptError)
        assert not report.ok
        assert any("bad.json" in r.getMessage() for r in caplog.records)

    def test_missing_directory(self, temp_dir: Path) -> None:
        report = ScenarioStore(temp_dir / "missing").load_all()
        assert report.scenarios == []
        assert isinstance(report.errors[0], ScenarioDirectoryMissingError)

    def test_other_directory(
        self,
        store: ScenarioStore,
        temp_dir: Path,
        make_scenario: Callable[..., Scenario],
    ) -> None:
        other = ScenarioStore(temp_dir / "other")
        other.save(make_scenario(name="elsewhere"))
        report = store.load_all(temp_dir / "other")
        assert [s.name for s in report.scenarios] == ["elsewhere"]

    def test_empty_directory(self, store: ScenarioStore) -> None:
        store.directory.mkdir(parents=True)
        report = store.load_all()
        assert report.ok
        assert report.scenarios == []
