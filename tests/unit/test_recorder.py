"""
Unit tests for the Recorder.

Tests cover:
- Session lifecycle and state machine
- Timestamps relative to the session start
- Assertion capture (default, configured and explicit paths)
- Scenario construction and persistence
"""

import logging
import re
from datetime import datetime

import pytest

from rehearse.assertions import PropertyResolver
from rehearse.config import HarnessConfig
from rehearse.errors import RecorderStateError
from rehearse.input import LiveInput
from rehearse.interfaces import SimulationContext
from rehearse.recorder import Recorder, RecorderState, default_session_name
from rehearse.scene import Entity, JsonSceneCodec, Scene
from rehearse.schema import UNNAMED_SCENARIO, Transition, Vector2
from rehearse.store import ScenarioStore


@pytest.fixture
def recorder(
    context: SimulationContext,
    codec: JsonSceneCodec,
    resolver: PropertyResolver,
) -> Recorder:
    return Recorder(context, codec, resolver)


class TestSessionLifecycle:
    """Tests for begin_session()/end_session()."""

    def test_starts_idle(self, recorder: Recorder) -> None:
        assert recorder.state == RecorderState.IDLE
        assert not recorder.is_recording

    def test_begin_and_end(self, recorder: Recorder) -> None:
        recorder.begin_session("walk", clock_now=10.0)
        assert recorder.is_recording

        scenario = recorder.end_session(clock_now=12.5)
        assert recorder.state == RecorderState.IDLE
        assert scenario.name == "walk"
        assert scenario.duration_seconds == pytest.approx(2.5)
        assert scenario.recorded_at_unix_millis > 0

    def test_end_while_idle_raises(self, recorder: Recorder) -> None:
        with pytest.raises(RecorderStateError):
            recorder.end_session(clock_now=1.0)

    def test_empty_name_falls_back(self, recorder: Recorder) -> None:
        recorder.begin_session("", clock_now=0.0)
        assert recorder.end_session(clock_now=1.0).name == UNNAMED_SCENARIO

    def test_begin_discards_previous_session(self, recorder: Recorder) -> None:
        recorder.begin_session("first", clock_now=0.0)
        recorder.record_event("Jump", Transition.PRESSED, 0.5)
        recorder.begin_session("second", clock_now=1.0)
        scenario = recorder.end_session(clock_now=2.0)
        assert scenario.name == "second"
        assert scenario.timeline_events == []

    def test_snapshot_taken_at_begin(
        self,
        recorder: Recorder,
        context: SimulationContext,
        codec: JsonSceneCodec,
    ) -> None:
        recorder.begin_session("walk", clock_now=0.0)
        context.scene.add_entity(Entity(name="Late"))
        scenario = recorder.end_session(clock_now=1.0)
        restored = codec.deserialize(scenario.snapshot)
        assert restored.find_entity_by_name("Late") is None
        assert restored.entity_count == 3

    def test_control_names_from_input(self, recorder: Recorder) -> None:
        recorder.begin_session("walk", clock_now=0.0)
        scenario = recorder.end_session(clock_now=1.0)
        assert scenario.control_names == ["Jump", "Left", "Right"]


class TestRecordEvent:
    """Tests for record_event()."""

    def test_timestamps_are_relative(self, recorder: Recorder) -> None:
        recorder.begin_session("walk", clock_now=100.0)
        recorder.record_event("Jump", Transition.PRESSED, 100.25)
        recorder.record_event("Jump", Transition.RELEASED, 100.75)
        scenario = recorder.end_session(clock_now=101.0)

        events = scenario.timeline_events
        assert [(e.control, e.transition) for e in events] == [
            ("Jump", Transition.PRESSED),
            ("Jump", Transition.RELEASED),
        ]
        assert events[0].timestamp == pytest.approx(0.25)
        assert events[1].timestamp == pytest.approx(0.75)

    def test_ignored_while_idle(self, recorder: Recorder) -> None:
        recorder.record_event("Jump", Transition.PRESSED, 1.0)
        assert recorder.event_count == 0

    def test_live_input_listener(
        self,
        recorder: Recorder,
        live_input: LiveInput,
    ) -> None:
        live_input.listener = recorder.record_event
        recorder.begin_session("walk", clock_now=live_input.current_time)

        live_input.set_down("Right")
        live_input.update(0.5)
        live_input.set_down("Right", False)
        live_input.update(0.5)

        scenario = recorder.end_session(clock_now=live_input.current_time)
        assert [(e.control, e.transition, e.timestamp) for e in scenario.timeline_events] == [
            ("Right", Transition.PRESSED, 0.5),
            ("Right", Transition.RELEASED, 1.0),
        ]


class TestCaptureAssertion:
    """Tests for capture_assertion()."""

    def test_default_paths(self, recorder: Recorder) -> None:
        recorder.begin_session("walk", clock_now=1.0)
        assertion_set = recorder.capture_assertion(clock_now=1.5)

        assert assertion_set is not None
        assert assertion_set.timestamp == pytest.approx(0.5)
        assert assertion_set.description == "Captured at 0.50s"
        paths = [e.path for e in assertion_set.expectations]
        assert paths[0] == "Scene.EntityCount"
        assert "Entity[Player].Position.X" in paths
        assert recorder.assertion_set_count == 1

    def test_explicit_paths(self, recorder: Recorder) -> None:
        recorder.begin_session("walk", clock_now=0.0)
        assertion_set = recorder.capture_assertion(
            clock_now=0.0,
            property_paths=["Entity[Player].Position"],
            description="start",
        )
        assert assertion_set.description == "start"
        assert [e.expected_value for e in assertion_set.expectations] == [Vector2(x=10.0, y=5.0)]

    def test_configured_paths_and_tolerance(
        self,
        context: SimulationContext,
        codec: JsonSceneCodec,
        resolver: PropertyResolver,
    ) -> None:
        config = HarnessConfig(capture_paths=["Scene.EntityCount"], default_tolerance=0.1)
        recorder = Recorder(context, codec, resolver, config=config)
        recorder.begin_session("walk", clock_now=0.0)
        assertion_set = recorder.capture_assertion(clock_now=0.0)
        assert [e.path for e in assertion_set.expectations] == ["Scene.EntityCount"]
        assert assertion_set.expectations[0].tolerance == pytest.approx(0.1)

    def test_capture_skips_unresolvable(self, recorder: Recorder) -> None:
        recorder.begin_session("walk", clock_now=0.0)
        assertion_set = recorder.capture_assertion(
            clock_now=0.0,
            property_paths=["Entity[Ghost].Position.X", "Scene.EntityCount"],
        )
        assert [e.path for e in assertion_set.expectations] == ["Scene.EntityCount"]

    def test_while_idle_warns(
        self,
        recorder: Recorder,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="rehearse"):
            assert recorder.capture_assertion(clock_now=0.0) is None
        assert any("no recording in progress" in r.getMessage() for r in caplog.records)

    def test_captures_live_values(self, recorder: Recorder, context: SimulationContext) -> None:
        recorder.begin_session("walk", clock_now=0.0)
        context.scene.update(2.0)
        assertion_set = recorder.capture_assertion(
            clock_now=2.0,
            property_paths=["Entity[Player].Position.X"],
        )
        assert assertion_set.expectations[0].expected_value == pytest.approx(12.0)


class TestPersistence:
    """Tests for saving through a store."""

    def test_saved_on_end(
        self,
        context: SimulationContext,
        codec: JsonSceneCodec,
        resolver: PropertyResolver,
        store: ScenarioStore,
    ) -> None:
        recorder = Recorder(context, codec, resolver, store=store)
        recorder.begin_session("saved", clock_now=0.0)
        recorder.capture_assertion(clock_now=0.0)
        scenario = recorder.end_session(clock_now=1.0)

        loaded = store.load("saved")
        assert loaded.model_dump() == scenario.model_dump()

    def test_default_session_name(self) -> None:
        name = default_session_name(datetime(2026, 10, 19, 9, 5, 7))
        assert name == "Test_20261019_090507"
        assert re.fullmatch(r"Test_\d{8}_\d{6}", default_session_name())


class TestEmptyScene:
    """Recording a scene with no named entities."""

    def test_only_entity_count(self, codec: JsonSceneCodec, resolver: PropertyResolver) -> None:
        context = SimulationContext(scene=Scene(), input_source=LiveInput())
        recorder = Recorder(context, codec, resolver)
        recorder.begin_session("empty", clock_now=0.0)
        assertion_set = recorder.capture_assertion(clock_now=0.0)
        assert [(e.path, e.expected_value) for e in assertion_set.expectations] == [
            ("Scene.EntityCount", 0)
        ]
