"""
Scenario recorder for Rehearse.

The Recorder captures a live session as a Scenario:
    - a snapshot of the starting state
    - every input transition, timestamped relative to the session start
    - assertion sets capturing selected properties at chosen moments

State machine:
    IDLE --begin_session--> RECORDING --end_session--> IDLE

Only one session can be active. Calling begin_session() while recording
discards the session in progress; guarding against that is the caller's
responsibility.

Example:
    recorder = Recorder(context, JsonSceneCodec(), resolver, store)
    live_input.listener = recorder.record_event

    recorder.begin_session("jump_over_crate", clock_now=host.clock)
    ...                                   # play; input is recorded
    recorder.capture_assertion(host.clock)
    ...
    scenario = recorder.end_session(host.clock)
"""

import logging
from datetime import datetime
from enum import Enum

from rehearse.assertions.evaluator import capture_expectations, default_capture_paths
from rehearse.assertions.resolver import PropertyResolver
from rehearse.config import HarnessConfig
from rehearse.errors import RecorderStateError
from rehearse.interfaces import SceneCodec, ScenarioStorage, SimulationContext
from rehearse.schema import (
    UNNAMED_SCENARIO,
    AssertionSet,
    Scenario,
    TimelineEvent,
    Transition,
    now_unix_millis,
)

logger = logging.getLogger(__name__)


class RecorderState(str, Enum):
    """Recording state."""

    IDLE = "idle"
    RECORDING = "recording"


def default_session_name(now: datetime | None = None) -> str:
    """Session name derived from the local time, e.g. Test_20261019_101500."""
    now = now or datetime.now()
    return f"Test_{now:%Y%m%d_%H%M%S}"


class Recorder:
    """
    Records live sessions into scenarios.

    Attributes:
        context: Live scene/input pair being recorded
        codec: Serializes the starting scene into the scenario snapshot
        resolver: Reads property values for assertion capture
        store: Where finished scenarios are saved (None = not persisted)
        config: Capture defaults (tolerance, default capture paths)
    """

    def __init__(
        self,
        context: SimulationContext,
        codec: SceneCodec,
        resolver: PropertyResolver,
        store: ScenarioStorage | None = None,
        config: HarnessConfig | None = None,
    ) -> None:
        self.context = context
        self.codec = codec
        self.resolver = resolver
        self.store = store
        self.config = config or HarnessConfig()

        self._state = RecorderState.IDLE
        self._name = ""
        self._snapshot = ""
        self._reference_time = 0.0
        self._events: list[TimelineEvent] = []
        self._assertion_sets: list[AssertionSet] = []

    @property
    def state(self) -> RecorderState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state == RecorderState.RECORDING

    @property
    def event_count(self) -> int:
        return len(self._events)

    @property
    def assertion_set_count(self) -> int:
        return len(self._assertion_sets)

    def begin_session(self, name: str, clock_now: float) -> None:
        """
        Start recording.

        Snapshots the live scene, clears buffered events and assertions, and
        makes clock_now the zero point for every later timestamp.

        Args:
            name: Scenario name (also its storage key)
            clock_now: Current simulation clock, in seconds
        """
        self._snapshot = self.codec.serialize(self.context.scene)
        self._events = []
        self._assertion_sets = []
        self._name = name
        self._reference_time = clock_now
        self._state = RecorderState.RECORDING
        logger.info("Recording session %s started at %.3fs", name or UNNAMED_SCENARIO, clock_now)

    def record_event(self, control: str, transition: Transition, clock_now: float) -> None:
        """
        Append an input transition.

        Transitions are not validated; the live input layer is trusted to
        alternate press and release. Calls while idle are ignored.
        """
        if not self.is_recording:
            logger.debug("Ignoring %s %s: not recording", control, transition.value)
            return

        self._events.append(
            TimelineEvent(
                control=control,
                transition=transition,
                timestamp=clock_now - self._reference_time,
            )
        )

    def capture_assertion(
        self,
        clock_now: float,
        property_paths: list[str] | None = None,
        description: str | None = None,
    ) -> AssertionSet | None:
        """
        Capture the current value of properties as a scheduled assertion set.

        Args:
            clock_now: Current simulation clock, in seconds
            property_paths: Paths to capture. Defaults to the configured
                capture paths, or the built-in set (entity count, and for
                each named entity its position, collider bounds and
                rigid-body state)
            description: Optional label for the set

        Returns:
            The captured set, or None if no session is recording
        """
        if not self.is_recording:
            logger.warning("Cannot capture assertion - no recording in progress")
            return None

        timestamp = clock_now - self._reference_time
        scene = self.context.scene

        paths = property_paths or self.config.capture_paths
        if not paths:
            paths = default_capture_paths(scene, self.resolver.index)

        expectations = capture_expectations(
            self.resolver,
            scene,
            paths,
            tolerance=self.config.default_tolerance,
        )
        assertion_set = AssertionSet(
            timestamp=timestamp,
            description=description or f"Captured at {timestamp:.2f}s",
            expectations=expectations,
        )
        self._assertion_sets.append(assertion_set)

        logger.info(
            "Captured %d of %d properties at %.2fs",
            len(expectations),
            len(paths),
            timestamp,
        )
        return assertion_set

    def end_session(self, clock_now: float) -> Scenario:
        """
        Finish recording and build the scenario.

        The scenario is saved through the store, if one is configured.

        Returns:
            The recorded scenario

        Raises:
            RecorderStateError: If no session is recording
            StorageWriteError: If the scenario could not be saved
        """
        if not self.is_recording:
            raise RecorderStateError(state=self._state.value)

        scenario = Scenario(
            name=self._name or UNNAMED_SCENARIO,
            duration_seconds=max(0.0, clock_now - self._reference_time),
            snapshot=self._snapshot,
            timeline_events=self._events,
            control_names=self.context.input_source.list_controls(),
            assertion_sets=self._assertion_sets,
            recorded_at_unix_millis=now_unix_millis(),
        )

        self._state = RecorderState.IDLE
        self._events = []
        self._assertion_sets = []

        logger.info(
            "Recording session %s ended: %.2fs, %d events, %d assertion sets",
            scenario.name,
            scenario.duration_seconds,
            len(scenario.timeline_events),
            len(scenario.assertion_sets),
        )

        if self.store is not None:
            self.store.save(scenario)

        return scenario
