"""
Schema definitions for Rehearse.

This module defines the Pydantic models shared by the recorder, the replay
orchestrator and the scenario store:
- TimelineEvent: One discrete input transition at a simulated time
- ExpectedProperty/AssertionSet: Property expectations scheduled at a time
- Scenario: A persisted, independently replayable recording
- AssertionOutcome/RunResult: What happened when a scenario was replayed

Design Decisions:
    - Recorded data is immutable (frozen=True) once created
    - Unknown fields are rejected (extra="forbid")
    - Timestamps are seconds relative to the scenario's own start
    - Captured values are a tagged union so they survive JSON round trips
"""

from collections import Counter
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TOLERANCE = 0.001
UNNAMED_SCENARIO = "Unnamed Test"

# Recorded times are differences of summed step deltas; replay sums from zero.
# Both sides may differ by float rounding, never by anything near a step.
TIME_EPSILON = 1e-9


# =============================================================================
# Enums
# =============================================================================


class Transition(str, Enum):
    """Kind of discrete input transition."""

    PRESSED = "pressed"
    RELEASED = "released"


class AssertionStatus(str, Enum):
    """Outcome of evaluating one expected property."""

    PASS = "pass"
    FAIL = "fail"
    ERROR = "error"


class RunStatus(str, Enum):
    """Derived status of a replayed scenario."""

    COMPLETED = "completed"
    FAILED = "failed"
    ERROR = "error"


# =============================================================================
# Value Models
# =============================================================================


class Vector2(BaseModel):
    """
    An immutable 2D vector.

    Used both for live positions in the reference scene and for captured
    vector values, so both sides of a comparison share one representation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Vector2") -> "Vector2":
        return Vector2(x=self.x + other.x, y=self.y + other.y)

    def __sub__(self, other: "Vector2") -> "Vector2":
        return Vector2(x=self.x - other.x, y=self.y - other.y)

    def __mul__(self, factor: float) -> "Vector2":
        return Vector2(x=self.x * factor, y=self.y * factor)

    def __str__(self) -> str:
        return f"({self.x:g}, {self.y:g})"


# Values that survive the scenario serialization boundary.
CapturedValue = bool | int | float | str | Vector2 | None


# =============================================================================
# Recording Models
# =============================================================================


class TimelineEvent(BaseModel):
    """
    One recorded input transition.

    Attributes:
        control: Logical control identifier (e.g., "Jump")
        transition: Whether the control was pressed or released
        timestamp: Seconds since the scenario started
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    control: str = Field(..., description="Logical control identifier", min_length=1)
    transition: Transition = Field(..., description="Pressed or released")
    timestamp: float = Field(..., description="Seconds since scenario start")


class ExpectedProperty(BaseModel):
    """
    A single property expectation.

    Attributes:
        path: Dotted property path (e.g., "Entity[Player].Position.X")
        expected_value: The value captured while recording
        declared_type: Type tag of the captured value
        tolerance: Allowed absolute difference for numeric/vector values
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str = Field(..., description="Dotted property path", min_length=1)
    expected_value: CapturedValue = Field(default=None, description="Captured value")
    declared_type: str = Field(default="NoneType", description="Type tag of the captured value")
    tolerance: float = Field(
        default=DEFAULT_TOLERANCE,
        description="Allowed absolute difference",
        ge=0,
    )


class AssertionSet(BaseModel):
    """
    Expectations scheduled for one simulated timestamp.

    Attributes:
        timestamp: Seconds since scenario start when the set is due
        description: Optional human-readable label
        expectations: Ordered property expectations
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    timestamp: float = Field(..., description="Seconds since scenario start")
    description: str | None = Field(default=None, description="Optional label")
    expectations: list[ExpectedProperty] = Field(
        default_factory=list,
        description="Ordered property expectations",
    )


class Scenario(BaseModel):
    """
    A complete recording, replayable independently of the recording session.

    Attributes:
        version: Schema version for forward compatibility
        name: Scenario name, also its storage key
        duration_seconds: Length of the recording
        snapshot: Serialized starting state (opaque to the harness)
        timeline_events: Input transitions in recorded order
        control_names: Every control that existed while recording
        assertion_sets: Scheduled expectations in recorded order
        recorded_at_unix_millis: Wall-clock time the recording ended
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = Field(default="1.0", description="Scenario schema version")
    name: str = Field(..., description="Scenario name", min_length=1)
    duration_seconds: float = Field(..., description="Recording length", ge=0)
    snapshot: str = Field(..., description="Serialized starting state")
    timeline_events: list[TimelineEvent] = Field(default_factory=list)
    control_names: list[str] = Field(default_factory=list)
    assertion_sets: list[AssertionSet] = Field(default_factory=list)
    recorded_at_unix_millis: int = Field(default_factory=lambda: now_unix_millis())

    @field_validator("control_names")
    @classmethod
    def dedupe_control_names(cls, v: list[str]) -> list[str]:
        """Control names form a set; keep first-seen order."""
        return list(dict.fromkeys(v))

    @property
    def expectation_count(self) -> int:
        """Total number of expected properties across all sets."""
        return sum(len(s.expectations) for s in self.assertion_sets)


# =============================================================================
# Result Models
# =============================================================================


class AssertionOutcome(BaseModel):
    """
    Result of evaluating one expected property during replay.

    Attributes:
        path: The property path that was evaluated
        expected_value: Value captured while recording
        actual_value: Value resolved from live state (None on error)
        status: Pass, fail or error
        error_detail: Error description when status is error
        timestamp: Scheduled time of the assertion set
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    path: str
    expected_value: Any = None
    actual_value: Any = None
    status: AssertionStatus
    error_detail: str | None = None
    timestamp: float = 0.0


class RunResult(BaseModel):
    """
    Result of replaying one scenario.

    Attributes:
        scenario_name: Name of the replayed scenario
        outcomes: Every assertion outcome in evaluation order
        status: Derived summary status
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    scenario_name: str
    outcomes: list[AssertionOutcome] = Field(default_factory=list)
    status: RunStatus = RunStatus.COMPLETED

    @classmethod
    def from_outcomes(
        cls, scenario_name: str, outcomes: list[AssertionOutcome]
    ) -> "RunResult":
        """Build a result, deriving its status from the outcomes."""
        return cls(
            scenario_name=scenario_name,
            outcomes=list(outcomes),
            status=derive_status(outcomes),
        )

    @property
    def passed(self) -> int:
        return sum(1 for o in self.outcomes if o.status == AssertionStatus.PASS)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.status == AssertionStatus.FAIL)

    @property
    def errors(self) -> int:
        return sum(1 for o in self.outcomes if o.status == AssertionStatus.ERROR)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def success(self) -> bool:
        """Whether every assertion passed."""
        return self.status == RunStatus.COMPLETED


class RunSummary(BaseModel):
    """Totals over every outcome of a run session."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    total_assertions: int = 0
    passed: int = 0
    failed: int = 0
    errors: int = 0

    @classmethod
    def from_outcomes(cls, outcomes: list[AssertionOutcome]) -> "RunSummary":
        counts = Counter(o.status for o in outcomes)
        return cls(
            total_assertions=len(outcomes),
            passed=counts[AssertionStatus.PASS],
            failed=counts[AssertionStatus.FAIL],
            errors=counts[AssertionStatus.ERROR],
        )


# =============================================================================
# Helpers
# =============================================================================


def now_unix_millis() -> int:
    """Get current UTC time as Unix milliseconds."""
    return int(datetime.now(UTC).timestamp() * 1000)


def derive_status(outcomes: list[AssertionOutcome]) -> RunStatus:
    """Error beats fail beats completed."""
    statuses = {o.status for o in outcomes}
    if AssertionStatus.ERROR in statuses:
        return RunStatus.ERROR
    if AssertionStatus.FAIL in statuses:
        return RunStatus.FAILED
    return RunStatus.COMPLETED


def validate_alternation(events: list[TimelineEvent]) -> list[str]:
    """
    Check that each control alternates pressed/released.

    Playback does not require this; the result is informational. A control
    starts released, so its first recorded transition should be a press.

    Args:
        events: Timeline events in recorded order

    Returns:
        Human-readable descriptions of every violation (empty if well-formed)
    """
    problems: list[str] = []
    held: dict[str, bool] = {}

    for index, event in enumerate(events):
        was_held = held.get(event.control, False)
        is_press = event.transition == Transition.PRESSED
        if is_press == was_held:
            state = "held" if was_held else "released"
            problems.append(
                f"Event {index} at {event.timestamp:.3f}s: "
                f"{event.control} {event.transition.value} while already {state}"
            )
        held[event.control] = is_press

    return problems


def is_due(timestamp: float, clock: float) -> bool:
    """Whether a recorded timestamp has been reached by a replay clock."""
    return timestamp <= clock + TIME_EPSILON
