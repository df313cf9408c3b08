"""
Pytest configuration and fixtures for Rehearse tests.

This module provides shared fixtures used across unit and integration tests:
a small reference scene, the codec/index/resolver that operate on it, and
temporary scenario storage.
"""

import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from rehearse.assertions import PropertyResolver
from rehearse.input import LiveInput
from rehearse.interfaces import SimulationContext
from rehearse.scene import BoxCollider, Entity, JsonSceneCodec, Rigidbody, Scene, SceneIndex
from rehearse.schema import (
    AssertionSet,
    ExpectedProperty,
    Scenario,
    TimelineEvent,
    Transition,
    Vector2,
)
from rehearse.store import ScenarioStore

CONTROLS = ["Jump", "Left", "Right"]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def scene() -> Scene:
    """A scene with a moving player, a static crate and an unnamed prop."""
    player = Entity(
        name="Player",
        position=Vector2(x=10.0, y=5.0),
        components=[
            BoxCollider(size=Vector2(x=2.0, y=4.0)),
            Rigidbody(velocity=Vector2(x=1.0, y=0.0)),
        ],
    )
    crate = Entity(
        name="Crate",
        position=Vector2(x=20.0, y=0.0),
        components=[
            BoxCollider(size=Vector2(x=1.0, y=1.0), layer="props"),
            Rigidbody(is_static=True),
        ],
    )
    prop = Entity(position=Vector2(x=-3.0, y=0.0))
    return Scene(entities=[player, crate, prop])


@pytest.fixture
def codec() -> JsonSceneCodec:
    return JsonSceneCodec()


@pytest.fixture
def index() -> SceneIndex:
    return SceneIndex()


@pytest.fixture
def resolver(index: SceneIndex) -> PropertyResolver:
    return PropertyResolver(index)


@pytest.fixture
def live_input() -> LiveInput:
    return LiveInput(CONTROLS)


@pytest.fixture
def context(scene: Scene, live_input: LiveInput) -> SimulationContext:
    return SimulationContext(scene=scene, input_source=live_input)


@pytest.fixture
def store(temp_dir: Path) -> ScenarioStore:
    return ScenarioStore(temp_dir / "scenarios")


@pytest.fixture
def make_scenario(scene: Scene, codec: JsonSceneCodec) -> Callable[..., Scenario]:
    """Factory building scenarios that start from the fixture scene."""

    def _make(
        name: str = "walk_right",
        duration: float = 2.0,
        events: list[TimelineEvent] | None = None,
        assertion_sets: list[AssertionSet] | None = None,
    ) -> Scenario:
        return Scenario(
            name=name,
            duration_seconds=duration,
            snapshot=codec.serialize(scene),
            timeline_events=events or [],
            control_names=CONTROLS,
            assertion_sets=assertion_sets or [],
        )

    return _make


def press(control: str, at: float) -> TimelineEvent:
    return TimelineEvent(control=control, transition=Transition.PRESSED, timestamp=at)


def release(control: str, at: float) -> TimelineEvent:
    return TimelineEvent(control=control, transition=Transition.RELEASED, timestamp=at)


def expect(path: str, value, tolerance: float = 0.001) -> ExpectedProperty:
    return ExpectedProperty(
        path=path,
        expected_value=value,
        declared_type=type(value).__name__,
        tolerance=tolerance,
    )
