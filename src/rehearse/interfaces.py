"""
Capability interfaces consumed by the harness.

The harness never touches a simulation directly. It reads and swaps state
through these small protocols, so any host can plug in its own scene graph,
input layer and storage. Reference implementations live in rehearse.scene,
rehearse.input and rehearse.store.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, Sequence, runtime_checkable

from rehearse.schema import Scenario


@dataclass(frozen=True)
class ControlState:
    """
    Snapshot of one control for the current tick.

    Attributes:
        is_pressed: Went down this tick
        is_released: Went up this tick
        is_held: Currently down
    """

    is_pressed: bool = False
    is_released: bool = False
    is_held: bool = False


RELEASED = ControlState()


@runtime_checkable
class InputSource(Protocol):
    """Control-query capability shared by live and replayed input."""

    def query(self, control: str) -> ControlState: ...

    def list_controls(self) -> list[str]: ...

    def update(self, delta_time: float) -> None: ...


class SceneCodec(Protocol):
    """Turns a live scene into an opaque blob and back."""

    def serialize(self, scene: Any) -> str: ...

    def deserialize(self, blob: str) -> Any: ...


class EntityIndex(Protocol):
    """Entity lookups on a scene."""

    def find_by_name(self, scene: Any, name: str) -> Any | None: ...

    def list_entities(self, scene: Any) -> Sequence[Any]: ...

    def count(self, scene: Any) -> int: ...


class ScenarioStorage(Protocol):
    """Persistence for named scenarios."""

    def save(self, scenario: Scenario) -> Path: ...

    def load(self, name: str) -> Scenario: ...

    def load_all(self, directory: Path | None = None) -> Any: ...


@dataclass
class SimulationContext:
    """
    The live scene/input pair at the top of a simulation.

    The recorder reads it; the run orchestrator swaps its fields while a
    replay is in progress and restores them when the queue drains.
    """

    scene: Any
    input_source: InputSource
