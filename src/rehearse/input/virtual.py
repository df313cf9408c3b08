"""
Virtual input source for deterministic replay.

The VirtualInputSource stands in for the live input layer during replay.
Instead of reading a device it consumes recorded TimelineEvents against a
simulated clock.

Determinism:
    advance() applies every event whose timestamp has been reached, in
    recorded order, however large the step. The final held state therefore
    depends only on the total elapsed time, not on how it was split into
    steps.
"""

import logging

from rehearse.errors import UnknownControlError
from rehearse.input.controls import ControlButton
from rehearse.interfaces import ControlState
from rehearse.schema import TimelineEvent, Transition, is_due

logger = logging.getLogger(__name__)


class VirtualInputSource:
    """
    Replays recorded input transitions.

    Usage:
        source = VirtualInputSource(scenario.timeline_events, scenario.control_names)
        source.start(0.0)
        source.advance(1 / 60)
        if source.query("Jump").is_pressed:
            ...

    Attributes:
        events: Recorded events in playback order
    """

    def __init__(self, events: list[TimelineEvent], control_names: list[str]) -> None:
        """
        Initialize the source.

        Args:
            events: Recorded events, in recorded order
            control_names: Every control that existed while recording. Each
                starts released, even if it never transitions.
        """
        self.events = list(events)
        self._controls: dict[str, ControlButton] = {}
        for name in control_names:
            if name not in self._controls:
                self._controls[name] = ControlButton(name)

        self._current_time = 0.0
        self._cursor = 0
        self._active = False

    def start(self, at_time: float = 0.0) -> None:
        """Reset the clock and rewind to the first event."""
        self._current_time = at_time
        self._cursor = 0
        self._active = True

    def advance(self, delta_time: float) -> None:
        """
        Move the clock forward and apply every event that is now due.

        Args:
            delta_time: Seconds elapsed since the previous advance
        """
        self._current_time += delta_time

        for button in self._controls.values():
            button.begin_tick()

        while (
            self._cursor < len(self.events)
            and is_due(self.events[self._cursor].timestamp, self._current_time)
        ):
            self._apply(self.events[self._cursor])
            self._cursor += 1

    def update(self, delta_time: float) -> None:
        """Step the source like a live input layer."""
        self.advance(delta_time)

    def _apply(self, event: TimelineEvent) -> None:
        button = self._controls.get(event.control)
        if button is None:
            logger.debug("Skipping event for unknown control %s", event.control)
            return
        button.set_held(event.transition == Transition.PRESSED)

    def is_exhausted(self) -> bool:
        """Whether every recorded event has been applied."""
        return self._cursor >= len(self.events)

    def query(self, control: str) -> ControlState:
        """
        Get the state of a control for the current tick.

        Raises:
            UnknownControlError: If the control was not recorded
        """
        button = self._controls.get(control)
        if button is None:
            raise UnknownControlError(control=control)
        return button.state()

    def list_controls(self) -> list[str]:
        return list(self._controls)

    @property
    def current_time(self) -> float:
        return self._current_time

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def has_more_input(self) -> bool:
        return not self.is_exhausted()

    def __repr__(self) -> str:
        return (
            f"<VirtualInputSource t={self._current_time:.3f} "
            f"events={self._cursor}/{len(self.events)}>"
        )
