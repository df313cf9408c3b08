"""
Reference live input layer.

LiveInput maps device state onto logical controls. The host reports raw
device state with set_down(); update() turns it into per-tick edges and
forwards every press/release to an optional listener, which is how a
Recorder receives transitions while a session is being recorded.

Edges are reported at current_time. A host binds its own clock with
bind_clock() so the listener and the recorder share one clock. Unbound,
LiveInput counts its own updates, which stop while a replay has swapped it
out.
"""

import logging
from typing import Callable

from rehearse.errors import UnknownControlError
from rehearse.input.controls import ControlButton
from rehearse.interfaces import ControlState
from rehearse.schema import Transition

logger = logging.getLogger(__name__)

TransitionListener = Callable[[str, Transition, float], None]
Clock = Callable[[], float]


class LiveInput:
    """
    Device-driven input source.

    Attributes:
        listener: Called as listener(control, transition, clock) for every
            edge, e.g. Recorder.record_event
        clock: Optional host clock reported to the listener
    """

    def __init__(
        self,
        control_names: list[str] | None = None,
        listener: TransitionListener | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._controls: dict[str, ControlButton] = {}
        self._raw: dict[str, bool] = {}
        self._current_time = 0.0
        self.listener = listener
        self.clock = clock
        for name in control_names or []:
            self.add_control(name)

    def bind_clock(self, clock: Clock) -> None:
        self.clock = clock

    def add_control(self, name: str) -> None:
        """Register a logical control; re-adding an existing name is a no-op."""
        if name not in self._controls:
            self._controls[name] = ControlButton(name)
            self._raw[name] = False

    def set_down(self, control: str, down: bool = True) -> None:
        """
        Report the device state of a control; takes effect on the next update.

        Raises:
            UnknownControlError: If the control was never added
        """
        if control not in self._controls:
            raise UnknownControlError(control=control)
        self._raw[control] = down

    def update(self, delta_time: float) -> None:
        """Latch device state, compute edges and notify the listener."""
        self._current_time += delta_time

        for name, button in self._controls.items():
            button.begin_tick()
            button.set_held(self._raw[name])

            if self.listener is None:
                continue
            if button.is_pressed:
                self.listener(name, Transition.PRESSED, self.current_time)
            elif button.is_released:
                self.listener(name, Transition.RELEASED, self.current_time)

    def query(self, control: str) -> ControlState:
        button = self._controls.get(control)
        if button is None:
            raise UnknownControlError(control=control)
        return button.state()

    def list_controls(self) -> list[str]:
        return list(self._controls)

    @property
    def current_time(self) -> float:
        """The bound clock, else seconds accumulated over every update."""
        if self.clock is not None:
            return self.clock()
        return self._current_time
