"""
Edge-detecting control state shared by live and virtual input.
"""

from rehearse.interfaces import ControlState


class ControlButton:
    """
    Held state of one logical control plus its per-tick edges.

    Each tick calls begin_tick() once, then any number of set_held() calls.
    Edges compare the held state at the start of the tick with the current
    one, so a press and release inside the same tick produce no edge.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._held = False
        self._held_at_tick_start = False

    def begin_tick(self) -> None:
        self._held_at_tick_start = self._held

    def set_held(self, held: bool) -> None:
        self._held = held

    @property
    def is_held(self) -> bool:
        return self._held

    @property
    def is_pressed(self) -> bool:
        return self._held and not self._held_at_tick_start

    @property
    def is_released(self) -> bool:
        return not self._held and self._held_at_tick_start

    def state(self) -> ControlState:
        return ControlState(
            is_pressed=self.is_pressed,
            is_released=self.is_released,
            is_held=self.is_held,
        )

    def __repr__(self) -> str:
        return f"<ControlButton {self.name} held={self._held}>"
