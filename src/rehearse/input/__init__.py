"""
Input module for Rehearse.

Both input sources expose the same control-query capability
(query/list_controls/update), so simulation code cannot tell live input
from replayed input.

    - LiveInput: driven by device state, forwards transitions to a recorder
    - VirtualInputSource: driven by recorded TimelineEvents on a simulated clock

Example:
    from rehearse.input import VirtualInputSource

    source = VirtualInputSource(scenario.timeline_events, scenario.control_names)
    source.start(0.0)
    source.advance(0.5)
    print(source.query("Jump").is_held)
"""

from rehearse.input.controls import ControlButton
from rehearse.input.live import LiveInput, TransitionListener
from rehearse.input.virtual import VirtualInputSource

__all__ = [
    "ControlButton",
    "LiveInput",
    "TransitionListener",
    "VirtualInputSource",
]
