"""
Rehearse - Deterministic record-and-replay testing for interactive simulations.

Rehearse records a live session (a starting snapshot, every input transition
and scheduled property captures) as a scenario, then replays it later with
synthetic input and checks the simulation still produces the same values.
It provides:
- A recorder that turns live sessions into JSON scenarios
- A virtual input source that replays recorded transitions on a simulated clock
- Path-based property resolution with tolerance-aware comparison
- A run orchestrator that replays a queue of scenarios and restores live state

Example usage:
    $ rehearse list --dir tests/scenarios
    $ rehearse show jump_over_crate
    $ rehearse run --json
"""

__version__ = "0.1.0"
__author__ = "Rehearse Contributors"

__all__ = [
    "__version__",
    "__author__",
]
