"""
Headless fixed-step host.

Drives a SimulationContext the way an interactive host's main loop would,
without a window or device. Each step updates the input source, runs the
registered systems, updates the scene and then ticks the scenario runner.
Used by the CLI to replay scenarios and by tests to record and replay
deterministically. A live input source that accepts bind_clock() is bound
to the host clock, so recorded transitions and captures share one timeline.
"""

import logging
from typing import Callable

from rehearse.interfaces import SimulationContext
from rehearse.runner import ScenarioRunner
from rehearse.schema import RunResult

logger = logging.getLogger(__name__)

DEFAULT_STEP_SECONDS = 1.0 / 60.0
DEFAULT_MAX_STEPS = 1_000_000

# Game logic run each step between the input update and the scene update
System = Callable[[SimulationContext, float], None]


class HeadlessHost:
    """
    Fixed-step simulation loop.

    Attributes:
        context: Live scene/input pair (the runner may swap its fields)
        runner: Optional runner ticked after every scene update
        step_seconds: Default delta passed to each step
        systems: Per-step game logic, called as system(context, dt)
        clock: Total simulated seconds stepped so far
    """

    def __init__(
        self,
        context: SimulationContext,
        runner: ScenarioRunner | None = None,
        step_seconds: float = DEFAULT_STEP_SECONDS,
    ) -> None:
        if step_seconds <= 0:
            msg = f"step_seconds must be positive, got {step_seconds}"
            raise ValueError(msg)
        self.context = context
        self.runner = runner
        self.step_seconds = step_seconds
        self.systems: list[System] = []
        self.clock = 0.0

        bind_clock = getattr(context.input_source, "bind_clock", None)
        if bind_clock is not None:
            bind_clock(lambda: self.clock)

    def add_system(self, system: System) -> None:
        self.systems.append(system)

    def step(self, delta_time: float | None = None) -> RunResult | None:
        """
        Advance the simulation by one step.

        Returns:
            The RunResult of a scenario that finished on this step
        """
        dt = self.step_seconds if delta_time is None else delta_time
        self.clock += dt

        self.context.input_source.update(dt)
        for system in self.systems:
            system(self.context, dt)
        update_scene = getattr(self.context.scene, "update", None)
        if update_scene is not None:
            update_scene(dt)

        if self.runner is None:
            return None
        return self.runner.tick(dt)

    def run_for(self, seconds: float) -> None:
        """Step until at least the given number of simulated seconds elapsed."""
        target = self.clock + seconds
        while self.clock < target:
            self.step()

    def run_until_idle(self, max_steps: int = DEFAULT_MAX_STEPS) -> list[RunResult]:
        """
        Step until the runner has drained its queue.

        If max_steps is reached first the run is cancelled.

        Returns:
            Results of every scenario that finished while stepping
        """
        if self.runner is None:
            msg = "run_until_idle requires a runner"
            raise ValueError(msg)

        finished: list[RunResult] = []
        steps = 0
        while self.runner.is_running:
            if steps >= max_steps:
                logger.error(
                    "Run did not finish within %d steps; cancelling %s",
                    max_steps,
                    self.runner.current_scenario_name,
                )
                partial = self.runner.cancel()
                if partial is not None:
                    finished.append(partial)
                break
            result = self.step()
            steps += 1
            if result is not None:
                finished.append(result)

        logger.debug("Host idle after %d steps (clock %.3fs)", steps, self.clock)
        return finished
