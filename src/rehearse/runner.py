"""
Scenario runner for Rehearse.

The ScenarioRunner replays recorded scenarios against the live simulation
and validates their scheduled assertions.

How it works:
    1. Scenarios are queued (FIFO); the live scene/input pair is saved
    2. The head scenario's snapshot becomes the live scene and a
       VirtualInputSource fed by its events becomes the live input
    3. Every tick advances the scenario timer and evaluates each assertion
       set whose timestamp has been reached, once, in recorded order
    4. When the timer reaches the scenario duration its RunResult is
       finalized and the next scenario starts
    5. When the queue drains, the saved live scene/input are restored

The runner only swaps state and checks assertions. The host keeps stepping
context.input_source and context.scene exactly as it does for live play, so
simulation code reads replayed input through the same interface.

Example:
    runner = ScenarioRunner(context, JsonSceneCodec(), resolver, store)
    runner.enqueue_all()
    while runner.is_running:
        context.input_source.update(dt)
        context.scene.update(dt)
        runner.tick(dt)
    print(runner.summary())
"""

import logging
from collections import deque
from pathlib import Path
from typing import Any

from rehearse.assertions.evaluator import evaluate_assertion_set
from rehearse.assertions.resolver import PropertyResolver
from rehearse.errors import LoadError, RunInProgressError
from rehearse.input.virtual import VirtualInputSource
from rehearse.interfaces import InputSource, SceneCodec, ScenarioStorage, SimulationContext
from rehearse.schema import (
    AssertionOutcome,
    AssertionStatus,
    RunResult,
    RunStatus,
    RunSummary,
    Scenario,
    is_due,
)

logger = logging.getLogger(__name__)

SNAPSHOT_PATH = "<snapshot>"


class ScenarioRunner:
    """
    Runs a queue of scenarios against a SimulationContext.

    Attributes:
        context: Live scene/input pair; swapped during replay
        codec: Restores scenario snapshots into scenes
        resolver: Reads live values for assertion evaluation
        store: Source of scenarios for enqueue_all/enqueue_by_name
        load_errors: Files skipped by the most recent enqueue_all
    """

    def __init__(
        self,
        context: SimulationContext,
        codec: SceneCodec,
        resolver: PropertyResolver,
        store: ScenarioStorage | None = None,
    ) -> None:
        self.context = context
        self.codec = codec
        self.resolver = resolver
        self.store = store
        self.load_errors: list[LoadError] = []

        self._queue: deque[Scenario] = deque()
        self._running = False
        self._timer = 0.0
        self._next_assertion = 0
        self._current_outcomes: list[AssertionOutcome] = []
        self._all_outcomes: list[AssertionOutcome] = []
        self._run_results: list[RunResult] = []
        self._saved_live: tuple[Any, InputSource] | None = None

    # =========================================================================
    # Queue Operations
    # =========================================================================

    def enqueue_all(self, directory: str | Path | None = None) -> int:
        """
        Queue every stored scenario and start the first one.

        Unreadable files are skipped (see load_errors). If nothing could be
        loaded the runner stays idle.

        Args:
            directory: Scenario directory (defaults to the store's)

        Returns:
            Number of scenarios queued

        Raises:
            RunInProgressError: If scenarios are already queued
            ValueError: If the runner has no store
        """
        if self._queue:
            raise RunInProgressError(current_scenario=self.current_scenario_name)
        if self.store is None:
            msg = "enqueue_all requires a scenario store"
            raise ValueError(msg)

        report = self.store.load_all(directory)
        self.load_errors = list(report.errors)

        if not report.scenarios:
            logger.error("No valid scenarios were loaded from %s", report.directory)
            return 0

        self._save_live_state()
        self._reset_results()
        self._queue.extend(report.scenarios)
        logger.info("Queued %d scenario(s)", len(report.scenarios))

        self.start_current()
        return len(report.scenarios)

    def enqueue(self, scenario: Scenario) -> None:
        """
        Queue a single scenario behind any in flight.

        Queuing into an empty runner saves the live state and starts a new
        result log. Call start_current() to begin.
        """
        if not self._queue:
            self._save_live_state()
            self._reset_results()
        self._queue.append(scenario)
        logger.info("Queued scenario %s", scenario.name)

    def enqueue_by_name(self, name: str) -> Scenario:
        """
        Load a scenario from the store and queue it.

        Raises:
            LoadError: If the scenario is missing or unreadable
            ValueError: If the runner has no store
        """
        if self.store is None:
            msg = "enqueue_by_name requires a scenario store"
            raise ValueError(msg)
        scenario = self.store.load(name)
        self.enqueue(scenario)
        return scenario

    def start_current(self) -> None:
        """
        Start the scenario at the head of the queue.

        No-op if a scenario is already running or the queue is empty.
        A scenario whose snapshot cannot be restored is finalized with an
        ERROR outcome and the next one is tried.
        """
        if self._running:
            return

        while self._queue:
            scenario = self._queue[0]
            try:
                scene = self.codec.deserialize(scenario.snapshot)
            except Exception as e:
                logger.error("Cannot restore snapshot of %s: %s", scenario.name, e)
                self._record(
                    AssertionOutcome(
                        path=SNAPSHOT_PATH,
                        status=AssertionStatus.ERROR,
                        error_detail=str(e),
                    )
                )
                self._finalize(scenario)
                continue

            virtual_input = VirtualInputSource(
                scenario.timeline_events,
                scenario.control_names,
            )
            virtual_input.start(0.0)

            self._timer = 0.0
            self._next_assertion = 0
            self._current_outcomes = []
            self.context.scene = scene
            self.context.input_source = virtual_input
            self._running = True
            logger.info(
                "Started scenario %s (%.2fs, %d events, %d assertion sets)",
                scenario.name,
                scenario.duration_seconds,
                len(scenario.timeline_events),
                len(scenario.assertion_sets),
            )
            return

        self._restore_live_state()

    def tick(self, delta_time: float) -> RunResult | None:
        """
        Advance the current scenario.

        Args:
            delta_time: Seconds since the previous tick

        Returns:
            The RunResult of a scenario that finished during this tick
        """
        if not self._running or not self._queue:
            return None

        scenario = self._queue[0]
        self._timer += delta_time
        self._evaluate_due(scenario)

        if not is_due(scenario.duration_seconds, self._timer):
            return None

        result = self._finalize(scenario)
        self._running = False
        self.start_current()
        return result

    def cancel(self) -> RunResult | None:
        """
        Abandon the run: clear the queue and restore the live state.

        Returns:
            The partial RunResult of the scenario that was running, if any
        """
        result = None
        if self._running and self._queue:
            result = self._finalize(self._queue[0])
            logger.warning("Cancelled scenario %s", result.scenario_name)

        self._queue.clear()
        self._running = False
        self._restore_live_state()
        return result

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def current_scenario(self) -> Scenario | None:
        return self._queue[0] if self._queue else None

    @property
    def current_scenario_name(self) -> str | None:
        return self._queue[0].name if self._queue else None

    @property
    def queued_count(self) -> int:
        return len(self._queue)

    @property
    def timer(self) -> float:
        """Seconds elapsed in the current scenario."""
        return self._timer

    def current_results(self) -> list[AssertionOutcome]:
        """Outcomes of the scenario currently running."""
        return list(self._current_outcomes)

    def all_results(self) -> list[AssertionOutcome]:
        """Every outcome since the current run started."""
        return list(self._all_outcomes)

    def run_results(self) -> list[RunResult]:
        """One RunResult per scenario finished since the current run started."""
        return list(self._run_results)

    def summary(self) -> RunSummary:
        return RunSummary.from_outcomes(self._all_outcomes)

    # =========================================================================
    # Internals
    # =========================================================================

    def _evaluate_due(self, scenario: Scenario) -> None:
        sets = scenario.assertion_sets
        while self._next_assertion < len(sets):
            assertion_set = sets[self._next_assertion]
            if not is_due(assertion_set.timestamp, self._timer):
                break

            logger.info(
                "Executing assertion set at %.3fs: %s",
                assertion_set.timestamp,
                assertion_set.description or "No description",
            )
            for outcome in evaluate_assertion_set(
                assertion_set, self.resolver, self.context.scene
            ):
                self._record(outcome)
            self._next_assertion += 1

    def _record(self, outcome: AssertionOutcome) -> None:
        self._current_outcomes.append(outcome)
        self._all_outcomes.append(outcome)

    def _finalize(self, scenario: Scenario) -> RunResult:
        result = RunResult.from_outcomes(scenario.name, self._current_outcomes)
        self._run_results.append(result)
        self._current_outcomes = []
        self._queue.popleft()

        log = logger.info if result.status == RunStatus.COMPLETED else logger.warning
        log(
            "Scenario %s %s: %d passed, %d failed, %d errors",
            scenario.name,
            result.status.value,
            result.passed,
            result.failed,
            result.errors,
        )
        return result

    def _save_live_state(self) -> None:
        if self._saved_live is None:
            self._saved_live = (self.context.scene, self.context.input_source)

    def _restore_live_state(self) -> None:
        if self._saved_live is None:
            return
        self.context.scene, self.context.input_source = self._saved_live
        self._saved_live = None
        logger.info("Run finished; live scene and input restored")

    def _reset_results(self) -> None:
        self._all_outcomes = []
        self._current_outcomes = []
        self._run_results = []
