"""
Assertion evaluation and capture.

evaluate_assertion_set() turns one scheduled AssertionSet into outcomes,
one per expected property, in order. A property that cannot be resolved or
compared becomes an ERROR outcome; the remaining properties are still
evaluated.

capture_expectations() is the recording-side counterpart: it resolves paths
against live state and turns the values into ExpectedProperty records.
"""

import logging
from typing import Any, Iterable

from rehearse.assertions.compare import compare, normalize
from rehearse.assertions.resolver import PropertyResolver
from rehearse.errors import CaptureError
from rehearse.interfaces import EntityIndex
from rehearse.schema import (
    DEFAULT_TOLERANCE,
    AssertionOutcome,
    AssertionSet,
    AssertionStatus,
    ExpectedProperty,
    Vector2,
)

logger = logging.getLogger(__name__)


def evaluate_assertion_set(
    assertion_set: AssertionSet,
    resolver: PropertyResolver,
    scene: Any,
) -> list[AssertionOutcome]:
    """
    Validate every expectation in a set against the live scene.

    Args:
        assertion_set: The scheduled set to validate
        resolver: Resolver used to read live values
        scene: The live scene

    Returns:
        One outcome per expectation, in recorded order
    """
    outcomes: list[AssertionOutcome] = []

    for expectation in assertion_set.expectations:
        try:
            actual = resolver.resolve(scene, expectation.path)
            matched = compare(expectation.expected_value, actual, expectation.tolerance)
        except Exception as e:
            outcome = AssertionOutcome(
                path=expectation.path,
                expected_value=expectation.expected_value,
                actual_value=None,
                status=AssertionStatus.ERROR,
                error_detail=str(e),
                timestamp=assertion_set.timestamp,
            )
            logger.error("ERROR: %s - %s", expectation.path, e)
        else:
            outcome = AssertionOutcome(
                path=expectation.path,
                expected_value=expectation.expected_value,
                actual_value=actual,
                status=AssertionStatus.PASS if matched else AssertionStatus.FAIL,
                timestamp=assertion_set.timestamp,
            )
            if matched:
                logger.info("PASS: %s", expectation.path)
            else:
                logger.warning(
                    "FAIL: %s - expected %s, actual %s",
                    expectation.path,
                    expectation.expected_value,
                    actual,
                )
        outcomes.append(outcome)

    return outcomes


# =============================================================================
# Capture
# =============================================================================


def default_capture_paths(scene: Any, index: EntityIndex) -> list[str]:
    """
    The built-in capture set.

    Entity count, then for each named entity its position and, where the
    components exist, collider bounds and rigid-body state.
    """
    from rehearse.scene import BoxCollider, Rigidbody

    paths = ["Scene.EntityCount"]
    for entity in index.list_entities(scene):
        name = getattr(entity, "name", "")
        if not name:
            continue
        prefix = f"Entity[{name}]"
        paths.append(f"{prefix}.Position.X")
        paths.append(f"{prefix}.Position.Y")

        get_component = getattr(entity, "get_component", None)
        if get_component is None:
            continue
        if get_component(BoxCollider) is not None:
            paths.extend(
                f"{prefix}.BoxCollider.{corner}.{axis}"
                for corner in ("Min", "Max")
                for axis in ("X", "Y")
            )
        if get_component(Rigidbody) is not None:
            paths.append(f"{prefix}.Rigidbody.IsStatic")
            paths.append(f"{prefix}.Rigidbody.Position.X")
            paths.append(f"{prefix}.Rigidbody.Position.Y")
    return paths


def capture_expectations(
    resolver: PropertyResolver,
    scene: Any,
    paths: Iterable[str],
    tolerance: float = DEFAULT_TOLERANCE,
) -> list[ExpectedProperty]:
    """
    Capture the current value at each path.

    Capture is best effort: a path that fails to resolve, or whose value
    cannot be stored in a scenario, is logged and skipped.

    Returns:
        One ExpectedProperty per successfully captured path
    """
    captured: list[ExpectedProperty] = []
    for path in paths:
        try:
            captured.append(_capture_one(resolver, scene, path, tolerance))
        except CaptureError as e:
            logger.warning("%s", e.message)
    return captured


def _capture_one(
    resolver: PropertyResolver,
    scene: Any,
    path: str,
    tolerance: float,
) -> ExpectedProperty:
    try:
        raw = resolver.resolve(scene, path)
        value = normalize(raw)
        if not _is_storable(value):
            msg = f"value of type {type(raw).__name__} cannot be stored"
            raise TypeError(msg)
        return ExpectedProperty(
            path=path,
            expected_value=value,
            declared_type=type(raw).__name__,
            tolerance=tolerance,
        )
    except Exception as e:
        raise CaptureError(path=path, underlying_error=str(e)) from e


def _is_storable(value: Any) -> bool:
    return value is None or isinstance(value, (bool, int, float, str, Vector2))
