"""
Tolerance-aware value comparison.

Expected values come back from scenario JSON, where every number is a plain
float or int and vectors may arrive as {"x": ..., "y": ...}. Actual values
come from live objects with their own concrete types. Both sides are first
normalized to plain scalars or Vector2, then compared:

    1. both numeric (any int/float width, bool excluded): |a - b| <= tolerance
    2. both Vector2: each axis within tolerance
    3. anything else: exact equality (a bool only equals a bool)

None equals None; None never equals anything else.
"""

import logging
from decimal import Decimal
from typing import Any, Mapping

from rehearse.errors import ComparisonError
from rehearse.schema import DEFAULT_TOLERANCE, Vector2

logger = logging.getLogger(__name__)


def is_number(value: Any) -> bool:
    """Whether value is numeric for comparison purposes (bools are not)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize(value: Any) -> Any:
    """
    Unwrap a loosely typed value into a plain scalar or Vector2.

    Handles Decimal, scalar wrappers exposing item() (numpy-style), and the
    mapping/sequence/attribute forms a 2D vector takes after decoding.
    Anything else is returned unchanged.
    """
    if value is None or isinstance(value, (bool, str, Vector2)):
        return value
    if is_number(value):
        return value
    if isinstance(value, Decimal):
        return float(value)

    if isinstance(value, Mapping):
        keys = {str(k).lower(): v for k, v in value.items()}
        if set(keys) == {"x", "y"} and is_number(keys["x"]) and is_number(keys["y"]):
            return Vector2(x=keys["x"], y=keys["y"])
        return value

    if isinstance(value, (list, tuple)):
        if len(value) == 2 and all(is_number(v) for v in value):
            return Vector2(x=value[0], y=value[1])
        return value

    item = getattr(value, "item", None)
    if callable(item):
        try:
            return normalize(item())
        except (TypeError, ValueError):
            return value

    x = getattr(value, "x", None)
    y = getattr(value, "y", None)
    if is_number(x) and is_number(y):
        return Vector2(x=x, y=y)

    return value


def compare(expected: Any, actual: Any, tolerance: float = DEFAULT_TOLERANCE) -> bool:
    """
    Compare a captured value against a live value.

    Args:
        expected: Value captured while recording
        actual: Value resolved from live state
        tolerance: Allowed absolute difference for numbers and vector axes

    Returns:
        True if the values match under the comparison policy

    Raises:
        ComparisonError: If normalizing or comparing raised
    """
    try:
        expected_value = normalize(expected)
        actual_value = normalize(actual)

        if expected_value is None or actual_value is None:
            result = expected_value is None and actual_value is None
        elif is_number(expected_value) and is_number(actual_value):
            diff = abs(float(expected_value) - float(actual_value))
            result = diff <= tolerance
        elif isinstance(expected_value, Vector2) and isinstance(actual_value, Vector2):
            result = (
                abs(expected_value.x - actual_value.x) <= tolerance
                and abs(expected_value.y - actual_value.y) <= tolerance
            )
        elif isinstance(expected_value, bool) != isinstance(actual_value, bool):
            result = False
        else:
            result = bool(expected_value == actual_value)
    except Exception as e:
        raise ComparisonError(
            expected=_describe(expected),
            actual=_describe(actual),
            underlying_error=str(e) or type(e).__name__,
        ) from e

    logger.debug(
        "Compared %s with %s (tolerance %s): %s",
        _describe(expected),
        _describe(actual),
        tolerance,
        result,
    )
    return result


def _describe(value: Any) -> str:
    return f"{value!r} ({type(value).__name__})"
