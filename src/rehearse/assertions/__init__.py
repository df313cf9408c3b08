"""
Assertion module for Rehearse.

Reads values out of live state by property path, compares them with
recorded expectations, and turns each comparison into an outcome.

    - resolver: dotted-path resolution with a member registry
    - compare: tolerance- and type-aware equality
    - evaluator: AssertionSet -> AssertionOutcome list, and capture helpers

Example:
    from rehearse.assertions import PropertyResolver, compare
    from rehearse.scene import SceneIndex

    resolver = PropertyResolver(SceneIndex())
    x = resolver.resolve(scene, "Entity[Player].Position.X")
    assert compare(10.0, x, tolerance=0.001)
"""

from rehearse.assertions.compare import compare, is_number, normalize
from rehearse.assertions.evaluator import (
    capture_expectations,
    default_capture_paths,
    evaluate_assertion_set,
)
from rehearse.assertions.resolver import (
    MemberRegistry,
    PropertyPath,
    PropertyResolver,
    RootKind,
    build_default_registry,
    parse_path,
    to_snake_case,
)

__all__ = [
    "MemberRegistry",
    "PropertyPath",
    "PropertyResolver",
    "RootKind",
    "build_default_registry",
    "capture_expectations",
    "compare",
    "default_capture_paths",
    "evaluate_assertion_set",
    "is_number",
    "normalize",
    "parse_path",
    "to_snake_case",
]
