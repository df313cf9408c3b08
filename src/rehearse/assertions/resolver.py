"""
Property path resolution for Rehearse.

A property path is a dotted string addressing a value in live state:

    Scene.EntityCount
    Entity[Player].Position.X
    Entity[Player].Rigidbody.Position.Y
    Entity[Crate].BoxCollider.Min.X

The first segment selects the root (the scene, or a named entity through the
entity index). Every later segment is one member lookup on the object the
previous segment produced.

Member lookup order:
    1. EntityCount on the scene root (answered by the entity index)
    2. Getters registered in the MemberRegistry for the object's type
    3. Mapping keys, then public attributes, each by the segment name and then
       by its snake_case form (Position -> position, IsStatic -> is_static)

Private names (leading underscore) are never resolved. Resolution only reads.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, Mapping

from rehearse.errors import (
    EntityNotFoundError,
    PathSyntaxError,
    RootNotFoundError,
    SegmentNotFoundError,
)
from rehearse.interfaces import EntityIndex

SCENE_ROOT = "Scene"
ENTITY_PREFIX = "Entity["
ENTITY_COUNT = "EntityCount"

MemberGetter = Callable[[Any], Any]

_MISSING = object()
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class RootKind(str, Enum):
    """What the first path segment selects."""

    SCENE = "scene"
    ENTITY = "entity"


@dataclass(frozen=True)
class PropertyPath:
    """
    A parsed property path.

    Attributes:
        raw: The original path string
        root: Which root the path starts from
        entity_name: Entity name for Entity[<name>] roots
        members: Member segments walked after the root
    """

    raw: str
    root: RootKind
    entity_name: str | None
    members: tuple[str, ...]


def parse_path(path: str) -> PropertyPath:
    """
    Parse a dotted property path.

    Entity names may contain dots; everything up to the closing bracket is
    the name.

    Raises:
        PathSyntaxError: If the path is empty or a selector is malformed
        RootNotFoundError: If the root selector is neither Scene nor Entity[...]
    """
    if not path or not path.strip():
        raise PathSyntaxError(path=path)

    if path.startswith(ENTITY_PREFIX):
        close = path.find("]")
        if close == -1:
            raise PathSyntaxError(
                path=path,
                segment=path,
                message=f"Unterminated entity selector in {path!r}",
            )
        entity_name = path[len(ENTITY_PREFIX):close]
        rest = path[close + 1:]
        if rest and not rest.startswith("."):
            raise PathSyntaxError(path=path, segment=rest)
        members = _split_members(path, rest[1:]) if rest else ()
        return PropertyPath(path, RootKind.ENTITY, entity_name, members)

    root, _, rest = path.partition(".")
    if root != SCENE_ROOT:
        raise RootNotFoundError(
            path=path,
            segment=root,
            message=f"Invalid property path root: {root}",
        )
    members = _split_members(path, rest) if rest else ()
    return PropertyPath(path, RootKind.SCENE, None, members)


def _split_members(path: str, rest: str) -> tuple[str, ...]:
    members = tuple(rest.split("."))
    if any(not m for m in members):
        raise PathSyntaxError(path=path, message=f"Empty segment in {path!r}")
    return members


def to_snake_case(name: str) -> str:
    """Convert a PascalCase path segment to a Python attribute name."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


# =============================================================================
# Member Registry
# =============================================================================


class MemberRegistry:
    """
    Registry of named members that are not plain attributes.

    Getters are registered per (type, segment). Lookup walks the object's MRO,
    so a getter registered on a base class applies to subclasses.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._getters: dict[tuple[type, str], MemberGetter] = {}

    def register(self, owner: type, name: str, getter: MemberGetter) -> None:
        """
        Register a getter for a segment on a type.

        Re-registering the same (type, name) replaces the previous getter.

        Raises:
            ValueError: If name is empty
        """
        if not name:
            msg = "Member name must be non-empty"
            raise ValueError(msg)
        self._getters[(owner, name)] = getter

    def lookup(self, owner: type, name: str) -> MemberGetter | None:
        for klass in owner.__mro__:
            getter = self._getters.get((klass, name))
            if getter is not None:
                return getter
        return None

    def unregister(self, owner: type, name: str) -> bool:
        return self._getters.pop((owner, name), None) is not None

    def __len__(self) -> int:
        return len(self._getters)

    def __iter__(self) -> Iterator[tuple[type, str]]:
        return iter(self._getters)

    def __repr__(self) -> str:
        members = ", ".join(f"{t.__name__}.{n}" for t, n in self._getters)
        return f"<MemberRegistry: [{members}]>"


def build_default_registry() -> MemberRegistry:
    """Registry with the component shortcuts of the reference scene."""
    from rehearse.scene import BoxCollider, Entity, Rigidbody

    registry = MemberRegistry()
    registry.register(Entity, "BoxCollider", lambda e: e.get_component(BoxCollider))
    registry.register(Entity, "Rigidbody", lambda e: e.get_component(Rigidbody))
    return registry


# =============================================================================
# Resolver
# =============================================================================


class PropertyResolver:
    """
    Resolves property paths against a live scene.

    Usage:
        resolver = PropertyResolver(SceneIndex())
        x = resolver.resolve(scene, "Entity[Player].Position.X")

    Attributes:
        index: Entity lookups for the scene
        registry: Special-cased member getters
    """

    def __init__(
        self,
        index: EntityIndex,
        registry: MemberRegistry | None = None,
    ) -> None:
        self.index = index
        self.registry = registry if registry is not None else build_default_registry()

    def resolve(self, scene: Any, path: str | PropertyPath) -> Any:
        """
        Resolve a path to a value.

        Args:
            scene: The live scene
            path: Dotted path or an already parsed PropertyPath

        Returns:
            The raw value at the path (may be None for an absent leaf)

        Raises:
            PathError: If the root, entity or any segment cannot be resolved
        """
        parsed = path if isinstance(path, PropertyPath) else parse_path(path)

        if scene is None:
            raise RootNotFoundError(
                path=parsed.raw,
                segment=SCENE_ROOT,
                message="No live scene to resolve against",
            )

        if parsed.root == RootKind.ENTITY:
            current = self.index.find_by_name(scene, parsed.entity_name)
            if current is None:
                raise EntityNotFoundError(
                    path=parsed.raw,
                    segment=f"{ENTITY_PREFIX}{parsed.entity_name}]",
                    entity_name=parsed.entity_name or "",
                )
        else:
            current = scene

        for position, segment in enumerate(parsed.members):
            if current is None:
                raise RootNotFoundError(path=parsed.raw, segment=segment)

            if (
                position == 0
                and parsed.root == RootKind.SCENE
                and segment == ENTITY_COUNT
            ):
                current = self.index.count(scene)
                continue

            current = self._member(current, segment, parsed.raw)

        return current

    def _member(self, obj: Any, segment: str, path: str) -> Any:
        getter = self.registry.lookup(type(obj), segment)
        if getter is not None:
            return getter(obj)

        if not segment.startswith("_"):
            for name in dict.fromkeys((segment, to_snake_case(segment))):
                if isinstance(obj, Mapping):
                    value = obj.get(name, _MISSING)
                else:
                    value = getattr(obj, name, _MISSING)
                if value is not _MISSING and not callable(value):
                    return value

        raise SegmentNotFoundError(
            path=path,
            segment=segment,
            type_name=type(obj).__name__,
        )
