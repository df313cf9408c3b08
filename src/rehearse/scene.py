"""
Reference scene graph for Rehearse.

A deliberately small entity/component model that satisfies the SceneCodec
and EntityIndex capabilities. Hosts with their own scene graph can ignore it;
it exists so the harness can be exercised headlessly and in tests.

Model:
    - Scene: ordered list of entities
    - Entity: name, position, attached components
    - BoxCollider: axis-aligned box relative to its entity
    - Rigidbody: static flag and velocity; moves its entity on update

Snapshots are JSON produced from Pydantic models, so a restored scene keeps
every name, position and component setting used by assertions.
"""

from dataclasses import dataclass, field
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field

from rehearse.schema import Vector2

C = TypeVar("C", bound="Component")


# =============================================================================
# Components
# =============================================================================


@dataclass
class Component:
    """Base class for anything attached to an entity."""

    owner: "Entity | None" = field(default=None, repr=False, compare=False)

    def update(self, delta_time: float) -> None:
        pass


@dataclass
class BoxCollider(Component):
    """
    Axis-aligned box collider.

    The box is centered on the owning entity's position plus offset.
    """

    size: Vector2 = field(default_factory=lambda: Vector2(x=1.0, y=1.0))
    offset: Vector2 = field(default_factory=Vector2)
    layer: str = "default"

    @property
    def center(self) -> Vector2:
        origin = self.owner.position if self.owner is not None else Vector2()
        return origin + self.offset

    @property
    def min(self) -> Vector2:
        return self.center - self.size * 0.5

    @property
    def max(self) -> Vector2:
        return self.center + self.size * 0.5


@dataclass
class Rigidbody(Component):
    """Moves its entity by velocity every update unless static."""

    is_static: bool = False
    velocity: Vector2 = field(default_factory=Vector2)

    @property
    def position(self) -> Vector2:
        return self.owner.position if self.owner is not None else Vector2()

    def update(self, delta_time: float) -> None:
        if self.is_static or self.owner is None:
            return
        self.owner.position = self.owner.position + self.velocity * delta_time


# =============================================================================
# Entities and Scenes
# =============================================================================


@dataclass
class Entity:
    """A named object in the scene with attached components."""

    name: str = ""
    position: Vector2 = field(default_factory=Vector2)
    components: list[Component] = field(default_factory=list)

    def __post_init__(self) -> None:
        for component in self.components:
            component.owner = self

    def add_component(self, component: Component) -> None:
        component.owner = self
        self.components.append(component)

    def get_component(self, kind: type[C]) -> C | None:
        """Return the first attached component of the given kind."""
        for component in self.components:
            if isinstance(component, kind):
                return component
        return None

    def move(self, offset: Vector2) -> None:
        self.position = self.position + offset

    def update(self, delta_time: float) -> None:
        for component in self.components:
            component.update(delta_time)


@dataclass
class Scene:
    """An ordered collection of entities."""

    entities: list[Entity] = field(default_factory=list)

    def add_entity(self, entity: Entity) -> None:
        self.entities.append(entity)

    def remove_entity(self, entity: Entity) -> None:
        self.entities.remove(entity)

    def find_entity_by_name(self, name: str) -> Entity | None:
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None

    def get_entities(self) -> list[Entity]:
        return list(self.entities)

    @property
    def entity_count(self) -> int:
        return len(self.entities)

    def update(self, delta_time: float) -> None:
        for entity in self.entities:
            entity.update(delta_time)


# =============================================================================
# Entity Index
# =============================================================================


class SceneIndex:
    """EntityIndex capability over the reference Scene."""

    def find_by_name(self, scene: Scene, name: str) -> Entity | None:
        return scene.find_entity_by_name(name)

    def list_entities(self, scene: Scene) -> list[Entity]:
        return scene.get_entities()

    def count(self, scene: Scene) -> int:
        return scene.entity_count


# =============================================================================
# Snapshot Codec
# =============================================================================


class BoxColliderSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    size: Vector2
    offset: Vector2 = Field(default_factory=Vector2)
    layer: str = "default"


class RigidbodySnapshot(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    is_static: bool = False
    velocity: Vector2 = Field(default_factory=Vector2)


class EntitySnapshot(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = ""
    position: Vector2 = Field(default_factory=Vector2)
    box_collider: BoxColliderSnapshot | None = None
    rigidbody: RigidbodySnapshot | None = None


class SceneSnapshot(BaseModel):
    """Serialized form of a Scene."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = "1.0"
    entities: list[EntitySnapshot] = Field(default_factory=list)


class JsonSceneCodec:
    """SceneCodec capability producing JSON snapshots of the reference Scene."""

    def serialize(self, scene: Scene) -> str:
        snapshot = SceneSnapshot(
            entities=[_snapshot_entity(entity) for entity in scene.entities]
        )
        return snapshot.model_dump_json()

    def deserialize(self, blob: str) -> Scene:
        """
        Build a fresh Scene from a snapshot.

        Raises:
            pydantic.ValidationError: If the blob is not a scene snapshot
        """
        snapshot = SceneSnapshot.model_validate_json(blob)
        return Scene(entities=[_restore_entity(e) for e in snapshot.entities])


def _snapshot_entity(entity: Entity) -> EntitySnapshot:
    collider = entity.get_component(BoxCollider)
    body = entity.get_component(Rigidbody)
    return EntitySnapshot(
        name=entity.name,
        position=entity.position,
        box_collider=(
            BoxColliderSnapshot(
                size=collider.size,
                offset=collider.offset,
                layer=collider.layer,
            )
            if collider is not None
            else None
        ),
        rigidbody=(
            RigidbodySnapshot(is_static=body.is_static, velocity=body.velocity)
            if body is not None
            else None
        ),
    )


def _restore_entity(snapshot: EntitySnapshot) -> Entity:
    entity = Entity(name=snapshot.name, position=snapshot.position)
    if snapshot.box_collider is not None:
        entity.add_component(
            BoxCollider(
                size=snapshot.box_collider.size,
                offset=snapshot.box_collider.offset,
                layer=snapshot.box_collider.layer,
            )
        )
    if snapshot.rigidbody is not None:
        entity.add_component(
            Rigidbody(
                is_static=snapshot.rigidbody.is_static,
                velocity=snapshot.rigidbody.velocity,
            )
        )
    return entity
