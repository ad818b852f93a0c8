from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from fieldsim.sim.errors import IllegalConfigurationError
from fieldsim.sim.world import Coordinate, SizeClass, Terrain

PLAYER_MOVE_DISTANCE = 4
CREATURE_HABITATS = (Terrain.PLAIN, Terrain.WATER)

CREATURE_NAMES: dict[tuple[SizeClass, Terrain], str] = {
    (SizeClass.TINY, Terrain.PLAIN): "Mouse",
    (SizeClass.TINY, Terrain.WATER): "Crab",
    (SizeClass.SMALL, Terrain.PLAIN): "Dog",
    (SizeClass.SMALL, Terrain.WATER): "Fish",
    (SizeClass.LARGE, Terrain.PLAIN): "Horse",
    (SizeClass.LARGE, Terrain.WATER): "Shark",
    (SizeClass.HUGE, Terrain.PLAIN): "Elephant",
    (SizeClass.HUGE, Terrain.WATER): "Whale",
}
PLANT_NAMES: dict[SizeClass, str] = {
    SizeClass.TINY: "Flower",
    SizeClass.SMALL: "Shrub",
    SizeClass.LARGE: "Sapling",
    SizeClass.HUGE: "Tree",
}


class EntityKind(Enum):
    CREATURE = "Creature"
    PLANT = "Plant"
    PLAYER = "Player"


@dataclass(eq=False)
class Entity:
    """Grid occupant; identity-compared, ``entity_id`` is assigned by the owning grid."""

    kind: ClassVar[EntityKind]

    size_class: SizeClass
    coordinate: Coordinate
    entity_id: str | None = field(default=None, kw_only=True)

    def __post_init__(self) -> None:
        if not isinstance(self.size_class, SizeClass):
            raise IllegalConfigurationError(f"size_class must be a SizeClass, got {self.size_class!r}")
        if not isinstance(self.coordinate, Coordinate):
            raise IllegalConfigurationError(f"coordinate must be a Coordinate, got {self.coordinate!r}")

    @property
    def move_distance(self) -> int:
        return self.size_class.move_distance

    @property
    def points(self) -> int:
        return self.size_class.points

    def describe(self, coordinate: Coordinate | None = None) -> str:
        at = self.coordinate if coordinate is None else coordinate
        return f"{self.name} [{self.kind.value}] at {at}"

    def encode(self) -> str:
        raise NotImplementedError

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "kind": self.kind.value,
            "size_class": self.size_class.name,
            "coordinate": self.coordinate.to_dict(),
        }

    def __str__(self) -> str:
        return self.describe()


@dataclass(eq=False)
class Creature(Entity):
    kind: ClassVar[EntityKind] = EntityKind.CREATURE

    habitat: Terrain = Terrain.PLAIN

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.habitat not in CREATURE_HABITATS:
            raise IllegalConfigurationError(f"creature habitat must be PLAIN or WATER, got {self.habitat!r}")

    @property
    def name(self) -> str:
        return CREATURE_NAMES[(self.size_class, self.habitat)]

    def describe(self, coordinate: Coordinate | None = None) -> str:
        return f"{super().describe(coordinate)} [{self.habitat.name}]"

    def encode(self) -> str:
        return f"Creature-{self.size_class.name}-{self.coordinate.encode()}-{self.habitat.name}"

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "habitat": self.habitat.name}


@dataclass(eq=False)
class Plant(Entity):
    kind: ClassVar[EntityKind] = EntityKind.PLANT

    @property
    def name(self) -> str:
        return PLANT_NAMES[self.size_class]

    def encode(self) -> str:
        return f"Plant-{self.size_class.name}-{self.coordinate.encode()}"


@dataclass(eq=False)
class Player(Entity):
    kind: ClassVar[EntityKind] = EntityKind.PLAYER

    size_class: SizeClass = field(default=SizeClass.SMALL, init=False)
    coordinate: Coordinate = field(default_factory=lambda: Coordinate(0, 0))
    name: str = ""

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.name, str):
            raise IllegalConfigurationError("player name must be a string")
        if "-" in self.name or "\n" in self.name or "\r" in self.name:
            raise IllegalConfigurationError(f"player name must not contain '-' or line breaks: {self.name!r}")

    @property
    def move_distance(self) -> int:
        return PLAYER_MOVE_DISTANCE

    def encode(self) -> str:
        return f"Player-{self.coordinate.encode()}-{self.name}"

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "name": self.name}
