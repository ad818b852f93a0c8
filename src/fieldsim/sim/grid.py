from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from typing import Any, Sequence

from fieldsim.sim.entities import Entity, EntityKind, Player
from fieldsim.sim.errors import CoordinateOutOfBoundsError, IllegalConfigurationError, NoSuchEntityError
from fieldsim.sim.events import EventLog
from fieldsim.sim.rng import creature_stream
from fieldsim.sim.world import Coordinate, Terrain, Tile

MIN_GRID_DIMENSION = 5
MAX_GRID_DIMENSION = 15
DEFAULT_GRID_DIMENSION = 5


def _require_dimension(value: Any, *, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise IllegalConfigurationError(f"{field_name} must be an integer")
    if not MIN_GRID_DIMENSION <= value <= MAX_GRID_DIMENSION:
        raise IllegalConfigurationError(
            f"{field_name} must be within [{MIN_GRID_DIMENSION}, {MAX_GRID_DIMENSION}], got {value}"
        )
    return value


@dataclass(eq=False)
class Grid:
    """A named scenario: tile arena, seeded creature RNG, event log, and live entities.

    Tiles are addressed by index ``x + y * width``; a tile refers to its occupant by
    ``entity_id`` and the entity table owns the objects.
    """

    name: str
    width: int = DEFAULT_GRID_DIMENSION
    height: int = DEFAULT_GRID_DIMENSION
    seed: int = 0
    tiles: list[Tile] = field(default_factory=list)
    turn: int = 0
    log: EventLog = field(default_factory=EventLog, init=False)
    rng: random.Random = field(init=False, repr=False)
    entities: dict[str, Entity] = field(default_factory=dict, init=False, repr=False)
    _creature_ids: list[str] = field(default_factory=list, init=False, repr=False)
    _next_entity_counter: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise IllegalConfigurationError("grid name must be a string")
        if "\n" in self.name or "\r" in self.name:
            raise IllegalConfigurationError("grid name must be a single line")
        _require_dimension(self.width, field_name="width")
        _require_dimension(self.height, field_name="height")
        if isinstance(self.seed, bool) or not isinstance(self.seed, int) or self.seed < 0:
            raise IllegalConfigurationError(f"seed must be an integer >= 0, got {self.seed!r}")
        if not self.tiles:
            self.tiles = [Tile() for _ in range(self.width * self.height)]
        elif len(self.tiles) != self.width * self.height:
            raise IllegalConfigurationError(
                f"tile count {len(self.tiles)} does not match {self.width}x{self.height}"
            )
        self.rng = creature_stream(self.seed)

    @classmethod
    def from_terrain_rows(cls, name: str, rows: Sequence[str], *, seed: int = 0) -> Grid:
        if not rows:
            raise IllegalConfigurationError("terrain rows must not be empty")
        width = len(rows[0])
        if any(len(row) != width for row in rows):
            raise IllegalConfigurationError("terrain rows must share one width")
        tiles = [Tile(terrain=Terrain.decode(char)) for row in rows for char in row]
        return cls(name=name, width=width, height=len(rows), seed=seed, tiles=tiles)

    def in_bounds(self, coordinate: Coordinate) -> bool:
        return 0 <= coordinate.x < self.width and 0 <= coordinate.y < self.height

    def require_in_bounds(self, coordinate: Coordinate) -> None:
        if not self.in_bounds(coordinate):
            raise CoordinateOutOfBoundsError(f"{coordinate} is outside {self.width}x{self.height} grid {self.name!r}")

    def index_of(self, coordinate: Coordinate) -> int:
        return coordinate.x + coordinate.y * self.width

    def coordinate_at(self, index: int) -> Coordinate:
        return Coordinate(index % self.width, index // self.width)

    def tile_at(self, coordinate: Coordinate) -> Tile:
        self.require_in_bounds(coordinate)
        return self.tiles[self.index_of(coordinate)]

    def terrain_at(self, coordinate: Coordinate) -> Terrain:
        return self.tile_at(coordinate).terrain

    def occupant_at(self, coordinate: Coordinate) -> Entity | None:
        occupant_id = self.tile_at(coordinate).occupant_id
        return None if occupant_id is None else self.entities[occupant_id]

    def entity(self, entity_id: str) -> Entity:
        try:
            return self.entities[entity_id]
        except KeyError:
            raise NoSuchEntityError(f"unknown entity_id: {entity_id}") from None

    def place_entity(self, entity: Entity) -> Entity:
        tile = self.tile_at(entity.coordinate)
        if tile.has_contents:
            raise IllegalConfigurationError(f"tile {entity.coordinate} is already occupied")
        if entity.entity_id is None:
            self._next_entity_counter += 1
            entity.entity_id = f"{entity.kind.name.lower()}:{self._next_entity_counter}"
        elif entity.entity_id in self.entities:
            raise IllegalConfigurationError(f"duplicate entity_id: {entity.entity_id}")
        self.entities[entity.entity_id] = entity
        tile.occupant_id = entity.entity_id
        if entity.kind is EntityKind.CREATURE:
            self._creature_ids.append(entity.entity_id)
        return entity

    def set_occupant(self, coordinate: Coordinate, entity: Entity) -> None:
        self.tile_at(coordinate).occupant_id = entity.entity_id

    def clear_occupant(self, coordinate: Coordinate) -> None:
        self.tile_at(coordinate).occupant_id = None

    def remove_entity(self, entity: Entity) -> None:
        self.entities.pop(entity.entity_id, None)
        if entity.entity_id in self._creature_ids:
            self._creature_ids.remove(entity.entity_id)

    def creatures(self) -> list[Entity]:
        return [self.entities[entity_id] for entity_id in self._creature_ids]

    @property
    def player(self) -> Player | None:
        for entity in self.entities.values():
            if entity.kind is EntityKind.PLAYER:
                return entity
        return None

    def occupants_in_tile_order(self) -> list[Entity]:
        return [self.entities[tile.occupant_id] for tile in self.tiles if tile.occupant_id is not None]

    def tiles_snapshot(self) -> list[Tile]:
        return [replace(tile) for tile in self.tiles]

    def terrain_rows(self) -> list[str]:
        return [
            "".join(tile.terrain.encode() for tile in self.tiles[row * self.width : (row + 1) * self.width])
            for row in range(self.height)
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "width": self.width,
            "height": self.height,
            "seed": self.seed,
            "turn": self.turn,
            "rows": self.terrain_rows(),
            "entities": [entity.to_dict() for entity in self.occupants_in_tile_order()],
            "creature_ids": list(self._creature_ids),
        }
