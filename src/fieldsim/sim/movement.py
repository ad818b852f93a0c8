from __future__ import annotations

from typing import TYPE_CHECKING

from fieldsim.sim.entities import Entity, EntityKind
from fieldsim.sim.errors import CoordinateOutOfBoundsError, NoSuchEntityError
from fieldsim.sim.events import CollectEvent, MoveEvent
from fieldsim.sim.world import Coordinate, Terrain

if TYPE_CHECKING:
    from fieldsim.sim.grid import Grid

MOBILE_KINDS = (EntityKind.CREATURE, EntityKind.PLAYER)
COLLECTABLE_KINDS = (EntityKind.CREATURE, EntityKind.PLANT)
COLLECTION_RADIUS = 1


def check_range(radius: int, origin: Coordinate) -> list[Coordinate]:
    """Manhattan ball around ``origin`` (inclusive), unfiltered by bounds.

    Ordered by x then y; the creature scheduler indexes into this order.
    """
    return [
        origin.translate(dx, dy)
        for dx in range(-radius, radius + 1)
        for dy in range(-radius, radius + 1)
        if abs(dx) + abs(dy) <= radius
    ]


def _axis_steps(start: int, end: int) -> list[int]:
    if start == end:
        return []
    step = 1 if end > start else -1
    return list(range(start + step, end + step, step))


def candidate_paths(origin: Coordinate, target: Coordinate) -> tuple[list[Coordinate], list[Coordinate]]:
    """Row-first and column-first L paths, excluding the starting cell."""
    row_first = [Coordinate(x, origin.y) for x in _axis_steps(origin.x, target.x)]
    row_first += [Coordinate(target.x, y) for y in _axis_steps(origin.y, target.y)]
    column_first = [Coordinate(origin.x, y) for y in _axis_steps(origin.y, target.y)]
    column_first += [Coordinate(x, target.y) for x in _axis_steps(origin.x, target.x)]
    return row_first, column_first


def terrain_compatible(entity: Entity, terrain: Terrain) -> bool:
    if entity.kind is EntityKind.CREATURE:
        if entity.habitat is Terrain.WATER:
            return terrain is Terrain.WATER
        return terrain is not Terrain.WATER
    if entity.kind is EntityKind.PLANT:
        return terrain is not Terrain.WATER
    if entity.kind is EntityKind.PLAYER:
        return terrain not in (Terrain.WATER, Terrain.PEAK)
    raise ValueError(f"unsupported entity kind: {entity.kind!r}")


def path_is_valid(grid: Grid, entity: Entity, path: list[Coordinate]) -> bool:
    if not path:
        return False
    for step in path:
        if not grid.in_bounds(step):
            return False
        tile = grid.tile_at(step)
        if tile.has_contents or not terrain_compatible(entity, tile.terrain):
            return False
    return True


def can_move(grid: Grid, entity: Entity, target: Coordinate) -> bool:
    grid.require_in_bounds(target)
    if entity.kind not in MOBILE_KINDS:
        return False
    if entity.coordinate.manhattan(target) > entity.move_distance:
        return False
    return any(path_is_valid(grid, entity, path) for path in candidate_paths(entity.coordinate, target))


def possible_moves(grid: Grid, entity: Entity) -> list[Coordinate]:
    if entity.kind not in MOBILE_KINDS:
        return []
    return [
        candidate
        for candidate in check_range(entity.move_distance, entity.coordinate)
        if grid.in_bounds(candidate) and can_move(grid, entity, candidate)
    ]


def move(grid: Grid, entity: Entity, target: Coordinate) -> None:
    """Relocate ``entity`` without re-validating; callers check ``can_move`` first.

    A player landing on a collectable occupant collects it before taking the tile.
    """
    grid.require_in_bounds(target)
    origin = entity.coordinate
    grid.log.add(MoveEvent.capture(entity, target))
    if entity.kind is EntityKind.PLAYER:
        occupant = grid.occupant_at(target)
        if occupant is not None and occupant.kind in COLLECTABLE_KINDS:
            collect_entity(grid, entity, occupant)
    grid.clear_occupant(origin)
    grid.set_occupant(target, entity)
    entity.coordinate = target


def possible_collection(grid: Grid, player: Entity) -> list[Coordinate]:
    collectable: list[Coordinate] = []
    for candidate in check_range(COLLECTION_RADIUS, player.coordinate):
        if not grid.in_bounds(candidate):
            continue
        occupant = grid.occupant_at(candidate)
        if occupant is not None and occupant.kind in COLLECTABLE_KINDS:
            collectable.append(candidate)
    return collectable


def collect_at(grid: Grid, player: Entity, coordinate: Coordinate) -> int:
    # Emptiness of the raw tile index is checked before bounds.
    index = grid.index_of(coordinate)
    if not 0 <= index < len(grid.tiles):
        raise CoordinateOutOfBoundsError(f"{coordinate} is outside {grid.width}x{grid.height} grid {grid.name!r}")
    tile = grid.tiles[index]
    if not tile.has_contents:
        raise NoSuchEntityError(f"no entity at {coordinate}")
    grid.require_in_bounds(coordinate)
    occupant = grid.entity(tile.occupant_id)
    if occupant.kind in COLLECTABLE_KINDS:
        return collect_entity(grid, player, occupant)
    return 0


def collect_entity(grid: Grid, collector: Entity, target: Entity) -> int:
    grid.log.add(CollectEvent.capture(collector, target))
    grid.clear_occupant(target.coordinate)
    grid.remove_entity(target)
    return target.points
