import pytest

from fieldsim.sim.entities import Creature, Plant, Player
from fieldsim.sim.errors import CoordinateOutOfBoundsError, NoSuchEntityError
from fieldsim.sim.events import CollectEvent, MoveEvent
from fieldsim.sim.grid import Grid
from fieldsim.sim.movement import collect_at, move, possible_collection
from fieldsim.sim.world import Coordinate, SizeClass, Terrain


def _build_grid() -> tuple[Grid, Player]:
    grid = Grid.from_terrain_rows("meadow", ["PPPPP", "PPPPP", "PPPPW", "PPPPP", "PPPPP"])
    player = grid.place_entity(Player(coordinate=Coordinate(2, 2), name="Ada"))
    return grid, player


def test_collecting_huge_plant_adds_its_points_and_clears_tile() -> None:
    grid, player = _build_grid()
    tree = grid.place_entity(Plant(SizeClass.HUGE, Coordinate(2, 1)))

    points = collect_at(grid, player, Coordinate(2, 1))

    assert points == SizeClass.HUGE.points
    assert grid.log.points_earned == SizeClass.HUGE.points
    assert grid.log.entities_collected == 1
    assert grid.tile_at(Coordinate(2, 1)).has_contents is False
    assert tree.entity_id not in grid.entities


def test_collecting_creature_deregisters_it() -> None:
    grid, player = _build_grid()
    horse = grid.place_entity(Creature(SizeClass.LARGE, Coordinate(3, 2), Terrain.PLAIN))
    dog = grid.place_entity(Creature(SizeClass.SMALL, Coordinate(0, 0), Terrain.PLAIN))

    collect_at(grid, player, Coordinate(3, 2))

    assert grid.creatures() == [dog]
    event = grid.log.events()[-1]
    assert isinstance(event, CollectEvent)
    assert event.collected is horse
    assert event.origin == Coordinate(2, 2)
    assert event.target == Coordinate(3, 2)


def test_collect_empty_tile_raises_and_leaves_grid_unchanged() -> None:
    grid, player = _build_grid()

    with pytest.raises(NoSuchEntityError):
        collect_at(grid, player, Coordinate(4, 4))

    assert len(grid.log) == 0


def test_collect_checks_emptiness_before_bounds() -> None:
    grid, player = _build_grid()
    grid.place_entity(Plant(SizeClass.TINY, Coordinate(0, 3)))

    # (5,2) aliases tile index 15, which is (0,3).
    with pytest.raises(CoordinateOutOfBoundsError):
        collect_at(grid, player, Coordinate(5, 2))
    # (6,2) aliases (1,3), which is empty.
    with pytest.raises(NoSuchEntityError):
        collect_at(grid, player, Coordinate(6, 2))
    with pytest.raises(CoordinateOutOfBoundsError):
        collect_at(grid, player, Coordinate(0, 9))

    assert grid.occupant_at(Coordinate(0, 3)) is not None


def test_collecting_a_player_is_a_no_op() -> None:
    grid, player = _build_grid()
    other = grid.place_entity(Player(coordinate=Coordinate(2, 3), name="Bo"))

    assert collect_at(grid, player, Coordinate(2, 3)) == 0
    assert grid.occupant_at(Coordinate(2, 3)) is other
    assert len(grid.log) == 0


def test_possible_collection_is_radius_one_ring() -> None:
    grid, player = _build_grid()
    grid.place_entity(Plant(SizeClass.TINY, Coordinate(2, 1)))
    grid.place_entity(Creature(SizeClass.TINY, Coordinate(1, 2), Terrain.PLAIN))
    grid.place_entity(Plant(SizeClass.TINY, Coordinate(1, 1)))
    grid.place_entity(Plant(SizeClass.TINY, Coordinate(2, 4)))

    assert possible_collection(grid, player) == [Coordinate(1, 2), Coordinate(2, 1)]


def test_possible_collection_filters_out_of_bounds_neighbours() -> None:
    grid = Grid(name="corner")
    player = grid.place_entity(Player(coordinate=Coordinate(0, 0), name="Ada"))
    grid.place_entity(Plant(SizeClass.SMALL, Coordinate(1, 0)))

    assert possible_collection(grid, player) == [Coordinate(1, 0)]


def test_player_moving_onto_collectable_collects_it_first() -> None:
    grid, player = _build_grid()
    flower = grid.place_entity(Plant(SizeClass.TINY, Coordinate(2, 4)))

    move(grid, player, Coordinate(2, 4))

    events = grid.log.events()
    assert isinstance(events[0], MoveEvent)
    assert isinstance(events[1], CollectEvent)
    assert events[1].collected is flower
    assert events[1].origin == Coordinate(2, 2)
    assert grid.occupant_at(Coordinate(2, 4)) is player
    assert grid.log.points_earned == 1
    assert grid.log.tiles_traversed == 2
