import pytest

from fieldsim.sim.errors import BadSaveError
from fieldsim.sim.world import Coordinate, SizeClass, Terrain


def test_coordinate_encode_decode_round_trip() -> None:
    for coordinate in (Coordinate(0, 0), Coordinate(14, 3), Coordinate(-2, 7)):
        assert Coordinate.decode(coordinate.encode()) == coordinate


def test_coordinate_helpers() -> None:
    origin = Coordinate(1, 2)
    target = origin.translate(3, -4)

    assert target == Coordinate(4, -2)
    assert origin.delta(target) == (3, -4)
    assert origin.manhattan(target) == 7
    assert str(target) == "(4,-2)"
    assert Coordinate.from_dict(target.to_dict()) == target


@pytest.mark.parametrize("text", ["1", "1,2,3", "a,2", "1, 2", " 1,2", "1_0,2", ""])
def test_coordinate_decode_rejects_malformed_text(text: str) -> None:
    with pytest.raises(BadSaveError):
        Coordinate.decode(text)


def test_terrain_decode_rejects_unknown_character() -> None:
    assert Terrain.decode("W") is Terrain.WATER
    with pytest.raises(BadSaveError, match="unknown terrain"):
        Terrain.decode("L")


def test_size_class_points_ascend_while_move_distance_descends() -> None:
    ordered = list(SizeClass)

    assert [size.points for size in ordered] == [1, 2, 3, 4]
    assert [size.move_distance for size in ordered] == [4, 3, 2, 1]
    assert SizeClass.decode("HUGE") is SizeClass.HUGE
    with pytest.raises(BadSaveError):
        SizeClass.decode("GIANT")
