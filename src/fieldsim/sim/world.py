from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from fieldsim.sim.errors import BadSaveError

_STRICT_INT_PATTERN = re.compile(r"^[+-]?[0-9]+$")


def parse_strict_int(text: str, *, field_name: str) -> int:
    """Parse a base-10 integer, rejecting whitespace and underscores that ``int()`` tolerates."""
    if not _STRICT_INT_PATTERN.match(text):
        raise BadSaveError(f"{field_name} must be an integer, got {text!r}")
    return int(text)


@dataclass(frozen=True, order=True)
class Coordinate:
    x: int
    y: int

    def translate(self, dx: int, dy: int) -> Coordinate:
        return Coordinate(self.x + dx, self.y + dy)

    def delta(self, other: Coordinate) -> tuple[int, int]:
        return (other.x - self.x, other.y - self.y)

    def manhattan(self, other: Coordinate) -> int:
        dx, dy = self.delta(other)
        return abs(dx) + abs(dy)

    def encode(self) -> str:
        return f"{self.x},{self.y}"

    @classmethod
    def decode(cls, text: str) -> Coordinate:
        parts = text.split(",")
        if len(parts) != 2:
            raise BadSaveError(f"coordinate must be 'x,y', got {text!r}")
        return cls(
            x=parse_strict_int(parts[0], field_name="coordinate.x"),
            y=parse_strict_int(parts[1], field_name="coordinate.y"),
        )

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, int]) -> Coordinate:
        return cls(x=int(data["x"]), y=int(data["y"]))

    def __str__(self) -> str:
        return f"({self.x},{self.y})"


class Terrain(Enum):
    PLAIN = "P"
    WATER = "W"
    SHORE = "S"
    PEAK = "X"

    def encode(self) -> str:
        return self.value

    @classmethod
    def decode(cls, char: str) -> Terrain:
        for terrain in cls:
            if terrain.value == char:
                return terrain
        raise BadSaveError(f"unknown terrain character {char!r}")


class SizeClass(Enum):
    """Size ranks; points ascend while move distance descends."""

    TINY = (1, 4)
    SMALL = (2, 3)
    LARGE = (3, 2)
    HUGE = (4, 1)

    def __init__(self, points: int, move_distance: int) -> None:
        self.points = points
        self.move_distance = move_distance

    @classmethod
    def decode(cls, name: str) -> SizeClass:
        try:
            return cls[name]
        except KeyError:
            raise BadSaveError(f"unknown size class {name!r}") from None


@dataclass
class Tile:
    terrain: Terrain = Terrain.PLAIN
    occupant_id: str | None = None

    @property
    def has_contents(self) -> bool:
        return self.occupant_id is not None
