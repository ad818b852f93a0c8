from __future__ import annotations

import io
import os
import re
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import IO

from fieldsim.sim.entities import CREATURE_HABITATS, Creature, Entity, Plant, Player
from fieldsim.sim.errors import BadSaveError, CoordinateOutOfBoundsError, IllegalConfigurationError
from fieldsim.sim.grid import DEFAULT_GRID_DIMENSION, MAX_GRID_DIMENSION, MIN_GRID_DIMENSION, Grid
from fieldsim.sim.movement import terrain_compatible
from fieldsim.sim.world import Coordinate, SizeClass, Terrain, Tile, parse_strict_int

SAVE_ENCODING = "utf-8"
SAVE_LINE_SEPARATOR = "\n"
SEPARATOR_CHAR = "="
DIMENSION_SENTINEL = -1
WIDTH_KEY = "Width"
HEIGHT_KEY = "Height"
SEED_KEY = "Seed"
ENTITY_FIELD_SEPARATOR = "-"

_LINE_BREAK_PATTERN = re.compile(r"\r\n|\r|\n")


class _LineReader:
    def __init__(self, text: str) -> None:
        lines = _LINE_BREAK_PATTERN.split(text)
        if lines and lines[-1] == "":
            lines.pop()
        self._lines = lines
        self._position = 0

    @property
    def line_number(self) -> int:
        return self._position

    def has_more(self) -> bool:
        return self._position < len(self._lines)

    def next_line(self, expected: str) -> str:
        if not self.has_more():
            raise BadSaveError(f"unexpected end of save; expected {expected}")
        line = self._lines[self._position]
        self._position += 1
        return line


def encode_grid(grid: Grid) -> str:
    separator = SEPARATOR_CHAR * grid.width
    lines = [
        grid.name,
        f"{WIDTH_KEY}:{grid.width}",
        f"{HEIGHT_KEY}:{grid.height}",
        f"{SEED_KEY}:{grid.seed}",
        separator,
        *grid.terrain_rows(),
        separator,
        *(entity.encode() for entity in grid.occupants_in_tile_order()),
    ]
    return SAVE_LINE_SEPARATOR.join(lines)


def _parse_header_value(line: str, key: str) -> int:
    parts = line.split(":")
    if len(parts) != 2 or parts[0] != key:
        raise BadSaveError(f"expected '{key}:<int>' line, got {line!r}")
    value = parse_strict_int(parts[1], field_name=key)
    return DEFAULT_GRID_DIMENSION if value == DIMENSION_SENTINEL else value


def _expect_separator(reader: _LineReader, width: int) -> None:
    line = reader.next_line("separator line")
    if len(line) != width or line.strip(SEPARATOR_CHAR):
        raise BadSaveError(f"line {reader.line_number}: expected separator of {width} '{SEPARATOR_CHAR}'")


def _decode_habitat(name: str) -> Terrain:
    for habitat in CREATURE_HABITATS:
        if habitat.name == name:
            return habitat
    raise BadSaveError(f"unknown creature habitat {name!r}")


def _decode_entity(line: str) -> Entity:
    fields = line.split(ENTITY_FIELD_SEPARATOR)
    kind = fields[0]
    if kind == "Creature":
        if len(fields) != 4:
            raise BadSaveError(f"creature line needs 4 fields, got {line!r}")
        return Creature(SizeClass.decode(fields[1]), Coordinate.decode(fields[2]), _decode_habitat(fields[3]))
    if kind == "Plant":
        if len(fields) != 3:
            raise BadSaveError(f"plant line needs 3 fields, got {line!r}")
        return Plant(SizeClass.decode(fields[1]), Coordinate.decode(fields[2]))
    if kind == "Player":
        if len(fields) != 3:
            raise BadSaveError(f"player line needs 3 fields, got {line!r}")
        return Player(coordinate=Coordinate.decode(fields[1]), name=fields[2])
    raise BadSaveError(f"unknown entity kind {kind!r}")


def decode_grid(text: str) -> Grid:
    """Parse save text into a new ``Grid``; any violation raises ``BadSaveError``."""
    reader = _LineReader(text)
    name = reader.next_line("scenario name")
    width = _parse_header_value(reader.next_line(f"{WIDTH_KEY} line"), WIDTH_KEY)
    height = _parse_header_value(reader.next_line(f"{HEIGHT_KEY} line"), HEIGHT_KEY)
    seed = _parse_header_value(reader.next_line(f"{SEED_KEY} line"), SEED_KEY)
    _expect_separator(reader, width)

    for key, value in ((WIDTH_KEY, width), (HEIGHT_KEY, height)):
        if not MIN_GRID_DIMENSION <= value <= MAX_GRID_DIMENSION:
            raise BadSaveError(f"{key} must be within [{MIN_GRID_DIMENSION}, {MAX_GRID_DIMENSION}], got {value}")
    if seed < 0:
        raise BadSaveError(f"{SEED_KEY} must be >= 0, got {seed}")

    tiles: list[Tile] = []
    for _ in range(height):
        row = reader.next_line("map row")
        if len(row) != width:
            raise BadSaveError(f"line {reader.line_number}: map row has {len(row)} cells, expected {width}")
        tiles.extend(Tile(terrain=Terrain.decode(char)) for char in row)
    _expect_separator(reader, width)

    try:
        grid = Grid(name=name, width=width, height=height, seed=seed, tiles=tiles)
    except IllegalConfigurationError as exc:
        raise BadSaveError(str(exc)) from exc

    seen: set[Coordinate] = set()
    while reader.has_more():
        line = reader.next_line("entity line")
        try:
            entity = _decode_entity(line)
        except IllegalConfigurationError as exc:
            raise BadSaveError(f"line {reader.line_number}: {exc}") from exc
        coordinate = entity.coordinate
        if not grid.in_bounds(coordinate):
            raise BadSaveError(f"line {reader.line_number}: {coordinate} is outside the grid")
        if coordinate in seen:
            raise BadSaveError(f"line {reader.line_number}: duplicate entity coordinate {coordinate}")
        if not terrain_compatible(entity, grid.terrain_at(coordinate)):
            raise BadSaveError(
                f"line {reader.line_number}: {entity.kind.value} cannot stand on {grid.terrain_at(coordinate).name}"
            )
        seen.add(coordinate)
        try:
            grid.place_entity(entity)
        except (IllegalConfigurationError, CoordinateOutOfBoundsError) as exc:
            raise BadSaveError(f"line {reader.line_number}: {exc}") from exc
    return grid


def save_grid(stream: IO, grid: Grid) -> None:
    text = encode_grid(grid)
    if isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
        stream.write(text.encode(SAVE_ENCODING))
    else:
        stream.write(text)


def load_grid(stream: IO) -> Grid:
    data = stream.read()
    if isinstance(data, bytes):
        try:
            data = data.decode(SAVE_ENCODING)
        except UnicodeDecodeError as exc:
            raise BadSaveError(f"save is not valid {SAVE_ENCODING}: {exc}") from exc
    return decode_grid(data)


def _write_atomic_text(path: str | Path, text: str) -> None:
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)

    temp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding=SAVE_ENCODING,
            newline="",
            dir=destination.parent,
            delete=False,
            suffix=".tmp",
        ) as temp_file:
            temp_file.write(text)
            temp_file.flush()
            os.fsync(temp_file.fileno())
            temp_path = Path(temp_file.name)
        os.replace(temp_path, destination)
    except Exception:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise


def save_grid_file(path: str | Path, grid: Grid) -> None:
    _write_atomic_text(path, encode_grid(grid))


def load_grid_file(path: str | Path) -> Grid:
    try:
        data = Path(path).read_bytes()
    except FileNotFoundError as exc:
        raise BadSaveError(f"save file not found: {path}") from exc
    with io.BytesIO(data) as stream:
        return load_grid(stream)
