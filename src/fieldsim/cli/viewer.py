from __future__ import annotations

from collections.abc import Callable

from fieldsim.sim.core import DEFAULT_SAVE_PATH, Session
from fieldsim.sim.entities import EntityKind
from fieldsim.sim.errors import FieldSimError
from fieldsim.sim.world import Coordinate, Terrain

TERRAIN_GLYPHS = {Terrain.PLAIN: ".", Terrain.WATER: "~", Terrain.SHORE: ",", Terrain.PEAK: "^"}
ENTITY_GLYPHS = {EntityKind.PLAYER: "@", EntityKind.CREATURE: "c", EntityKind.PLANT: "*"}
HELP_TEXT = (
    "Commands: show | moves | collectable | move <x> <y> | collect <x> <y> | info <x> <y> | "
    "end | log | stats | save [path] | load <path> | switch <name> | list | quit"
)


class AsciiViewer:
    """Read-only projection of the active scenario for terminal display."""

    def render(self, session: Session) -> str:
        grid = session.grid
        lines = [f"scenario={grid.name} turn={grid.turn} size={grid.width}x{grid.height} seed={grid.seed}"]
        tiles = session.tiles_snapshot()
        for y in range(grid.height):
            row = []
            for x in range(grid.width):
                tile = tiles[grid.index_of(Coordinate(x, y))]
                if tile.occupant_id is None:
                    row.append(TERRAIN_GLYPHS[tile.terrain])
                else:
                    row.append(ENTITY_GLYPHS[grid.entities[tile.occupant_id].kind])
            lines.append(f"{y:>2} " + "".join(row))
        for entity in grid.occupants_in_tile_order():
            lines.append(f"entity[{entity.entity_id}] {entity.describe()}")
        return "\n".join(lines)


class SessionController:
    """Small command adapter; issues commands to the session but does not own state."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def move_player(self, x: int, y: int) -> bool:
        return self.session.move_player(Coordinate(x, y))

    def collect(self, x: int, y: int) -> int:
        return self.session.collect(Coordinate(x, y))

    def select(self, x: int, y: int) -> str:
        self.session.select(Coordinate(x, y))
        return self.session.entity_info_text()

    def end_turn(self) -> None:
        self.session.end_turn()

    def save(self, path: str = DEFAULT_SAVE_PATH) -> None:
        self.session.save_path(path)

    def load(self, path: str) -> None:
        self.session.load_path(path)

    def switch(self, name: str) -> None:
        self.session.switch_active_scenario(name)


def _format_coordinates(coordinates: list[Coordinate]) -> str:
    return " ".join(str(coordinate) for coordinate in coordinates) if coordinates else "none"


def run_repl(
    session: Session,
    *,
    input_fn: Callable[[str], str] = input,
    output: Callable[[str], None] = print,
    save_path: str = DEFAULT_SAVE_PATH,
) -> None:
    view = AsciiViewer()
    controller = SessionController(session)

    output(HELP_TEXT)
    output(view.render(session))

    while True:
        try:
            raw = input_fn("> ").strip()
        except EOFError:
            break
        if raw in {"quit", "exit"}:
            break
        parts = raw.split()
        if not parts:
            continue
        command, args = parts[0], parts[1:]

        try:
            if command == "show" and not args:
                output(view.render(session))
            elif command == "moves" and not args:
                output(f"moves {_format_coordinates(session.possible_moves(session.player))}")
            elif command == "collectable" and not args:
                output(f"collectable {_format_coordinates(session.possible_collection())}")
            elif command == "move" and len(args) == 2:
                moved = controller.move_player(int(args[0]), int(args[1]))
                output("moved" if moved else "move rejected")
            elif command == "collect" and len(args) == 2:
                output(f"collected points={controller.collect(int(args[0]), int(args[1]))}")
            elif command == "info" and len(args) == 2:
                output(controller.select(int(args[0]), int(args[1])))
            elif command == "end" and not args:
                controller.end_turn()
                output(view.render(session))
            elif command == "log" and not args:
                output(session.log_text())
            elif command == "stats" and not args:
                output(session.statistics_text())
            elif command == "save" and len(args) <= 1:
                path = args[0] if args else save_path
                controller.save(path)
                output(f"saved {path}")
            elif command == "load" and len(args) == 1:
                controller.load(args[0])
                output(view.render(session))
            elif command == "switch" and args:
                controller.switch(" ".join(args))
                output(view.render(session))
            elif command == "list" and not args:
                output(" | ".join(session.registry.names()))
            else:
                output("unknown command")
        except (FieldSimError, ValueError, OSError) as exc:
            output(f"error: {exc}")
