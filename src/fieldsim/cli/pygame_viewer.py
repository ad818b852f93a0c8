from __future__ import annotations

import argparse
import importlib.metadata
import os
import platform
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from fieldsim.sim.core import DEFAULT_SAVE_PATH, Session
from fieldsim.sim.entities import EntityKind
from fieldsim.sim.errors import FieldSimError
from fieldsim.sim.grid import Grid
from fieldsim.sim.hash import grid_hash, session_hash
from fieldsim.sim.world import Coordinate, Terrain

DEFAULT_SCENARIO_PATH = "content/examples/basic_scenario.txt"
HEADLESS_ENV_VAR = "FIELDSIM_HEADLESS"
TILE_SIZE = 48
WINDOW_SIZE = (1280, 800)
PANEL_WIDTH = 460
VIEWPORT_MARGIN = 12
PANEL_MARGIN = 12
LOG_TAIL_LINES = 18

TERRAIN_COLORS: dict[Terrain, tuple[int, int, int]] = {
    Terrain.PLAIN: (132, 168, 94),
    Terrain.WATER: (58, 110, 180),
    Terrain.SHORE: (214, 196, 140),
    Terrain.PEAK: (120, 112, 108),
}
ENTITY_COLORS: dict[EntityKind, tuple[int, int, int]] = {
    EntityKind.PLAYER: (255, 243, 130),
    EntityKind.CREATURE: (210, 85, 85),
    EntityKind.PLANT: (61, 120, 72),
}
MOVE_HIGHLIGHT_COLOR = (255, 255, 255)
COLLECT_HIGHLIGHT_COLOR = (255, 160, 60)

pygame: Any | None = None


@dataclass(frozen=True)
class GridLayout:
    origin_x: int
    origin_y: int
    tile_size: int = TILE_SIZE

    def pixel_to_coordinate(self, grid: Grid, pixel: tuple[int, int]) -> Coordinate | None:
        local_x = pixel[0] - self.origin_x
        local_y = pixel[1] - self.origin_y
        if local_x < 0 or local_y < 0:
            return None
        coordinate = Coordinate(local_x // self.tile_size, local_y // self.tile_size)
        return coordinate if grid.in_bounds(coordinate) else None

    def coordinate_to_rect(self, coordinate: Coordinate) -> tuple[int, int, int, int]:
        return (
            self.origin_x + coordinate.x * self.tile_size,
            self.origin_y + coordinate.y * self.tile_size,
            self.tile_size,
            self.tile_size,
        )


def _layout_for(grid: Grid) -> GridLayout:
    viewport_width = WINDOW_SIZE[0] - PANEL_WIDTH - PANEL_MARGIN - VIEWPORT_MARGIN * 2
    viewport_height = WINDOW_SIZE[1] - VIEWPORT_MARGIN * 2
    tile_size = max(8, min(TILE_SIZE, viewport_width // grid.width, viewport_height // grid.height))
    origin_x = VIEWPORT_MARGIN + (viewport_width - tile_size * grid.width) // 2
    origin_y = VIEWPORT_MARGIN + (viewport_height - tile_size * grid.height) // 2
    return GridLayout(origin_x=origin_x, origin_y=origin_y, tile_size=tile_size)


def _next_scenario_name(session: Session) -> str:
    names = session.registry.names()
    current = names.index(session.grid.name)
    return names[(current + 1) % len(names)]


def _panel_lines(session: Session, status_message: str | None) -> list[str]:
    grid = session.grid
    lines = [
        f"scenario={grid.name} turn={grid.turn}",
        "LMB select/move | RMB collect | Enter end turn",
        "Tab next scenario | F5 save | F9 load | ESC quit",
        f"moved_this_turn={'yes' if session.has_moved else 'no'}",
    ]
    if status_message:
        lines.append(f"status: {status_message}")
    lines.append("")
    lines.extend(session.entity_info_text().splitlines())
    lines.append("")
    lines.extend(session.statistics_text().splitlines())
    lines.append("")
    lines.extend(session.log_text().splitlines()[-LOG_TAIL_LINES:])
    return lines


def _draw_grid(screen: Any, session: Session, layout: GridLayout) -> None:
    grid = session.grid
    tiles = session.tiles_snapshot()
    move_targets: set[Coordinate] = set()
    collect_targets: set[Coordinate] = set()
    selected = session.selected_entity
    if selected is not None and selected.kind is EntityKind.PLAYER and not session.has_moved:
        move_targets = set(session.possible_moves(selected))
        collect_targets = set(session.possible_collection())

    for index, tile in enumerate(tiles):
        coordinate = grid.coordinate_at(index)
        rect = pygame.Rect(*layout.coordinate_to_rect(coordinate))
        pygame.draw.rect(screen, TERRAIN_COLORS[tile.terrain], rect)
        pygame.draw.rect(screen, (35, 35, 40), rect, 1)
        if tile.occupant_id is not None:
            entity = grid.entities[tile.occupant_id]
            radius = max(3, layout.tile_size // 2 - 2 - (4 - entity.size_class.points) * 3)
            pygame.draw.circle(screen, ENTITY_COLORS[entity.kind], rect.center, radius)
            pygame.draw.circle(screen, (15, 15, 15), rect.center, radius, 1)
        if coordinate in move_targets:
            pygame.draw.rect(screen, MOVE_HIGHLIGHT_COLOR, rect, 2)
        elif coordinate in collect_targets:
            pygame.draw.rect(screen, COLLECT_HIGHLIGHT_COLOR, rect, 2)


def _draw_panel(screen: Any, font: Any, lines: list[str]) -> None:
    panel_x = WINDOW_SIZE[0] - PANEL_WIDTH - PANEL_MARGIN
    panel_rect = pygame.Rect(panel_x, PANEL_MARGIN, PANEL_WIDTH, WINDOW_SIZE[1] - PANEL_MARGIN * 2)
    pygame.draw.rect(screen, (28, 30, 38), panel_rect)
    pygame.draw.rect(screen, (64, 68, 84), panel_rect, 1)
    y = panel_rect.y + 8
    for line in lines:
        if y > panel_rect.bottom - 20:
            break
        surface = font.render(line, True, (240, 240, 240))
        screen.blit(surface, (panel_rect.x + 8, y))
        y += 20


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fieldsim-viewer",
        description="Run the fieldsim pygame viewer.",
    )
    parser.add_argument(
        "save_paths",
        nargs="*",
        default=[DEFAULT_SCENARIO_PATH],
        help="Scenario save files to load; the first one becomes active.",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Force SDL dummy video driver for CI/testing and exit without opening a real window.",
    )
    parser.add_argument(
        "--save-path",
        default=DEFAULT_SAVE_PATH,
        help="Save path used by F5 save and F9 load.",
    )
    return parser


def _env_flag_enabled(var_name: str) -> bool:
    return os.environ.get(var_name, "").strip().lower() in {"1", "true", "yes", "on"}


def _print_startup_banner() -> None:
    try:
        pygame_version = importlib.metadata.version("pygame")
    except importlib.metadata.PackageNotFoundError:
        pygame_version = "not-installed"
    print(
        "[fieldsim.viewer] startup "
        f"python={platform.python_version()} "
        f"pygame={pygame_version} "
        f"platform={platform.platform()}"
    )
    for name in ("SDL_VIDEODRIVER", "SDL_AUDIODRIVER"):
        value = os.environ.get(name, "<unset>")
        print(f"[fieldsim.viewer] env {name}={value}")


def _ensure_pygame_imported() -> Any:
    global pygame
    if pygame is None:
        import pygame as pygame_module

        pygame = pygame_module
    return pygame


def _load_viewer_session(save_paths: Sequence[str]) -> Session:
    session = Session.from_paths(save_paths)
    for name, grid in session.registry.loaded().items():
        print(
            "[fieldsim.viewer] loaded "
            f"scenario={name!r} size={grid.width}x{grid.height} seed={grid.seed} "
            f"entities={len(grid.entities)} grid_hash={grid_hash(grid)}"
        )
    return session


def _save_viewer_session(session: Session, save_path: str) -> None:
    session.save_path(save_path)
    print(
        "[fieldsim.viewer] saved "
        f"path={save_path} "
        f"scenario={session.grid.name!r} "
        f"grid_hash={grid_hash(session.grid)} "
        f"session_hash={session_hash(session.grid)}"
    )


def run_pygame_viewer(
    save_paths: Sequence[str] = (DEFAULT_SCENARIO_PATH,),
    *,
    headless: bool = False,
    save_path: str = DEFAULT_SAVE_PATH,
) -> int:
    if headless:
        os.environ["SDL_VIDEODRIVER"] = "dummy"
        print("[fieldsim.viewer] warning: headless mode active; no window will open.")

    _print_startup_banner()

    try:
        session = _load_viewer_session(save_paths)
    except (FieldSimError, OSError, ValueError) as exc:
        print(f"[fieldsim.viewer] failed to load scenarios: {exc}", file=sys.stderr)
        return 1

    pygame_module = _ensure_pygame_imported()
    try:
        pygame_module.init()
    except Exception as exc:
        print(
            "[fieldsim.viewer] failed during pygame.init(): "
            f"{exc}. Hint: verify a working SDL video driver (set SDL_VIDEODRIVER=dummy for headless mode).",
            file=sys.stderr,
        )
        return 1

    try:
        pygame_module.display.set_caption("fieldsim")
        screen = pygame_module.display.set_mode(WINDOW_SIZE)
    except Exception as exc:
        print(
            "[fieldsim.viewer] failed during pygame.display.set_mode(...): "
            f"{exc}. Hint: GUI sessions require a valid display; use --headless or {HEADLESS_ENV_VAR}=1.",
            file=sys.stderr,
        )
        pygame_module.quit()
        return 1

    print(f"[fieldsim.viewer] display initialized: {pygame_module.display.get_driver()}, window size={WINDOW_SIZE}")

    if headless:
        pygame_module.quit()
        return 0

    clock = pygame_module.time.Clock()
    font = pygame_module.font.SysFont("consolas", 16)
    status_message: str | None = None
    running = True

    while running:
        layout = _layout_for(session.grid)
        for event in pygame_module.event.get():
            if event.type == pygame_module.QUIT:
                running = False
            elif event.type == pygame_module.KEYDOWN and event.key == pygame_module.K_ESCAPE:
                running = False
            elif event.type == pygame_module.KEYDOWN and event.key in (pygame_module.K_RETURN, pygame_module.K_SPACE):
                session.end_turn()
                status_message = f"turn {session.grid.turn}"
            elif event.type == pygame_module.KEYDOWN and event.key == pygame_module.K_TAB:
                session.switch_active_scenario(_next_scenario_name(session))
                status_message = f"switched to {session.grid.name}"
            elif event.type == pygame_module.KEYDOWN and event.key == pygame_module.K_F5:
                try:
                    _save_viewer_session(session, save_path)
                    status_message = f"saved {save_path}"
                except OSError as exc:
                    status_message = f"save failed: {exc}"
                    print(f"[fieldsim.viewer] save failed path={save_path}: {exc}", file=sys.stderr)
            elif event.type == pygame_module.KEYDOWN and event.key == pygame_module.K_F9:
                if Path(save_path).exists():
                    try:
                        session.load_path(save_path)
                        status_message = f"loaded {save_path}"
                    except FieldSimError as exc:
                        status_message = f"load failed: {exc}"
                        print(f"[fieldsim.viewer] load failed path={save_path}: {exc}", file=sys.stderr)
                else:
                    status_message = f"load failed: file not found ({save_path})"
                    print(f"[fieldsim.viewer] load skipped; file not found path={save_path}")
            elif event.type == pygame_module.MOUSEBUTTONDOWN and event.button == 1:
                target = layout.pixel_to_coordinate(session.grid, event.pos)
                if target is None:
                    continue
                selected = session.selected_entity
                if selected is not None and selected.kind is EntityKind.PLAYER and target != selected.coordinate:
                    if session.move_player(target):
                        status_message = f"moved to {target}"
                        continue
                session.select(target)
            elif event.type == pygame_module.MOUSEBUTTONDOWN and event.button == 3:
                target = layout.pixel_to_coordinate(session.grid, event.pos)
                if target is not None and session.grid.player is not None and target in session.possible_collection():
                    points = session.collect(target)
                    status_message = f"collected {points} points"

        screen.fill((17, 18, 25))
        _draw_grid(screen, session, layout)
        _draw_panel(screen, font, _panel_lines(session, status_message))
        pygame_module.display.flip()
        clock.tick(30)

    pygame_module.quit()
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    headless = args.headless or _env_flag_enabled(HEADLESS_ENV_VAR)
    raise SystemExit(run_pygame_viewer(args.save_paths, headless=headless, save_path=args.save_path))


if __name__ == "__main__":
    main()
