from __future__ import annotations

import os
from pathlib import Path
from typing import IO, Any, Sequence

from fieldsim.content.io import load_grid, load_grid_file, save_grid, save_grid_file
from fieldsim.sim import movement
from fieldsim.sim.entities import Entity, Player
from fieldsim.sim.errors import NoSuchEntityError
from fieldsim.sim.grid import Grid
from fieldsim.sim.registry import ScenarioRegistry
from fieldsim.sim.rules import TurnModule
from fieldsim.sim.scheduler import CreatureScheduler
from fieldsim.sim.world import Coordinate, Tile

DEFAULT_SAVE_PATH = "saves/_default_save.txt"
NO_ENTITY_SELECTED_TEXT = "No collectable selected"
NO_EVENTS_TEXT = "No events logged"
NO_STATISTICS_TEXT = "No statistics generated"
INFO_RULE_WIDTH = 25


class Session:
    """Command and query surface over the active scenario.

    Renderers read snapshots and text from here and issue moves, collections and
    end-of-turn calls; they never mutate a ``Grid`` directly.
    """

    def __init__(self, registry: ScenarioRegistry | None = None, *, with_scheduler: bool = True) -> None:
        self.registry = registry if registry is not None else ScenarioRegistry()
        self.turn_modules: list[TurnModule] = []
        self.has_moved = False
        self.selected_entity: Entity | None = None
        if with_scheduler:
            self.register_turn_module(CreatureScheduler())

    @classmethod
    def from_paths(cls, paths: Sequence[str | Path], **kwargs: Any) -> Session:
        """Load every save in order, then activate the first scenario loaded."""
        if not paths:
            raise ValueError("at least one save path is required")
        session = cls(**kwargs)
        for path in paths:
            session.load_path(path)
        session.switch_active_scenario(session.registry.names()[0])
        return session

    @property
    def grid(self) -> Grid:
        return self.registry.current

    @property
    def player(self) -> Player:
        player = self.grid.player
        if player is None:
            raise NoSuchEntityError(f"scenario {self.grid.name!r} has no player")
        return player

    def register_turn_module(self, module: TurnModule) -> None:
        if any(existing.name == module.name for existing in self.turn_modules):
            raise ValueError(f"duplicate turn module name: {module.name}")
        self.turn_modules.append(module)
        module.on_session_start(self)

    def get_turn_module(self, module_name: str) -> TurnModule | None:
        for module in self.turn_modules:
            if module.name == module_name:
                return module
        return None

    def add_grid(self, grid: Grid) -> Grid:
        self.registry.add(grid)
        self._reset_turn_state()
        return grid

    def load(self, stream: IO) -> Grid:
        return self.add_grid(load_grid(stream))

    def load_path(self, path: str | Path) -> Grid:
        return self.add_grid(load_grid_file(path))

    def save(self, stream: IO) -> None:
        save_grid(stream, self.grid)

    def save_path(self, path: str | Path = DEFAULT_SAVE_PATH) -> None:
        save_grid_file(path, self.grid)

    def switch_active_scenario(self, name: str) -> Grid:
        grid = self.registry.switch(name)
        self._reset_turn_state()
        return grid

    def _reset_turn_state(self) -> None:
        self.has_moved = False
        self.selected_entity = None

    def move(self, entity: Entity, target: Coordinate) -> None:
        movement.move(self.grid, entity, target)

    def move_player(self, target: Coordinate) -> bool:
        """Move the player if it has not moved this turn and ``target`` is reachable."""
        if self.has_moved:
            return False
        player = self.player
        if not movement.can_move(self.grid, player, target):
            return False
        movement.move(self.grid, player, target)
        self.has_moved = True
        return True

    def collect(self, coordinate: Coordinate) -> int:
        points = movement.collect_at(self.grid, self.player, coordinate)
        if self.selected_entity is not None and self.selected_entity.entity_id not in self.grid.entities:
            self.selected_entity = None
        return points

    def end_turn(self) -> None:
        grid = self.grid
        for module in self.turn_modules:
            module.on_turn_end(self, grid)
        grid.turn += 1
        self.has_moved = False

    def select(self, coordinate: Coordinate | None) -> Entity | None:
        self.selected_entity = None if coordinate is None else self.grid.occupant_at(coordinate)
        return self.selected_entity

    def tiles_snapshot(self) -> list[Tile]:
        return self.grid.tiles_snapshot()

    def possible_moves(self, entity: Entity) -> list[Coordinate]:
        return movement.possible_moves(self.grid, entity)

    def possible_collection(self) -> list[Coordinate]:
        return movement.possible_collection(self.grid, self.player)

    def log_text(self) -> str:
        log = self.grid.log
        return log.render() if len(log) else NO_EVENTS_TEXT

    def statistics_text(self) -> str:
        log = self.grid.log
        return log.statistics_text() if len(log) else NO_STATISTICS_TEXT

    def entity_info_text(self, entity: Entity | None = None) -> str:
        entity = self.selected_entity if entity is None else entity
        if entity is None:
            return NO_ENTITY_SELECTED_TEXT
        return os.linesep.join(
            [
                entity.describe(),
                "-" * INFO_RULE_WIDTH,
                "Additional Information",
                f"Species Class: {entity.kind.value}",
                f"Name: {entity.name}",
                f"Coordinate : {entity.coordinate}",
                f"Move Distance : {entity.move_distance}",
                f"Possible Points : {entity.points}",
            ]
        )

    def entity_at(self, coordinate: Coordinate) -> Entity:
        occupant = self.grid.occupant_at(coordinate)
        if occupant is None:
            raise NoSuchEntityError(f"no entity at {coordinate}")
        return occupant
