from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from fieldsim.sim.grid import Grid
from fieldsim.sim.movement import move, possible_moves
from fieldsim.sim.rules import TurnModule
from fieldsim.sim.world import Coordinate

if TYPE_CHECKING:
    from fieldsim.sim.core import Session


@dataclass(frozen=True)
class CreatureMove:
    entity_id: str
    origin: Coordinate
    target: Coordinate


def advance_creatures(grid: Grid) -> list[CreatureMove]:
    """Relocate registered creatures using the grid's seeded RNG.

    Draw order is fixed: one draw for the round count, then per round one draw to
    pick a creature and a destination draw only when it has two or more moves.
    """
    creatures = grid.creatures()
    if not creatures:
        return []

    moves: list[CreatureMove] = []
    rounds = grid.rng.randrange(len(creatures))
    for _ in range(rounds + 1):
        creature = creatures[grid.rng.randrange(len(creatures))]
        candidates = possible_moves(grid, creature)
        if not candidates:
            continue
        if len(candidates) == 1:
            target = candidates[0]
        else:
            target = candidates[grid.rng.randrange(len(candidates))]
        moves.append(CreatureMove(entity_id=creature.entity_id, origin=creature.coordinate, target=target))
        move(grid, creature, target)
    return moves


class CreatureScheduler(TurnModule):
    """Advances autonomous creatures once per turn."""

    name = "creature_scheduler"

    def __init__(self) -> None:
        self.last_moves: list[CreatureMove] = []

    def on_turn_end(self, session: Session, grid: Grid) -> None:
        self.last_moves = advance_creatures(grid)
