from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fieldsim.sim.entities import Entity
    from fieldsim.sim.world import Coordinate

EVENT_SEPARATOR = "-" * 5


@dataclass(frozen=True)
class MoveEvent:
    """An entity moved; ``origin`` is captured before the move mutates anything."""

    entity: Entity
    origin: Coordinate
    target: Coordinate

    @classmethod
    def capture(cls, entity: Entity, target: Coordinate) -> MoveEvent:
        return cls(entity=entity, origin=entity.coordinate, target=target)

    @property
    def distance(self) -> int:
        return self.origin.manhattan(self.target)

    def render(self) -> str:
        return os.linesep.join(
            [
                self.entity.describe(self.origin),
                f"MOVED TO {self.target}",
                EVENT_SEPARATOR,
            ]
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": "move",
            "entity_id": self.entity.entity_id,
            "origin": self.origin.to_dict(),
            "target": self.target.to_dict(),
        }


@dataclass(frozen=True)
class CollectEvent:
    entity: Entity
    collected: Entity
    origin: Coordinate
    target: Coordinate

    @classmethod
    def capture(cls, entity: Entity, collected: Entity) -> CollectEvent:
        return cls(entity=entity, collected=collected, origin=entity.coordinate, target=collected.coordinate)

    @property
    def points(self) -> int:
        return self.collected.points

    def render(self) -> str:
        return os.linesep.join(
            [
                self.entity.describe(self.origin),
                "COLLECTED",
                self.collected.describe(self.target),
                EVENT_SEPARATOR,
            ]
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": "collect",
            "entity_id": self.entity.entity_id,
            "collected_entity_id": self.collected.entity_id,
            "origin": self.origin.to_dict(),
            "target": self.target.to_dict(),
            "points": self.points,
        }


Event = MoveEvent | CollectEvent


@dataclass
class EventLog:
    """Append-only event record with running totals."""

    entities_collected: int = 0
    points_earned: int = 0
    tiles_traversed: int = 0
    _events: list[Event] = field(default_factory=list, repr=False)

    def add(self, event: Event) -> None:
        if isinstance(event, CollectEvent):
            self.entities_collected += 1
            self.points_earned += event.points
        elif isinstance(event, MoveEvent):
            self.tiles_traversed += event.distance
        else:
            raise TypeError(f"unsupported event type: {type(event).__name__}")
        self._events.append(event)

    def events(self) -> list[Event]:
        return list(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def render(self) -> str:
        return os.linesep.join(event.render() for event in self._events)

    def statistics_text(self) -> str:
        return os.linesep.join(
            [
                f"Entities Collected: {self.entities_collected}",
                f"Tiles Traversed: {self.tiles_traversed}",
                f"Points Earned: {self.points_earned}",
            ]
        )

    def to_dicts(self) -> list[dict[str, Any]]:
        return [event.to_dict() for event in self._events]
