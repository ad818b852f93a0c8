from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fieldsim.sim.core import Session
    from fieldsim.sim.grid import Grid


class TurnModule:
    """Turn-rule substrate.

    Turn modules are registered on a ``Session`` and run in stable registration
    order for every hook, always against the session's active grid.
    """

    name: str

    def on_session_start(self, session: Session) -> None:
        """Called once, immediately when the module is registered."""

    def on_turn_end(self, session: Session, grid: Grid) -> None:
        """Called once per ``Session.end_turn`` before the turn counter advances."""
