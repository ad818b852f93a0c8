from __future__ import annotations

from fieldsim.sim.errors import BadSaveError
from fieldsim.sim.grid import Grid


class ScenarioRegistry:
    """Loaded scenarios by name, in load order, plus the active selection."""

    def __init__(self) -> None:
        self._scenarios: dict[str, Grid] = {}
        self._current_name: str | None = None

    def add(self, grid: Grid) -> Grid:
        self._scenarios[grid.name] = grid
        self._current_name = grid.name
        return grid

    def switch(self, name: str) -> Grid:
        if name not in self._scenarios:
            raise BadSaveError(f"no loaded scenario named {name!r}")
        self._current_name = name
        return self._scenarios[name]

    @property
    def current(self) -> Grid:
        if self._current_name is None:
            raise LookupError("no scenario loaded")
        return self._scenarios[self._current_name]

    @property
    def current_name(self) -> str | None:
        return self._current_name

    def loaded(self) -> dict[str, Grid]:
        return dict(self._scenarios)

    def names(self) -> list[str]:
        return list(self._scenarios)

    def __contains__(self, name: object) -> bool:
        return name in self._scenarios

    def __len__(self) -> int:
        return len(self._scenarios)

    def reset(self) -> None:
        self._scenarios.clear()
        self._current_name = None
