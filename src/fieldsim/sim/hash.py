from __future__ import annotations

import hashlib
import json

from fieldsim.content.io import encode_grid
from fieldsim.sim.grid import Grid


def grid_hash(grid: Grid) -> str:
    return hashlib.sha256(encode_grid(grid).encode("utf-8")).hexdigest()


def session_hash(grid: Grid) -> str:
    """Hash of everything a replay must reproduce, beyond the save text itself."""
    payload = {
        "save_text": encode_grid(grid),
        "grid": grid.to_dict(),
        "rng_state": grid.rng.getstate(),
        "events": grid.log.to_dicts(),
        "counters": {
            "entities_collected": grid.log.entities_collected,
            "points_earned": grid.log.points_earned,
            "tiles_traversed": grid.log.tiles_traversed,
        },
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()
