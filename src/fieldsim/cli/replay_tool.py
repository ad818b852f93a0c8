from __future__ import annotations

import argparse
from typing import Sequence

from fieldsim.content.io import load_grid_file, save_grid_file
from fieldsim.sim.core import Session
from fieldsim.sim.hash import grid_hash, session_hash
from fieldsim.sim.scheduler import CreatureScheduler


def _non_negative_int(value: str) -> int:
    parsed = int(value)
    if parsed < 0:
        raise argparse.ArgumentTypeError("turns must be >= 0")
    return parsed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fieldsim-replay",
        description=(
            "Deterministic replay forensic tool. Loads a scenario save and ends N turns "
            "without player input, so only the seeded creature scheduler acts."
        ),
    )
    parser.add_argument("save_path", help="Path to a scenario save file")
    parser.add_argument("--turns", type=_non_negative_int, default=1, help="Turns to end from the loaded state")
    parser.add_argument("--per-turn", action="store_true", help="Print session hash and creature moves after each turn")
    parser.add_argument("--print-log", action="store_true", help="Print the rendered event log after replay")
    parser.add_argument("--print-stats", action="store_true", help="Print scenario statistics after replay")
    parser.add_argument("--dump-final-save", help="Optional path to write the scenario save after replay")
    return parser


def _print_header(session: Session) -> None:
    grid = session.grid
    print(
        "header "
        f"scenario={grid.name!r} "
        f"size={grid.width}x{grid.height} "
        f"seed={grid.seed} "
        f"entity_count={len(grid.entities)} "
        f"creature_count={len(grid.creatures())}"
    )
    print(f"grid_hash={grid_hash(grid)}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        session = Session()
        session.add_grid(load_grid_file(args.save_path))
        scheduler = session.get_turn_module(CreatureScheduler.name)

        _print_header(session)
        print(f"start_hash={session_hash(session.grid)}")

        for _ in range(args.turns):
            session.end_turn()
            if args.per_turn:
                print(f"turn={session.grid.turn} hash={session_hash(session.grid)}")
                for creature_move in scheduler.last_moves:
                    print(
                        f"move entity_id={creature_move.entity_id} "
                        f"from={creature_move.origin} to={creature_move.target}"
                    )

        print(f"end_hash={session_hash(session.grid)}")

        if args.print_log:
            print(session.log_text())
        if args.print_stats:
            print(session.statistics_text())

        if args.dump_final_save:
            save_grid_file(args.dump_final_save, session.grid)
            print(f"dumped_final_save={args.dump_final_save}")

    except Exception as exc:
        print(f"error: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
