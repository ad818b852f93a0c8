from __future__ import annotations

import argparse
import sys
from typing import Sequence

from fieldsim.cli.pygame_viewer import DEFAULT_SCENARIO_PATH, HEADLESS_ENV_VAR, _env_flag_enabled, run_pygame_viewer
from fieldsim.cli.viewer import run_repl
from fieldsim.content.io import load_grid_file
from fieldsim.sim.core import DEFAULT_SAVE_PATH, Session
from fieldsim.sim.errors import FieldSimError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fieldsim-play", description="fieldsim launcher.")
    parser.add_argument(
        "save_paths",
        nargs="*",
        default=[DEFAULT_SCENARIO_PATH],
        help="Scenario save files to load; the first one becomes active.",
    )
    parser.add_argument("--ascii", action="store_true", help="Run the terminal viewer instead of pygame.")
    parser.add_argument("--headless", action="store_true", help="Run startup path in headless mode.")
    parser.add_argument("--save-path", default=DEFAULT_SAVE_PATH, help="Path written by save commands.")
    return parser


def _validate_saves(save_paths: Sequence[str]) -> None:
    for save_path in save_paths:
        load_grid_file(save_path)


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        _validate_saves(args.save_paths)
    except (FieldSimError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.ascii:
        run_repl(Session.from_paths(args.save_paths), save_path=args.save_path)
        return 0
    return run_pygame_viewer(
        args.save_paths,
        headless=args.headless or _env_flag_enabled(HEADLESS_ENV_VAR),
        save_path=args.save_path,
    )


if __name__ == "__main__":
    raise SystemExit(main())
