from pathlib import Path

import pytest

from fieldsim.cli.pygame_viewer import (
    DEFAULT_SCENARIO_PATH,
    GridLayout,
    _build_parser,
    _layout_for,
    _load_viewer_session,
    _next_scenario_name,
    _panel_lines,
    _save_viewer_session,
    run_pygame_viewer,
)
from fieldsim.content.io import encode_grid
from fieldsim.sim.core import DEFAULT_SAVE_PATH, Session
from fieldsim.sim.grid import Grid
from fieldsim.sim.world import Coordinate

EXAMPLES_DIR = Path(__file__).resolve().parents[1] / "content" / "examples"
BASIC_SAVE = str(EXAMPLES_DIR / "basic_scenario.txt")
TIDEPOOL_SAVE = str(EXAMPLES_DIR / "tidepool.txt")


def test_viewer_parser_defaults() -> None:
    args = _build_parser().parse_args([])

    assert args.save_paths == [DEFAULT_SCENARIO_PATH]
    assert args.headless is False
    assert args.save_path == DEFAULT_SAVE_PATH


def test_viewer_parser_accepts_multiple_saves() -> None:
    args = _build_parser().parse_args(["a.txt", "b.txt", "--save-path", "saves/dev.txt"])

    assert args.save_paths == ["a.txt", "b.txt"]
    assert args.save_path == "saves/dev.txt"


def test_grid_layout_maps_pixels_to_coordinates() -> None:
    grid = Grid(name="layout", width=6, height=5)
    layout = GridLayout(origin_x=10, origin_y=20, tile_size=40)

    assert layout.pixel_to_coordinate(grid, (10, 20)) == Coordinate(0, 0)
    assert layout.pixel_to_coordinate(grid, (249, 219)) == Coordinate(5, 4)
    assert layout.pixel_to_coordinate(grid, (250, 20)) is None
    assert layout.pixel_to_coordinate(grid, (9, 25)) is None
    assert layout.coordinate_to_rect(Coordinate(2, 1)) == (90, 60, 40, 40)


def test_layout_keeps_largest_grid_inside_viewport() -> None:
    layout = _layout_for(Grid(name="wide", width=15, height=15))

    assert layout.origin_x >= 0
    assert layout.origin_y >= 0
    assert layout.tile_size * 15 <= 800


def test_next_scenario_name_cycles_in_load_order() -> None:
    session = Session.from_paths([BASIC_SAVE, TIDEPOOL_SAVE])

    assert _next_scenario_name(session) == "Tidepool"
    session.switch_active_scenario("Tidepool")
    assert _next_scenario_name(session) == "Basic Field"


def test_panel_lines_include_info_statistics_and_log_text() -> None:
    session = Session.from_paths([TIDEPOOL_SAVE])

    lines = _panel_lines(session, "ready")

    assert lines[0] == "scenario=Tidepool turn=0"
    assert "status: ready" in lines
    assert "No collectable selected" in lines
    assert "No statistics generated" in lines
    assert lines[-1] == "No events logged"


def test_load_and_save_viewer_session_print_diagnostics(tmp_path: Path, capsys) -> None:
    session = _load_viewer_session([TIDEPOOL_SAVE])
    save_path = tmp_path / "viewer_save.txt"

    _save_viewer_session(session, str(save_path))

    output = capsys.readouterr().out
    assert "[fieldsim.viewer] loaded scenario='Tidepool' size=5x5 seed=0 entities=3" in output
    assert f"[fieldsim.viewer] saved path={save_path} scenario='Tidepool'" in output
    assert encode_grid(Session.from_paths([save_path]).grid) == encode_grid(session.grid)


def test_run_viewer_reports_unloadable_save(tmp_path: Path, capsys) -> None:
    result = run_pygame_viewer([str(tmp_path / "missing.txt")], headless=True)

    captured = capsys.readouterr()
    assert result == 1
    assert "failed to load scenarios" in captured.err


def test_main_help_prints_usage_without_starting_viewer(capsys: pytest.CaptureFixture[str]) -> None:
    from fieldsim.cli.pygame_viewer import main

    with pytest.raises(SystemExit) as result:
        main(["--help"])

    captured = capsys.readouterr()
    assert result.value.code == 0
    assert "usage:" in captured.out
    assert "--headless" in captured.out


def test_main_headless_mode_exits_cleanly_and_warns(capsys: pytest.CaptureFixture[str]) -> None:
    from fieldsim.cli.pygame_viewer import main

    with pytest.raises(SystemExit) as result:
        main(["--headless", BASIC_SAVE])

    captured = capsys.readouterr()
    assert result.value.code == 0
    assert "headless mode active" in captured.out
