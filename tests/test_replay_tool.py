from pathlib import Path

from fieldsim.cli.replay_tool import _build_parser, main
from fieldsim.content.io import load_grid_file

EXAMPLES_DIR = Path(__file__).resolve().parents[1] / "content" / "examples"
BASIC_SAVE = str(EXAMPLES_DIR / "basic_scenario.txt")


def test_replay_tool_parser_defaults() -> None:
    args = _build_parser().parse_args(["save.txt"])

    assert args.turns == 1
    assert args.per_turn is False
    assert args.dump_final_save is None


def test_replay_tool_main_outputs_hashes(tmp_path: Path, capsys) -> None:
    dumped_path = tmp_path / "replayed_save.txt"

    exit_code = main([BASIC_SAVE, "--turns", "3", "--per-turn", "--dump-final-save", str(dumped_path)])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "header scenario='Basic Field' size=8x6 seed=7 entity_count=6 creature_count=3" in output
    assert "start_hash=" in output
    assert "turn=1 hash=" in output
    assert "turn=3 hash=" in output
    assert "end_hash=" in output
    assert f"dumped_final_save={dumped_path}" in output
    assert load_grid_file(dumped_path).name == "Basic Field"


def test_replay_tool_output_is_deterministic(capsys) -> None:
    main([BASIC_SAVE, "--turns", "8", "--per-turn", "--print-log", "--print-stats"])
    first = capsys.readouterr().out
    main([BASIC_SAVE, "--turns", "8", "--per-turn", "--print-log", "--print-stats"])
    second = capsys.readouterr().out

    assert first == second


def test_replay_tool_zero_turns_keeps_start_hash(capsys) -> None:
    exit_code = main([BASIC_SAVE, "--turns", "0", "--print-log", "--print-stats"])

    lines = capsys.readouterr().out.splitlines()
    start = next(line for line in lines if line.startswith("start_hash="))
    end = next(line for line in lines if line.startswith("end_hash="))
    assert exit_code == 0
    assert start.split("=", 1)[1] == end.split("=", 1)[1]
    assert "No events logged" in lines
    assert "No statistics generated" in lines


def test_replay_tool_reports_bad_save(tmp_path: Path, capsys) -> None:
    broken = tmp_path / "broken.txt"
    broken.write_text("Broken\nWidth:5\n", encoding="utf-8")

    exit_code = main([str(broken)])

    assert exit_code == 1
    assert capsys.readouterr().out.startswith("error: ")
