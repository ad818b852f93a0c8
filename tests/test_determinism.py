from pathlib import Path

from fieldsim.content.io import encode_grid
from fieldsim.sim.core import Session
from fieldsim.sim.hash import grid_hash, session_hash

EXAMPLES_DIR = Path(__file__).resolve().parents[1] / "content" / "examples"


def _run(turns: int) -> Session:
    session = Session.from_paths([EXAMPLES_DIR / "basic_scenario.txt"])
    for _ in range(turns):
        session.end_turn()
    return session


def test_same_save_and_turns_produce_identical_session_hashes() -> None:
    first = _run(30)
    second = _run(30)

    assert session_hash(first.grid) == session_hash(second.grid)
    assert encode_grid(first.grid) == encode_grid(second.grid)
    assert first.log_text() == second.log_text()


def test_session_hash_changes_as_turns_advance() -> None:
    session = Session.from_paths([EXAMPLES_DIR / "basic_scenario.txt"])
    start = session_hash(session.grid)

    session.end_turn()

    assert session_hash(session.grid) != start


def test_reloaded_save_resumes_with_a_fresh_stream(tmp_path: Path) -> None:
    midgame = _run(5)
    save_path = tmp_path / "midgame.txt"
    midgame.save_path(save_path)

    first = Session.from_paths([save_path])
    second = Session.from_paths([save_path])

    assert grid_hash(first.grid) == grid_hash(midgame.grid)
    assert first.grid.turn == 0
    for session in (first, second):
        for _ in range(10):
            session.end_turn()
    assert session_hash(first.grid) == session_hash(second.grid)
