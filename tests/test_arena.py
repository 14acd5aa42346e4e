import csv
import json
import random
from pathlib import Path

from gridttt.ai import Difficulty
from gridttt.arena import ArenaArgs, ci95, play_game, run_arena, summarize
from gridttt.session import GameState


def test_play_game_reaches_result():
    for size in (3, 4, 5):
        s = play_game(Difficulty.HARD, Difficulty.EASY, size, rng=random.Random(size))
        assert s.state is GameState.FINISHED
        assert s.outcome.is_terminal


def test_hard_mirror_on_three_by_three_is_drawn_or_won_cleanly():
    s = play_game(Difficulty.EXPERT, Difficulty.EXPERT, 3, rng=random.Random(0))
    assert s.elapsed_moves <= 9
    assert s.scores.games_played == 1


def test_ci95_and_summary():
    m, h = ci95([1.0, 1.0, 1.0])
    assert m == 1.0 and h == 0.0
    summary = summarize([
        {"winner": "X", "moves": 5},
        {"winner": "O", "moves": 6},
        {"winner": "draw", "moves": 9},
    ])
    assert summary["results"] == {"X": 1, "O": 1, "draw": 1}
    assert summary["x_score_mean"] == 0.5
    assert abs(summary["mean_moves"] - 20 / 3) < 1e-9


def test_run_arena_reproducible(tmp_path: Path):
    out1 = run_arena(ArenaArgs(out=tmp_path / "a", games=12, seed=42))
    out2 = run_arena(ArenaArgs(out=tmp_path / "b", games=12, seed=42))
    assert (out1 / "arena_games.csv").read_bytes() == (out2 / "arena_games.csv").read_bytes()
    with (out1 / "arena_games.csv").open() as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 12
    assert {r["winner"] for r in rows} <= {"X", "O", "draw"}
    manifest = json.loads((out1 / "manifest.json").read_text())
    assert sum(manifest["results"].values()) == 12
    assert manifest["args"]["x_difficulty"] == "hard"
