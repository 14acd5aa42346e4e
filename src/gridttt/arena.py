"""
Computer-vs-computer arena.

Plays seeded games between two difficulty levels through a regular
GameSession and writes one CSV row per game plus a manifest.json with
result counts, score confidence interval and provenance.
"""
from __future__ import annotations

import csv
import json
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .ai import Difficulty
from .evaluator import Status, outcome_label
from .game_basics import X, serialize_board
from .paths import get_git_commit, get_git_is_dirty, runs_dir
from .session import GameSession, GameState
from .settings import GameMode, GameSettings
from .tracking import log_artifact, log_metrics, log_params, maybe_mlflow_run

logger = logging.getLogger(__name__)

ARENA_VERSION = "1.0.0"
CSV_FIELDS = ["game", "size", "win_length", "x_difficulty", "o_difficulty", "winner", "moves", "final_board"]


@dataclass
class ArenaArgs:
    out: Path
    games: int = 100
    size: int = 3
    x_difficulty: Difficulty = Difficulty.HARD
    o_difficulty: Difficulty = Difficulty.MEDIUM
    seed: int = 0
    win_length: Optional[int] = None
    tracking: str = "none"  # or "mlflow"
    log_dir: Path = field(default_factory=runs_dir)
    cli_argv: List[str] | None = field(default=None)


def play_game(
    x_difficulty: Difficulty,
    o_difficulty: Difficulty,
    size: int = 3,
    rng: Optional[random.Random] = None,
    win_length: Optional[int] = None,
) -> GameSession:
    """Play one game to the end, X and O both driven by the move selector."""
    settings = GameSettings(size=size, mode=GameMode.TWO_PLAYER, win_length=win_length)
    session = GameSession(settings, rng=rng or random.Random())
    while session.state is GameState.PLAYING:
        level = x_difficulty if session.turn == X else o_difficulty
        session.make_computer_move(level)
    return session


def ci95(values: List[float]) -> Tuple[float, float]:
    if not values:
        return (float("nan"), float("nan"))
    arr = np.asarray(values, dtype=float)
    m = float(arr.mean())
    s = float(arr.std()) if arr.size > 1 else 0.0
    return m, 1.96 * s / float(np.sqrt(arr.size))


def summarize(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    winners = np.array([r["winner"] for r in rows], dtype=object)
    x_score = [1.0 if w == "X" else 0.5 if w == "draw" else 0.0 for w in winners]
    mean, half = ci95(x_score)
    return {
        "results": {
            "X": int(np.sum(winners == "X")),
            "O": int(np.sum(winners == "O")),
            "draw": int(np.sum(winners == "draw")),
        },
        "x_score_mean": mean,
        "x_score_ci95_half": half,
        "mean_moves": float(np.mean([r["moves"] for r in rows])) if rows else float("nan"),
    }


def run_arena(args: ArenaArgs) -> Path:
    if args.games < 1:
        raise ValueError(f"games must be >= 1, got {args.games}")
    args.out.mkdir(parents=True, exist_ok=True)
    x_level = Difficulty.parse(args.x_difficulty)
    o_level = Difficulty.parse(args.o_difficulty)
    rng = random.Random(args.seed)

    with maybe_mlflow_run(args.tracking == "mlflow", run_name="arena", log_dir=args.log_dir):
        log_params({
            "games": args.games,
            "size": args.size,
            "x_difficulty": x_level.value,
            "o_difficulty": o_level.value,
            "seed": args.seed,
        })
        logger.info("Playing %d games on %dx%d: X=%s vs O=%s",
                    args.games, args.size, args.size, x_level.value, o_level.value)
        rows: List[Dict[str, Any]] = []
        for g in range(args.games):
            session = play_game(x_level, o_level, args.size, rng=rng, win_length=args.win_length)
            if session.outcome.status is Status.IN_PROGRESS:
                raise RuntimeError(f"game {g} ended without a result")
            rows.append({
                "game": g,
                "size": args.size,
                "win_length": session.win_length,
                "x_difficulty": x_level.value,
                "o_difficulty": o_level.value,
                "winner": outcome_label(session.outcome),
                "moves": session.elapsed_moves,
                "final_board": serialize_board(session.grid),
            })

        games_csv = args.out / "arena_games.csv"
        with games_csv.open("w", newline="") as f:
            w = csv.DictWriter(f, fieldnames=CSV_FIELDS)
            w.writeheader()
            for r in rows:
                w.writerow(r)
        logger.info("Wrote %s (%d rows)", games_csv, len(rows))

        summary = summarize(rows)
        manifest = {
            "arena_version": ARENA_VERSION,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "args": {
                "games": args.games,
                "size": args.size,
                "win_length": args.win_length,
                "x_difficulty": x_level.value,
                "o_difficulty": o_level.value,
                "seed": args.seed,
            },
            "git_commit": get_git_commit(),
            "git_is_dirty": get_git_is_dirty(),
            "cli_argv": args.cli_argv,
            "row_counts": {"games": len(rows)},
            **summary,
            "files": {"games_csv": str(games_csv)},
        }
        (args.out / "manifest.json").write_text(json.dumps(manifest, indent=2))
        logger.info("Results X=%d O=%d draw=%d (X score %.3f ± %.3f)",
                    summary["results"]["X"], summary["results"]["O"], summary["results"]["draw"],
                    summary["x_score_mean"], summary["x_score_ci95_half"])
        log_metrics({
            "x_score_mean": summary["x_score_mean"],
            "x_score_ci95_half": summary["x_score_ci95_half"],
            "mean_moves": summary["mean_moves"],
        })
        log_artifact(games_csv)
        log_artifact(args.out / "manifest.json")
    return args.out
