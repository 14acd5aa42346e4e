from __future__ import annotations

import argparse
import asyncio
import logging
import random
import sys
from pathlib import Path
from typing import Optional

from .ai import Difficulty, select_move
from .arena import ArenaArgs, run_arena
from .errors import ConfigurationError
from .evaluator import evaluate, outcome_label
from .features import calculate_cell_line_potentials, calculate_line_threats, winning_opportunities
from .game_basics import O, X, available_moves, current_player, deserialize_board, format_grid, grid_size, win_length
from .lines import all_lines, lines_by_type
from .paths import runs_dir
from .session import GameSession, GameState
from .settings import SUPPORTED_SIZES, from_env
from .tactics import (
    blocking_moves,
    fork_moves,
    gives_opponent_immediate_win,
    immediate_winning_moves,
    positional_move,
)

DIFFICULTY_CHOICES = [d.value for d in Difficulty]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="gridttt", description="N×N tic-tac-toe engine")
    sub = p.add_subparsers(dest="cmd")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("--info", action="store_true", help="Print environment and dependency info and exit")
    p.add_argument("--seed", type=int, default=None, help="Seed for the computer player")

    p_play = sub.add_parser("play", help="Play in the terminal (cells are numbered 0..size*size-1)")
    p_play.add_argument("--size", type=int, choices=SUPPORTED_SIZES, default=None)
    p_play.add_argument("--win-length", type=int, default=None, help="Override the size-derived win length")
    p_play.add_argument("--mode", choices=["pvc", "pvp"], default=None, help="vs computer (pvc) or two players (pvp)")
    p_play.add_argument("--difficulty", choices=DIFFICULTY_CHOICES, default=None)
    p_play.add_argument("--computer-mark", choices=["X", "O"], default="O", help="Side the computer plays")
    p_play.add_argument("--names", nargs=2, metavar=("X_NAME", "O_NAME"), default=None)
    p_play.add_argument("--delay", type=float, default=None, help="Computer thinking delay in seconds")

    p_lines = sub.add_parser("lines", help="List winning lines for a grid size")
    p_lines.add_argument("--size", type=int, required=True)
    p_lines.add_argument("--win-length", type=int, default=None)

    p_eval = sub.add_parser("evaluate", help="Report winner/draw for a board (digits 0/1/2 or X/O/.)")
    p_eval.add_argument("--board", required=True, help="Board string, e.g. 110220000")

    p_sug = sub.add_parser("suggest", help="Pick the computer's move for a board")
    p_sug.add_argument("--board", required=True)
    p_sug.add_argument("--difficulty", choices=DIFFICULTY_CHOICES, default="hard")
    p_sug.add_argument("--mark", choices=["X", "O"], default=None, help="Side to play (default: side to move)")

    p_tac = sub.add_parser("tactics", help="List wins, blocks, forks and open lines for side-to-move")
    p_tac.add_argument("--board", required=True)

    p_arena = sub.add_parser("arena", help="Play computer-vs-computer games and export results")
    p_arena.add_argument("--games", type=int, default=100)
    p_arena.add_argument("--size", type=int, choices=SUPPORTED_SIZES, default=3)
    p_arena.add_argument("--x", dest="x_difficulty", choices=DIFFICULTY_CHOICES, default="hard")
    p_arena.add_argument("--o", dest="o_difficulty", choices=DIFFICULTY_CHOICES, default="medium")
    p_arena.add_argument("--out", type=Path, default=runs_dir() / "arena", help="Output directory")
    p_arena.add_argument("--tracking", choices=["none", "mlflow"], default="none")
    p_arena.add_argument("--log-dir", type=Path, default=runs_dir())

    return p


def _print_info() -> None:
    import importlib.util
    import platform

    print(f"python={sys.version.split()[0]} platform={platform.platform()}")
    for pkg in ["numpy", "mlflow"]:
        if importlib.util.find_spec(pkg) is None:
            print(f"{pkg}=<not installed>")
        else:
            mod = __import__(pkg)
            print(f"{pkg}={getattr(mod, '__version__', '?')}")


def _parse_board(raw: str):
    try:
        grid = deserialize_board(raw)
    except ConfigurationError as e:
        logging.error("Invalid board: %s", e)
        return None, 0
    return grid, grid_size(grid)


async def _computer_turn(session: GameSession, delay: Optional[float]):
    pending = session.request_computer_move(delay=delay)
    if pending is None:
        return session.outcome
    return await pending.result


def _play(ns: argparse.Namespace, rng: random.Random) -> int:
    names = {}
    if ns.names:
        names = {X: ns.names[0], O: ns.names[1]}
    try:
        settings = from_env(
            size=ns.size,
            win_length=ns.win_length,
            mode=ns.mode,
            difficulty=ns.difficulty,
            computer_mark=X if ns.computer_mark == "X" else O,
            player_names=names or None,
        )
    except ConfigurationError as e:
        logging.error("%s", e)
        return 2
    session = GameSession(settings, rng=rng)
    print(f"{settings.size}x{settings.size}, {session.win_length} in a row wins. "
          "Enter a cell number, 'u' to undo, 'r' to restart, 'q' to quit.")
    while True:
        if session.state is GameState.PLAYING and settings.is_computer(session.turn):
            asyncio.run(_computer_turn(session, ns.delay))
            continue
        print(format_grid(session.grid))
        print(session.status_text())
        if session.state is GameState.FINISHED:
            s = session.scores
            print(f"Score X={s.x} O={s.o} draws={s.draws} ({session.elapsed_moves} moves)")
        line = sys.stdin.readline()
        if not line:
            return 0
        cmd = line.strip().lower()
        if cmd in ("q", "quit"):
            return 0
        if cmd in ("r", "restart"):
            session.reset()
            continue
        if cmd in ("u", "undo"):
            session.undo()
            continue
        try:
            index = int(cmd)
        except ValueError:
            print("Enter a cell number.")
            continue
        res = session.apply_human_move(index)
        if not res.accepted:
            print(f"Move rejected ({res.reason}).")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if getattr(ns, "verbose", False) else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    if ns.version:
        try:
            from importlib.metadata import PackageNotFoundError, version as _ver

            print(_ver("gridttt"))
        except PackageNotFoundError:
            print("unknown")
        return 0
    if ns.info:
        _print_info()
        return 0

    rng = random.Random(ns.seed)

    if ns.cmd == "play":
        return _play(ns, rng)

    if ns.cmd == "lines":
        wl = win_length(ns.size) if ns.win_length is None else ns.win_length
        if ns.size < 1 or wl < 1 or wl > ns.size:
            logging.error("Win length %d does not fit a %dx%d grid", wl, ns.size, ns.size)
            return 2
        for line_type, lines in lines_by_type(ns.size, wl).items():
            for line in lines:
                print(f"{line_type} {' '.join(map(str, line))}")
        logging.info("size=%d win_length=%d lines=%d", ns.size, wl, len(all_lines(ns.size, wl)))
        return 0

    if ns.cmd == "evaluate":
        grid, size = _parse_board(ns.board)
        if grid is None:
            return 2
        outcome = evaluate(grid, size)
        logging.info("result=%s line=%s", outcome_label(outcome), list(outcome.line))
        return 0

    if ns.cmd == "suggest":
        grid, size = _parse_board(ns.board)
        if grid is None:
            return 2
        if evaluate(grid, size).is_terminal:
            logging.error("Board is already decided.")
            return 2
        if ns.mark is None:
            mark = current_player(grid)
        else:
            mark = X if ns.mark == "X" else O
        mv = select_move(grid, size, ns.difficulty, mark, rng=rng)
        logging.info("move=%d row=%d col=%d", mv, mv // size, mv % size)
        return 0

    if ns.cmd == "tactics":
        grid, size = _parse_board(ns.board)
        if grid is None:
            return 2
        if evaluate(grid, size).is_terminal:
            logging.error("Board is already decided.")
            return 2
        p = current_player(grid)
        logging.info(
            "to_move=%s wins=%s blocks=%s forks=%s positional=%s",
            "X" if p == X else "O",
            immediate_winning_moves(grid, size, p),
            blocking_moves(grid, size, p),
            fork_moves(grid, size, p),
            positional_move(grid, size),
        )
        unsafe = [mv for mv in available_moves(grid) if gives_opponent_immediate_win(grid, size, p, mv)]
        pots = calculate_cell_line_potentials(grid, size)
        logging.info("unsafe=%s open_lines=%s", unsafe,
                     pots["x_cell_open_lines"] if p == X else pots["o_cell_open_lines"])
        logging.info("threats=%s", calculate_line_threats(grid, size, p))
        for opp in winning_opportunities(grid, size, p)[:5]:
            logging.info("open line %s own=%d empty=%d", list(opp['line']), opp['player_count'], opp['empty_count'])
        return 0

    if ns.cmd == "arena":
        if ns.games < 1:
            logging.error("--games must be at least 1")
            return 2
        out = run_arena(ArenaArgs(
            out=ns.out,
            games=ns.games,
            size=ns.size,
            x_difficulty=Difficulty(ns.x_difficulty),
            o_difficulty=Difficulty(ns.o_difficulty),
            seed=ns.seed if ns.seed is not None else 0,
            tracking=ns.tracking,
            log_dir=ns.log_dir,
            cli_argv=list(argv) if argv is not None else None,
        ))
        logging.info("Arena results written to: %s", out)
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
