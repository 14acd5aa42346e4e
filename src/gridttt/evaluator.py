"""
Win/draw evaluation for N×N boards.

The outcome is always recomputed from the grid; nothing here keeps state.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .game_basics import EMPTY, X, Grid, is_full, win_length as default_win_length
from .lines import Line, all_lines


class Status(str, Enum):
    IN_PROGRESS = 'in_progress'
    X_WINS = 'x_wins'
    O_WINS = 'o_wins'
    DRAW = 'draw'


@dataclass(frozen=True)
class Outcome:
    status: Status
    winner: Optional[int] = None
    line: Line = ()

    @property
    def is_terminal(self) -> bool:
        return self.status is not Status.IN_PROGRESS

    @property
    def is_draw(self) -> bool:
        return self.status is Status.DRAW


IN_PROGRESS = Outcome(Status.IN_PROGRESS)
DRAW = Outcome(Status.DRAW)


def evaluate(grid: Grid, size: int, win_length: Optional[int] = None) -> Outcome:
    wl = default_win_length(size) if win_length is None else win_length
    for line in all_lines(size, wl):
        v = grid[line[0]]
        if v != EMPTY and all(grid[i] == v for i in line):
            return Outcome(Status.X_WINS if v == X else Status.O_WINS, v, line)
    if is_full(grid):
        return DRAW
    return IN_PROGRESS


def get_winner(grid: Grid, size: int, win_length: Optional[int] = None) -> int:
    outcome = evaluate(grid, size, win_length)
    return outcome.winner if outcome.winner is not None else EMPTY


def is_draw(grid: Grid, size: int, win_length: Optional[int] = None) -> bool:
    return evaluate(grid, size, win_length).is_draw


def outcome_label(outcome: Outcome) -> str:
    if outcome.status is Status.X_WINS:
        return 'X'
    if outcome.status is Status.O_WINS:
        return 'O'
    if outcome.status is Status.DRAW:
        return 'draw'
    return 'in_progress'
