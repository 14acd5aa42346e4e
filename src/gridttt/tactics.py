"""
Tactics and simple motifs: immediate wins/blocks, forks, safety checks, positional picks.
Teaching notes:
- Local motifs are checked by trying each empty cell on a copy of the grid and asking the evaluator.
- All scans walk empty cells in ascending index order, so the first hit is deterministic.
"""
from typing import List, Optional

from .evaluator import get_winner
from .game_basics import EMPTY, Grid, apply_move, available_moves, other


def immediate_winning_moves(grid: Grid, size: int, player: int,
                            win_length: Optional[int] = None) -> List[int]:
    wins: List[int] = []
    for i in available_moves(grid):
        if get_winner(apply_move(grid, i, player), size, win_length) == player:
            wins.append(i)
    return wins


def blocking_moves(grid: Grid, size: int, player: int,
                   win_length: Optional[int] = None) -> List[int]:
    """Cells where the opponent of ``player`` would win on their next move."""
    return immediate_winning_moves(grid, size, other(player), win_length)


def fork_moves(grid: Grid, size: int, player: int,
               win_length: Optional[int] = None) -> List[int]:
    forks: List[int] = []
    for i in available_moves(grid):
        b = apply_move(grid, i, player)
        if get_winner(b, size, win_length) == player:
            continue
        if len(immediate_winning_moves(b, size, player, win_length)) >= 2:
            forks.append(i)
    return forks


def gives_opponent_immediate_win(grid: Grid, size: int, player: int, move: int,
                                 win_length: Optional[int] = None) -> bool:
    if grid[move] != EMPTY:
        return False
    b = apply_move(grid, move, player)
    return len(immediate_winning_moves(b, size, other(player), win_length)) > 0


def center_index(size: int) -> Optional[int]:
    if size % 2 == 0:
        return None
    return (size * size) // 2


def corner_indices(size: int) -> List[int]:
    return [0, size - 1, (size - 1) * size, size * size - 1]


def positional_move(grid: Grid, size: int) -> Optional[int]:
    """Centre if the board has one and it is free, else the first free corner."""
    center = center_index(size)
    if center is not None and grid[center] == EMPTY:
        return center
    for corner in corner_indices(size):
        if grid[corner] == EMPTY:
            return corner
    return None
