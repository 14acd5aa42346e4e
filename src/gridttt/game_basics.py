"""
Game basics: board representation, serialization, move application, counts.
Teaching notes:
- A grid is a tuple of size*size cells in row-major order: 0=empty, 1=X, 2=O. X always starts.
- index = row * size + col.
- Grids are immutable tuples; applying a move returns a new grid, so earlier
  snapshots (undo history, hypothetical AI boards) stay valid.
"""
from math import isqrt
from typing import List, Tuple

from .errors import ConfigurationError

EMPTY = 0
X = 1
O = 2

Grid = Tuple[int, ...]

MARK_SYMBOLS = {EMPTY: '.', X: 'X', O: 'O'}
_SYMBOL_TO_MARK = {'0': EMPTY, '.': EMPTY, '_': EMPTY, '-': EMPTY,
                   '1': X, 'X': X, 'x': X,
                   '2': O, 'O': O, 'o': O}


def win_length(size: int) -> int:
    """Number of same-mark cells in a line needed to win on a ``size`` board."""
    if size == 3:
        return 3
    if size == 4:
        return 3
    if size == 5:
        return 4
    return size


def create_grid(size: int) -> Grid:
    if size < 1:
        raise ConfigurationError(f"Grid size must be at least 1, got {size}")
    return tuple([EMPTY] * (size * size))


def grid_size(grid: Grid) -> int:
    n = isqrt(len(grid))
    if n < 1 or n * n != len(grid):
        raise ConfigurationError(f"Grid of {len(grid)} cells is not square")
    return n


def available_moves(grid: Grid) -> List[int]:
    return [i for i, v in enumerate(grid) if v == EMPTY]


def is_full(grid: Grid) -> bool:
    return EMPTY not in grid


def apply_move(grid: Grid, index: int, mark: int) -> Grid:
    lst = list(grid)
    lst[index] = mark
    return tuple(lst)


def other(mark: int) -> int:
    return O if mark == X else X


def get_piece_counts(grid: Grid) -> Tuple[int, int]:
    return grid.count(X), grid.count(O)


def current_player(grid: Grid) -> int:
    x, o = get_piece_counts(grid)
    return X if x == o else O


def serialize_board(grid: Grid) -> str:
    return ''.join(str(cell) for cell in grid)


def deserialize_board(board_str: str) -> Grid:
    """Parse ``"100020000"`` or ``"X...O...."`` style text into a grid.

    Whitespace and ``/`` row separators are ignored. Raises
    ConfigurationError for unknown characters or a non-square length.
    """
    raw = ''.join(ch for ch in board_str if not ch.isspace() and ch != '/')
    try:
        grid = tuple(_SYMBOL_TO_MARK[ch] for ch in raw)
    except KeyError as exc:
        raise ConfigurationError(f"Invalid board character {exc.args[0]!r} in {board_str!r}") from exc
    grid_size(grid)
    return grid


def format_grid(grid: Grid) -> str:
    """Multi-line text rendering, one row per line."""
    n = grid_size(grid)
    rows = []
    for r in range(n):
        rows.append(' '.join(MARK_SYMBOLS[grid[r * n + c]] for c in range(n)))
    return '\n'.join(rows)
