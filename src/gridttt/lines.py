"""
Winning-line generation for N×N boards.
Teaching notes:
- A line is a run of ``win_length`` contiguous cells in one direction.
- Families are generated in a fixed order (rows, columns, ↘ diagonals, ↙ diagonals)
  so that anything scanning lines "first match wins" is reproducible.
"""
from functools import lru_cache
from typing import Dict, Tuple

Line = Tuple[int, ...]

LINE_TYPES = ('row', 'col', 'diag', 'anti_diag')


@lru_cache(maxsize=None)
def lines_by_type(size: int, win_length: int) -> Dict[str, Tuple[Line, ...]]:
    if win_length < 1 or win_length > size:
        return {t: tuple() for t in LINE_TYPES}
    span = size - win_length
    rows = []
    for r in range(size):
        for c in range(span + 1):
            rows.append(tuple(r * size + c + i for i in range(win_length)))
    cols = []
    for c in range(size):
        for r in range(span + 1):
            cols.append(tuple((r + i) * size + c for i in range(win_length)))
    diags = []
    for r in range(span + 1):
        for c in range(span + 1):
            diags.append(tuple((r + i) * size + c + i for i in range(win_length)))
    anti = []
    for r in range(span + 1):
        for c in range(win_length - 1, size):
            anti.append(tuple((r + i) * size + c - i for i in range(win_length)))
    return {
        'row': tuple(rows),
        'col': tuple(cols),
        'diag': tuple(diags),
        'anti_diag': tuple(anti),
    }


@lru_cache(maxsize=None)
def all_lines(size: int, win_length: int) -> Tuple[Line, ...]:
    """Every candidate winning line, rows first, then columns, then both diagonals."""
    by_type = lines_by_type(size, win_length)
    out = []
    for t in LINE_TYPES:
        out.extend(by_type[t])
    return tuple(out)


@lru_cache(maxsize=None)
def _line_index(size: int, win_length: int) -> Tuple[Tuple[Line, ...], ...]:
    through = [[] for _ in range(size * size)]
    for line in all_lines(size, win_length):
        for idx in line:
            through[idx].append(line)
    return tuple(tuple(ls) for ls in through)


def lines_through(size: int, win_length: int, index: int) -> Tuple[Line, ...]:
    """Lines containing ``index``, in generator order."""
    return _line_index(size, win_length)[index]
