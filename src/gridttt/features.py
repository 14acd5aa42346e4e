"""
Line-based features for N×N boards: threats, open-line potentials, scoring.
"""
from typing import Dict, List, Optional

from .game_basics import EMPTY, O, X, Grid, available_moves, other, win_length as default_win_length
from .lines import LINE_TYPES, all_lines, lines_by_type, lines_through


def _wl(size: int, win_length: Optional[int]) -> int:
    return default_win_length(size) if win_length is None else win_length


def calculate_line_threats(grid: Grid, size: int, player: int,
                           win_length: Optional[int] = None) -> Dict[str, int]:
    """Sum of own-mark counts over lines not blocked by the opponent, per line family."""
    threats = {f'{t}_threats': 0 for t in LINE_TYPES}
    threats['total_threats'] = 0
    opponent = other(player)
    for line_type, lines in lines_by_type(size, _wl(size, win_length)).items():
        for line in lines:
            player_count = sum(1 for i in line if grid[i] == player)
            opponent_count = sum(1 for i in line if grid[i] == opponent)
            if player_count > 0 and opponent_count == 0:
                threats[f'{line_type}_threats'] += player_count
                threats['total_threats'] += player_count
    return threats


def calculate_cell_line_potentials(grid: Grid, size: int,
                                   win_length: Optional[int] = None) -> Dict[str, List[int]]:
    """Per-cell count of lines still open to each side if it played there (empties only)."""
    wl = _wl(size, win_length)
    x_pot = [0] * (size * size)
    o_pot = [0] * (size * size)
    for i in available_moves(grid):
        for line in lines_through(size, wl, i):
            marks = {grid[j] for j in line}
            if O not in marks:
                x_pot[i] += 1
            if X not in marks:
                o_pot[i] += 1
    return {'x_cell_open_lines': x_pot, 'o_cell_open_lines': o_pot}


def line_potential(grid: Grid, size: int, index: int, player: int,
                   win_length: Optional[int] = None) -> int:
    """Score of playing ``index``: sum of (own marks)^2 over opponent-free lines through it."""
    opponent = other(player)
    score = 0
    for line in lines_through(size, _wl(size, win_length), index):
        count = 0
        blocked = False
        for j in line:
            v = player if j == index else grid[j]
            if v == opponent:
                blocked = True
                break
            if v == player:
                count += 1
        if not blocked:
            score += count * count
    return score


def best_potential_move(grid: Grid, size: int, player: int,
                        win_length: Optional[int] = None) -> Optional[int]:
    best_move = None
    best_score = 0
    for mv in available_moves(grid):
        score = line_potential(grid, size, mv, player, win_length)
        if score > best_score:
            best_score = score
            best_move = mv
    return best_move


def winning_opportunities(grid: Grid, size: int, player: int,
                          win_length: Optional[int] = None) -> List[Dict]:
    """Lines the player can still complete, most promising first.

    priority = own marks / empty cells; lines with no own mark, no empty cell,
    or any opponent mark are left out.
    """
    opportunities = []
    for line in all_lines(size, _wl(size, win_length)):
        player_count = sum(1 for i in line if grid[i] == player)
        empty_count = sum(1 for i in line if grid[i] == EMPTY)
        opponent_count = len(line) - player_count - empty_count
        if opponent_count == 0 and player_count > 0 and empty_count > 0:
            opportunities.append({
                'line': line,
                'player_count': player_count,
                'empty_count': empty_count,
                'priority': player_count / empty_count,
            })
    return sorted(opportunities, key=lambda o: o['priority'], reverse=True)
