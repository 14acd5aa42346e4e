"""gridttt package.

N×N tic-tac-toe rules, a tiered computer opponent, a session controller,
and a small CLI.

Convenience imports are exposed for common workflows.
"""

from .ai import DIFFICULTY_PROFILES, Difficulty, Layer, Profile, select_move
from .errors import ConfigurationError, InvalidMove, NoAvailableMoves
from .evaluator import Outcome, Status, evaluate
from .game_basics import EMPTY, O, X, available_moves, create_grid, is_full, win_length
from .lines import all_lines
from .session import (
    GameSession,
    GameState,
    MoveRecord,
    MoveResult,
    apply_human_move,
    new_game,
    request_computer_move,
    reset,
    undo,
)
from .settings import GameMode, GameSettings

__all__ = [
    "EMPTY",
    "X",
    "O",
    "create_grid",
    "available_moves",
    "is_full",
    "win_length",
    "all_lines",
    "evaluate",
    "Outcome",
    "Status",
    "Difficulty",
    "Layer",
    "Profile",
    "DIFFICULTY_PROFILES",
    "select_move",
    "GameMode",
    "GameSettings",
    "GameSession",
    "GameState",
    "MoveRecord",
    "MoveResult",
    "new_game",
    "apply_human_move",
    "request_computer_move",
    "undo",
    "reset",
    "ConfigurationError",
    "InvalidMove",
    "NoAvailableMoves",
]
