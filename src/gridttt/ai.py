"""
Computer opponent: layered heuristic move selection.

Each difficulty maps to a Profile: an ordered tuple of layers plus the
probability that the layers are consulted at all on a given turn. When the
layers are skipped, or none of them produces a move, the move is chosen
uniformly at random among the free cells.

Layers:
- WIN: complete one of our own lines now.
- BLOCK: occupy the cell where the opponent would complete a line.
- POTENTIAL: maximise the squared own-mark count over lines the opponent has not touched.
- POSITIONAL: centre (odd sizes), then corners.

No search is performed; this is not an optimal player.
"""
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Mapping, Optional, Tuple

from .errors import ConfigurationError, NoAvailableMoves
from .features import best_potential_move
from .game_basics import Grid, available_moves
from .tactics import blocking_moves, immediate_winning_moves, positional_move

logger = logging.getLogger(__name__)


class Difficulty(str, Enum):
    EASY = 'easy'
    MEDIUM = 'medium'
    HARD = 'hard'
    EXPERT = 'expert'

    @classmethod
    def parse(cls, value) -> 'Difficulty':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            choices = ', '.join(d.value for d in cls)
            raise ConfigurationError(f"Unknown difficulty {value!r} (choose from {choices})") from exc


class Layer(str, Enum):
    WIN = 'win'
    BLOCK = 'block'
    POSITIONAL = 'positional'
    POTENTIAL = 'potential'


@dataclass(frozen=True)
class Profile:
    layers: Tuple[Layer, ...]
    apply_probability: float = 1.0

    def __post_init__(self):
        if not 0.0 <= self.apply_probability <= 1.0:
            raise ConfigurationError(f"apply_probability out of range [0,1]: {self.apply_probability}")


DIFFICULTY_PROFILES: Dict[Difficulty, Profile] = {
    Difficulty.EASY: Profile((Layer.WIN, Layer.BLOCK), 0.3),
    Difficulty.MEDIUM: Profile((Layer.WIN, Layer.BLOCK, Layer.POSITIONAL), 0.8),
    Difficulty.HARD: Profile((Layer.WIN, Layer.BLOCK, Layer.POTENTIAL, Layer.POSITIONAL), 1.0),
    Difficulty.EXPERT: Profile((Layer.WIN, Layer.BLOCK, Layer.POTENTIAL, Layer.POSITIONAL), 1.0),
}

# Deterministic fallback chain: easy is pure random, medium only reacts to
# immediate wins/blocks, hard and expert add centre/corner preference.
LEGACY_PROFILES: Dict[Difficulty, Profile] = {
    Difficulty.EASY: Profile((), 0.0),
    Difficulty.MEDIUM: Profile((Layer.WIN, Layer.BLOCK), 1.0),
    Difficulty.HARD: Profile((Layer.POSITIONAL, Layer.WIN, Layer.BLOCK), 1.0),
    Difficulty.EXPERT: Profile((Layer.POSITIONAL, Layer.WIN, Layer.BLOCK), 1.0),
}


def _win(grid: Grid, size: int, player: int, win_length: Optional[int]) -> Optional[int]:
    wins = immediate_winning_moves(grid, size, player, win_length)
    return wins[0] if wins else None


def _block(grid: Grid, size: int, player: int, win_length: Optional[int]) -> Optional[int]:
    blocks = blocking_moves(grid, size, player, win_length)
    return blocks[0] if blocks else None


def _positional(grid: Grid, size: int, player: int, win_length: Optional[int]) -> Optional[int]:
    return positional_move(grid, size)


def _potential(grid: Grid, size: int, player: int, win_length: Optional[int]) -> Optional[int]:
    return best_potential_move(grid, size, player, win_length)


LAYER_FUNCS: Dict[Layer, Callable[[Grid, int, int, Optional[int]], Optional[int]]] = {
    Layer.WIN: _win,
    Layer.BLOCK: _block,
    Layer.POSITIONAL: _positional,
    Layer.POTENTIAL: _potential,
}


def run_layers(grid: Grid, size: int, player: int, layers: Tuple[Layer, ...],
               win_length: Optional[int] = None) -> Tuple[Optional[int], Optional[Layer]]:
    """First move produced by ``layers`` in order, with the layer that produced it."""
    for layer in layers:
        mv = LAYER_FUNCS[layer](grid, size, player, win_length)
        if mv is not None:
            return mv, layer
    return None, None


def select_move(
    grid: Grid,
    size: int,
    difficulty,
    player: int,
    rng: Optional[random.Random] = None,
    profiles: Optional[Mapping[Difficulty, Profile]] = None,
    win_length: Optional[int] = None,
) -> int:
    moves = available_moves(grid)
    if not moves:
        raise NoAvailableMoves("select_move called on a full board")
    if rng is None:
        rng = random.Random()
    table = DIFFICULTY_PROFILES if profiles is None else profiles
    level = Difficulty.parse(difficulty)
    profile = table[level]

    if profile.layers and rng.random() < profile.apply_probability:
        mv, layer = run_layers(grid, size, player, profile.layers, win_length)
        if mv is not None:
            logger.debug("ai difficulty=%s layer=%s move=%d", level.value, layer.value, mv)
            return mv
    mv = rng.choice(moves)
    logger.debug("ai difficulty=%s layer=random move=%d", level.value, mv)
    return mv
