"""Game configuration and validation.

Environment-first defaults (GRIDTTT_* variables) so a host application or
the CLI can change them without code, with validation at game creation.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from .ai import Difficulty
from .errors import ConfigurationError
from .game_basics import O, X, win_length as default_win_length

SUPPORTED_SIZES = (3, 4, 5)
DEFAULT_THINK_DELAY = 0.8


class GameMode(str, Enum):
    TWO_PLAYER = 'two_player'
    VS_COMPUTER = 'vs_computer'

    @classmethod
    def parse(cls, value) -> 'GameMode':
        if isinstance(value, cls):
            return value
        aliases = {'pvp': cls.TWO_PLAYER, 'pvc': cls.VS_COMPUTER}
        raw = str(value).strip().lower()
        if raw in aliases:
            return aliases[raw]
        try:
            return cls(raw)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown game mode {value!r}") from exc


@dataclass
class GameSettings:
    size: int = 3
    mode: GameMode = GameMode.VS_COMPUTER
    difficulty: Difficulty = Difficulty.MEDIUM
    computer_mark: int = O
    win_length: Optional[int] = None
    player_names: Dict[int, str] = field(default_factory=dict)
    think_delay: float = DEFAULT_THINK_DELAY
    auto_play: bool = False

    def __post_init__(self) -> None:
        self.mode = GameMode.parse(self.mode)
        self.difficulty = Difficulty.parse(self.difficulty)

    @property
    def win_length_value(self) -> int:
        return default_win_length(self.size) if self.win_length is None else self.win_length

    @property
    def human_mark(self) -> Optional[int]:
        if self.mode is GameMode.TWO_PLAYER:
            return None
        return X if self.computer_mark == O else O

    def is_computer(self, mark: int) -> bool:
        return self.mode is GameMode.VS_COMPUTER and mark == self.computer_mark

    def player_name(self, mark: int) -> str:
        if mark in self.player_names:
            return self.player_names[mark]
        if self.is_computer(mark):
            return 'AI'
        return 'Player 1' if mark == X else 'Player 2'

    def validate(self) -> 'GameSettings':
        if not isinstance(self.size, int) or self.size < 1:
            raise ConfigurationError(f"Grid size must be a positive integer, got {self.size!r}")
        wl = self.win_length_value
        if wl < 1 or wl > self.size:
            raise ConfigurationError(f"Win length {wl} does not fit a {self.size}x{self.size} grid")
        if self.computer_mark not in (X, O):
            raise ConfigurationError(f"computer_mark must be X (1) or O (2), got {self.computer_mark!r}")
        if self.think_delay < 0:
            raise ConfigurationError(f"think_delay must be >= 0, got {self.think_delay}")
        return self


def from_env(**overrides) -> GameSettings:
    """Settings from GRIDTTT_SIZE / GRIDTTT_MODE / GRIDTTT_DIFFICULTY / GRIDTTT_THINK_DELAY."""
    values: Dict[str, object] = {}
    size = os.getenv("GRIDTTT_SIZE")
    if size:
        try:
            values['size'] = int(size)
        except ValueError as exc:
            raise ConfigurationError(f"GRIDTTT_SIZE is not an integer: {size!r}") from exc
    mode = os.getenv("GRIDTTT_MODE")
    if mode:
        values['mode'] = mode
    difficulty = os.getenv("GRIDTTT_DIFFICULTY")
    if difficulty:
        values['difficulty'] = difficulty
    delay = os.getenv("GRIDTTT_THINK_DELAY")
    if delay:
        try:
            values['think_delay'] = float(delay)
        except ValueError as exc:
            raise ConfigurationError(f"GRIDTTT_THINK_DELAY is not a number: {delay!r}") from exc
    values.update({k: v for k, v in overrides.items() if v is not None})
    return GameSettings(**values).validate()
