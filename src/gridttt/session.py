"""
Game session controller: turn order, move log, undo, scores, and the
computer's deferred "thinking" move.

A GameSession owns one grid, its move log and the cumulative session
scores. All mutation goes through ``apply_move``; the computer's moves use
the same path so validation and evaluation are identical for both sides.

The thinking delay is a single-shot ``loop.call_later`` callback on the
running asyncio loop. ``reset``, ``undo`` and ``new_game`` cancel it and bump
a generation counter; a callback whose generation no longer matches is
dropped instead of applied.
"""
from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .ai import Difficulty, Profile, select_move
from .errors import InvalidMove
from .evaluator import IN_PROGRESS, Outcome, Status, evaluate, outcome_label
from .game_basics import EMPTY, X, Grid, apply_move, create_grid, other
from .lines import Line
from .settings import GameMode, GameSettings

logger = logging.getLogger(__name__)


class GameState(str, Enum):
    PLAYING = 'playing'
    FINISHED = 'finished'


@dataclass(frozen=True)
class MoveRecord:
    index: int
    mark: int
    grid_before: Grid


@dataclass(frozen=True)
class MoveResult:
    accepted: bool
    outcome: Outcome
    reason: Optional[str] = None


@dataclass
class Scores:
    x: int = 0
    o: int = 0
    draws: int = 0

    def record(self, outcome: Outcome) -> None:
        if outcome.status is Status.X_WINS:
            self.x += 1
        elif outcome.status is Status.O_WINS:
            self.o += 1
        elif outcome.status is Status.DRAW:
            self.draws += 1

    @property
    def games_played(self) -> int:
        return self.x + self.o + self.draws

    def win_rate(self, mark: int = X) -> float:
        if self.games_played == 0:
            return 0.0
        wins = self.x if mark == X else self.o
        return wins / self.games_played

    def as_dict(self) -> Dict[str, int]:
        return {'X': self.x, 'O': self.o, 'draws': self.draws}


class PendingComputerMove:
    """Handle for a scheduled computer move.

    ``result`` is an asyncio future resolved with the Outcome after the move
    is applied, or cancelled if the move is dropped.
    """

    def __init__(self, session: 'GameSession', generation: int, loop: asyncio.AbstractEventLoop):
        self._session = session
        self._generation = generation
        self._handle: Optional[asyncio.TimerHandle] = None
        self.result: asyncio.Future = loop.create_future()

    def _schedule(self, loop: asyncio.AbstractEventLoop, delay: float) -> None:
        self._handle = loop.call_later(delay, self._fire)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def cancelled(self) -> bool:
        return self.result.cancelled()

    @property
    def done(self) -> bool:
        return self.result.done()

    def cancel(self) -> bool:
        if self.result.done():
            return False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._session._pending is self:
            self._session._pending = None
        self.result.cancel()
        return True

    def _fire(self) -> None:
        self._handle = None
        if self.result.done():
            return
        session = self._session
        if session._pending is self:
            session._pending = None
        if self._generation != session.generation:
            logger.debug("dropping stale computer move (generation %d != %d)",
                         self._generation, session.generation)
            self.cancel()
            return
        try:
            res = session.make_computer_move()
        except Exception as exc:
            self.result.set_exception(exc)
            return
        self.result.set_result(res.outcome)


class GameSession:
    def __init__(
        self,
        settings: Optional[GameSettings] = None,
        rng: Optional[random.Random] = None,
        profiles: Optional[Mapping[Difficulty, Profile]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = (settings or GameSettings()).validate()
        self.rng = rng if rng is not None else random.Random()
        self.profiles = profiles
        self.scores = Scores()
        self._clock = clock
        self._generation = 0
        self._pending: Optional[PendingComputerMove] = None
        self._start_game()

    # -- lifecycle -----------------------------------------------------

    def _start_game(self) -> None:
        self._grid: Grid = create_grid(self.settings.size)
        self._turn = X
        self._history: List[MoveRecord] = []
        self._state = GameState.PLAYING
        self._outcome: Outcome = IN_PROGRESS
        self._started_at = self._clock()
        self._finished_at: Optional[float] = None
        self._maybe_auto_play()

    def _invalidate_pending(self) -> None:
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def reset(self) -> Outcome:
        """Play again: fresh board, scores kept."""
        self._invalidate_pending()
        self._start_game()
        return self._outcome

    def new_game(self) -> Outcome:
        """Fresh board and zeroed scores."""
        self._invalidate_pending()
        self.scores = Scores()
        self._start_game()
        return self._outcome

    # -- projections ---------------------------------------------------

    @property
    def size(self) -> int:
        return self.settings.size

    @property
    def win_length(self) -> int:
        return self.settings.win_length_value

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def turn(self) -> int:
        return self._turn

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def outcome(self) -> Outcome:
        return self._outcome

    @property
    def winner(self) -> Optional[int]:
        return self._outcome.winner

    @property
    def winning_line(self) -> Line:
        return self._outcome.line

    @property
    def move_count(self) -> int:
        return sum(1 for v in self._grid if v != EMPTY)

    @property
    def elapsed_moves(self) -> int:
        return len(self._history)

    @property
    def history(self) -> Tuple[MoveRecord, ...]:
        return tuple(self._history)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_thinking(self) -> bool:
        return self._pending is not None

    @property
    def elapsed_seconds(self) -> float:
        end = self._finished_at if self._finished_at is not None else self._clock()
        return end - self._started_at

    def player_name(self, mark: int) -> str:
        return self.settings.player_name(mark)

    def stats(self) -> Dict[str, Any]:
        return {
            'total_moves': self.elapsed_moves,
            'game_duration': int(self.elapsed_seconds),
            'winner': outcome_label(self._outcome),
            'scores': self.scores.as_dict(),
            'games_played': self.scores.games_played,
            'win_rate': self.scores.win_rate(X),
        }

    def status_text(self) -> str:
        if self._state is GameState.FINISHED:
            if self._outcome.is_draw:
                return "It's a draw!"
            return f"{self.player_name(self._outcome.winner)} wins!"
        if self.settings.is_computer(self._turn):
            return "AI is thinking..." if self.is_thinking else "AI's turn"
        symbol = 'X' if self._turn == X else 'O'
        return f"{symbol} {self.player_name(self._turn)}'s turn"

    # -- moves ---------------------------------------------------------

    def _check_move(self, index: int, by_computer: bool) -> None:
        if self._state is GameState.FINISHED:
            raise InvalidMove(index, InvalidMove.FINISHED)
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self._grid):
            raise InvalidMove(index, InvalidMove.OUT_OF_RANGE)
        if self._grid[index] != EMPTY:
            raise InvalidMove(index, InvalidMove.OCCUPIED)
        if by_computer:
            return
        if self._pending is not None:
            raise InvalidMove(index, InvalidMove.THINKING)
        if self.settings.is_computer(self._turn):
            raise InvalidMove(index, InvalidMove.NOT_YOUR_TURN)

    def apply_move(self, index: int, by_computer: bool = False) -> MoveResult:
        try:
            self._check_move(index, by_computer)
        except InvalidMove as exc:
            logger.debug("%s", exc)
            return MoveResult(False, self._outcome, exc.reason)

        mark = self._turn
        self._history.append(MoveRecord(index, mark, self._grid))
        self._grid = apply_move(self._grid, index, mark)
        self._turn = other(mark)
        self._outcome = evaluate(self._grid, self.size, self.win_length)
        if self._outcome.is_terminal:
            self._state = GameState.FINISHED
            self._finished_at = self._clock()
            self.scores.record(self._outcome)
            logger.info("game finished result=%s moves=%d", outcome_label(self._outcome), len(self._history))
        if not by_computer:
            self._maybe_auto_play()
        return MoveResult(True, self._outcome)

    def apply_human_move(self, index: int) -> MoveResult:
        return self.apply_move(index)

    def _computer_to_move(self) -> bool:
        return self._state is GameState.PLAYING and self.settings.is_computer(self._turn)

    def _maybe_auto_play(self) -> None:
        if self.settings.auto_play and self._computer_to_move():
            self.make_computer_move()

    def make_computer_move(self, difficulty: Optional[Difficulty] = None) -> MoveResult:
        """Select and play a move for the side to move, right now.

        In vs-computer mode only the computer's turn is accepted. In two-player
        mode the move is played on behalf of whichever side is to move.
        """
        if self._state is GameState.FINISHED:
            return MoveResult(False, self._outcome, InvalidMove.FINISHED)
        if self.settings.mode is GameMode.VS_COMPUTER and not self.settings.is_computer(self._turn):
            return MoveResult(False, self._outcome, InvalidMove.NOT_YOUR_TURN)
        index = select_move(
            self._grid,
            self.size,
            difficulty or self.settings.difficulty,
            self._turn,
            rng=self.rng,
            profiles=self.profiles,
            win_length=self.win_length,
        )
        return self.apply_move(index, by_computer=True)

    def request_computer_move(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        delay: Optional[float] = None,
    ) -> Optional[PendingComputerMove]:
        """Schedule the computer's move after the thinking delay.

        Must be called with a running event loop (or an explicit one). Returns
        the existing handle if a move is already pending, or None when it is
        not the computer's turn.
        """
        if self._pending is not None:
            return self._pending
        if not self._computer_to_move():
            logger.debug("computer move requested but it is not the computer's turn")
            return None
        if loop is None:
            loop = asyncio.get_running_loop()
        wait = self.settings.think_delay if delay is None else delay
        pending = PendingComputerMove(self, self._generation, loop)
        self._pending = pending
        pending._schedule(loop, wait)
        return pending

    def undo(self) -> Outcome:
        """Take back the last move (or the last human move and the reply to it).

        Only while playing; a finished game or an empty log is left alone.
        """
        if self._state is not GameState.PLAYING or not self._history:
            return self._outcome
        self._invalidate_pending()
        count = 1
        human = self.settings.human_mark
        if human is not None:
            count = 0
            for rec in reversed(self._history):
                count += 1
                if rec.mark == human:
                    break
        first_undone = self._history[-count]
        del self._history[-count:]
        self._grid = first_undone.grid_before
        self._turn = first_undone.mark
        self._outcome = evaluate(self._grid, self.size, self.win_length)
        self._maybe_auto_play()
        return self._outcome


def new_game(size: int = 3, win_length: Optional[int] = None, **kwargs) -> GameSession:
    rng = kwargs.pop('rng', None)
    profiles = kwargs.pop('profiles', None)
    settings = GameSettings(size=size, win_length=win_length, **kwargs)
    return GameSession(settings, rng=rng, profiles=profiles)


def apply_human_move(session: GameSession, index: int) -> MoveResult:
    return session.apply_human_move(index)


def request_computer_move(session: GameSession, loop=None, delay=None) -> Optional[PendingComputerMove]:
    return session.request_computer_move(loop=loop, delay=delay)


def undo(session: GameSession) -> Outcome:
    return session.undo()


def reset(session: GameSession) -> Outcome:
    return session.reset()
