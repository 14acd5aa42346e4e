import asyncio
import random

import pytest

from gridttt.errors import InvalidMove
from gridttt.evaluator import Outcome
from gridttt.game_basics import O, create_grid
from gridttt.session import new_game, request_computer_move


def _session(**kwargs):
    return new_game(3, mode="pvc", difficulty="hard", rng=random.Random(0), **kwargs)


def test_computer_move_applied_after_delay():
    async def scenario():
        s = _session()
        s.apply_human_move(0)
        pending = request_computer_move(s, delay=0.01)
        assert pending is not None
        assert s.is_thinking
        assert s.status_text() == "AI is thinking..."
        # humans cannot move while the computer is thinking
        assert s.apply_human_move(1).reason == InvalidMove.THINKING
        assert s.move_count == 1
        outcome = await pending.result
        return s, pending, outcome

    s, pending, outcome = asyncio.run(scenario())
    assert isinstance(outcome, Outcome)
    assert pending.done and not pending.cancelled
    assert not s.is_thinking
    assert s.move_count == 2
    assert s.history[-1].mark == O
    assert s.grid[4] == O


def test_reset_cancels_pending_move():
    async def scenario():
        s = _session()
        s.apply_human_move(0)
        pending = s.request_computer_move(delay=0.01)
        generation = pending.generation
        s.reset()
        await asyncio.sleep(0.05)
        return s, pending, generation

    s, pending, generation = asyncio.run(scenario())
    assert pending.cancelled
    assert s.generation == generation + 1
    assert s.grid == create_grid(3)
    assert not s.is_thinking


def test_undo_cancels_pending_move():
    async def scenario():
        s = _session()
        s.apply_human_move(0)
        pending = s.request_computer_move(delay=0.01)
        s.undo()
        await asyncio.sleep(0.05)
        return s, pending

    s, pending = asyncio.run(scenario())
    assert pending.cancelled
    assert s.grid == create_grid(3)


def test_awaiting_cancelled_move_raises():
    async def scenario():
        s = _session()
        s.apply_human_move(0)
        pending = s.request_computer_move(delay=1.0)
        assert pending.cancel() is True
        assert pending.cancel() is False
        with pytest.raises(asyncio.CancelledError):
            await pending.result
        return s

    s = asyncio.run(scenario())
    assert s.move_count == 1
    assert not s.is_thinking


def test_request_is_idempotent_while_pending():
    async def scenario():
        s = _session()
        s.apply_human_move(0)
        first = s.request_computer_move(delay=0.01)
        second = s.request_computer_move(delay=0.01)
        assert first is second
        await first.result
        return s

    s = asyncio.run(scenario())
    assert s.move_count == 2


def test_request_on_human_turn_returns_none():
    async def scenario():
        s = _session()
        return s.request_computer_move(delay=0)

    assert asyncio.run(scenario()) is None


def test_request_needs_running_loop():
    s = _session()
    s.apply_human_move(0)
    with pytest.raises(RuntimeError):
        s.request_computer_move()
    assert not s.is_thinking
