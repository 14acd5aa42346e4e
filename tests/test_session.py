import random

import pytest

from gridttt.errors import ConfigurationError, InvalidMove
from gridttt.evaluator import Status
from gridttt.game_basics import EMPTY, O, X, apply_move, create_grid
from gridttt.session import (
    GameSession,
    GameState,
    apply_human_move,
    new_game,
    reset,
    undo,
)
from gridttt.settings import GameMode, GameSettings


def two_player(size: int = 3) -> GameSession:
    return GameSession(GameSettings(size=size, mode=GameMode.TWO_PLAYER))


def vs_computer(**kwargs) -> GameSession:
    kwargs.setdefault("difficulty", "hard")
    return GameSession(GameSettings(mode=GameMode.VS_COMPUTER, **kwargs), rng=random.Random(0))


def play(session: GameSession, moves):
    for mv in moves:
        res = session.apply_move(mv)
        assert res.accepted, (mv, res.reason)


def test_initial_state():
    s = two_player()
    assert s.state is GameState.PLAYING
    assert s.grid == create_grid(3)
    assert s.turn == X
    assert s.elapsed_moves == 0
    assert s.move_count == 0
    assert s.outcome.status is Status.IN_PROGRESS


def test_reset_on_untouched_game():
    s = two_player()
    out = reset(s)
    assert out.status is Status.IN_PROGRESS
    assert s.grid == create_grid(3)
    assert s.turn == X


def test_moves_alternate_and_record_history():
    s = two_player()
    play(s, [0, 4])
    assert s.grid[0] == X and s.grid[4] == O
    assert s.turn == X
    assert [(r.index, r.mark) for r in s.history] == [(0, X), (4, O)]
    assert s.history[0].grid_before == create_grid(3)


def test_history_replay_reconstructs_grid():
    s = two_player(4)
    play(s, [5, 6, 10, 0, 15])
    grid = create_grid(4)
    for rec in s.history:
        assert rec.grid_before == grid
        grid = apply_move(grid, rec.index, rec.mark)
    assert grid == s.grid


@pytest.mark.parametrize("index,reason", [
    (-1, InvalidMove.OUT_OF_RANGE),
    (9, InvalidMove.OUT_OF_RANGE),
    (True, InvalidMove.OUT_OF_RANGE),
    ("1", InvalidMove.OUT_OF_RANGE),
    (0, InvalidMove.OCCUPIED),
])
def test_invalid_moves_are_ignored(index, reason):
    s = two_player()
    play(s, [0])
    before = (s.grid, s.turn, s.elapsed_moves)
    res = apply_human_move(s, index)
    assert res.accepted is False
    assert res.reason == reason
    assert (s.grid, s.turn, s.elapsed_moves) == before


def test_win_finishes_game_and_updates_scores():
    s = two_player()
    play(s, [0, 3, 1, 4, 2])
    assert s.state is GameState.FINISHED
    assert s.winner == X
    assert s.winning_line == (0, 1, 2)
    assert s.scores.as_dict() == {'X': 1, 'O': 0, 'draws': 0}
    res = s.apply_move(8)
    assert not res.accepted
    assert res.reason == InvalidMove.FINISHED
    assert s.status_text() == "Player 1 wins!"


def test_draw_counts_draw():
    s = two_player()
    play(s, [0, 2, 1, 3, 5, 4, 6, 7, 8])
    assert s.outcome.status is Status.DRAW
    assert s.winning_line == ()
    assert s.scores.draws == 1
    assert s.status_text() == "It's a draw!"


def test_reset_keeps_scores_new_game_clears_them():
    s = two_player()
    play(s, [0, 3, 1, 4, 2])
    s.reset()
    assert s.state is GameState.PLAYING
    assert s.grid == create_grid(3)
    assert s.winner is None
    assert s.history == ()
    assert s.scores.x == 1
    play(s, [3, 0, 4, 1, 8, 2])
    assert s.scores.as_dict() == {'X': 1, 'O': 1, 'draws': 0}
    assert s.scores.games_played == 2
    assert s.scores.win_rate(X) == 0.5
    s.new_game()
    assert s.scores.games_played == 0
    assert s.scores.win_rate(X) == 0.0


def test_undo_round_trip_two_player():
    s = two_player()
    play(s, [4])
    grid, turn = s.grid, s.turn
    play(s, [0])
    undo(s)
    assert s.grid == grid
    assert s.turn == turn
    assert s.elapsed_moves == 1


def test_undo_on_empty_log_is_noop():
    s = two_player()
    out = s.undo()
    assert out.status is Status.IN_PROGRESS
    assert s.grid == create_grid(3)
    assert s.turn == X


def test_undo_after_finish_is_noop():
    s = two_player()
    play(s, [0, 3, 1, 4, 2])
    s.undo()
    assert s.state is GameState.FINISHED
    assert s.elapsed_moves == 5


def test_human_cannot_move_on_computer_turn():
    s = vs_computer()
    play(s, [0])
    res = s.apply_human_move(1)
    assert not res.accepted
    assert res.reason == InvalidMove.NOT_YOUR_TURN
    res = s.make_computer_move()
    assert res.accepted
    assert s.turn == X
    assert s.move_count == 2


def test_computer_move_rejected_on_human_turn():
    s = vs_computer()
    res = s.make_computer_move()
    assert not res.accepted
    assert res.reason == InvalidMove.NOT_YOUR_TURN
    assert s.move_count == 0


def test_undo_vs_computer_takes_back_move_and_reply():
    s = vs_computer()
    play(s, [0])
    s.make_computer_move()
    play(s, [8])
    s.make_computer_move()
    assert s.elapsed_moves == 4
    after_first_pair = s.history[2].grid_before
    s.undo()
    assert s.elapsed_moves == 2
    assert s.grid == after_first_pair
    assert s.turn == X
    s.undo()
    assert s.grid == create_grid(3)
    assert s.turn == X


def test_undo_vs_computer_before_reply():
    s = vs_computer()
    play(s, [0])
    s.undo()
    assert s.grid == create_grid(3)
    assert s.turn == X
    assert s.history == ()


def test_auto_play_replies_immediately():
    s = vs_computer(auto_play=True)
    play(s, [0])
    assert s.elapsed_moves == 2
    assert s.turn == X
    assert s.history[1].mark == O


def test_auto_play_computer_opens_as_x():
    s = vs_computer(auto_play=True, computer_mark=X)
    assert s.move_count == 1
    assert s.grid[4] == X
    assert s.turn == O
    assert s.settings.human_mark == O


def test_auto_play_undo_of_opening_move_replays_it():
    s = vs_computer(auto_play=True, computer_mark=X)
    s.undo()
    assert s.state is GameState.PLAYING
    assert s.move_count == 1
    assert s.turn == O
    res = s.apply_human_move(0)
    assert res.accepted
    assert s.move_count == 3


def test_vs_computer_game_runs_to_completion():
    s = vs_computer(auto_play=True)
    play(s, [1])
    while s.state is GameState.PLAYING:
        free = [i for i, v in enumerate(s.grid) if v == EMPTY]
        s.apply_human_move(free[-1])
    assert s.scores.games_played == 1


def test_elapsed_seconds_frozen_at_finish():
    now = [100.0]
    s = GameSession(GameSettings(mode="pvp"), clock=lambda: now[0])
    now[0] = 105.0
    play(s, [0, 3, 1, 4])
    assert s.elapsed_seconds == 5.0
    now[0] = 112.0
    play(s, [2])
    now[0] = 200.0
    assert s.elapsed_seconds == 12.0
    stats = s.stats()
    assert stats['total_moves'] == 5
    assert stats['game_duration'] == 12
    assert stats['winner'] == 'X'
    assert stats['scores'] == {'X': 1, 'O': 0, 'draws': 0}


def test_status_text_and_names():
    s = GameSession(GameSettings(mode="pvp", player_names={X: "Ada", O: "Bo"}))
    assert s.status_text() == "X Ada's turn"
    play(s, [0])
    assert s.status_text() == "O Bo's turn"
    c = vs_computer()
    play(c, [0])
    assert c.status_text() == "AI's turn"
    assert c.player_name(O) == "AI"


def test_new_game_helper_and_win_length_override():
    s = new_game(4)
    assert s.win_length == 3
    assert len(s.grid) == 16
    s = new_game(3, win_length=2, mode="pvp")
    play(s, [0, 4, 1])
    assert s.winner == X
    assert s.winning_line == (0, 1)


@pytest.mark.parametrize("kwargs", [
    {"size": 0},
    {"size": 3, "win_length": 4},
    {"size": 4, "win_length": 0},
    {"size": 3, "computer_mark": 5},
    {"size": 3, "think_delay": -1},
])
def test_bad_configuration_rejected_at_creation(kwargs):
    with pytest.raises(ConfigurationError):
        GameSession(GameSettings(**kwargs))


def test_bad_mode_rejected():
    with pytest.raises(ConfigurationError):
        GameSettings(mode="online")
