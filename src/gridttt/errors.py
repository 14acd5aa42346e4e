"""Exception types raised by the engine."""


class GridTTTError(Exception):
    """Base class for engine errors."""


class ConfigurationError(GridTTTError, ValueError):
    """Unsupported game configuration (size, win length, mode, board text).

    Raised when a game or board is created, never in the middle of play.
    """


class InvalidMove(GridTTTError):
    """A move request that the session refuses.

    Sessions do not raise this to callers; a rejected move is a no-op and the
    reason travels back on ``MoveResult.reason``.
    """

    OUT_OF_RANGE = "out_of_range"
    OCCUPIED = "occupied"
    FINISHED = "finished"
    NOT_YOUR_TURN = "not_your_turn"
    THINKING = "computer_thinking"

    def __init__(self, index: int, reason: str):
        super().__init__(f"move {index} rejected: {reason}")
        self.index = index
        self.reason = reason


class NoAvailableMoves(GridTTTError, AssertionError):
    """The move selector was asked to play on a full board."""
