"""
errors.py - Exception hierarchy for the Connect Four engine

Board primitives raise these directly. The game engine reports move errors as
MoveResult values instead; MoveResult.raise_for_error() turns them back into
the exceptions below.
"""


class ConnectFourError(Exception):
    """Base class for all engine errors."""


class InvalidDimensions(ConnectFourError, ValueError):
    """Board height or width is not an integer of at least the minimum size."""

    def __init__(self, height, width, minimum: int):
        self.height = height
        self.width = width
        self.minimum = minimum
        super().__init__(
            f"Board dimensions must be integers >= {minimum}, got {height}x{width}"
        )


class InvalidMove(ConnectFourError):
    """A move that could not be applied. The game state is unchanged."""


class ColumnOutOfRange(InvalidMove):
    def __init__(self, column, width: int):
        self.column = column
        self.width = width
        super().__init__(f"Column {column} out of range (valid: 0-{width - 1})")


class ColumnFull(InvalidMove):
    def __init__(self, column: int):
        self.column = column
        super().__init__(f"Column {column} is full")


class GameNotActive(InvalidMove):
    def __init__(self, status=None):
        self.status = status
        message = "Game is not in progress"
        if status is not None:
            message += f" (status: {status.name})"
        super().__init__(message)


class GameDataError(ConnectFourError):
    """A saved game could not be read or does not describe a valid game."""
