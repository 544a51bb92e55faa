"""
utils.py - Utility functions and constants for the Connect Four engine

This module provides common constants, enumerations, and the pure win-detection
helpers used by the board and the game engine. All helpers take the grid and the
coordinates they work on as explicit parameters.
"""

from enum import Enum, auto
from typing import List, Optional, Tuple

import numpy as np

# Game constants
DEFAULT_ROWS = 6
DEFAULT_COLS = 7
CONNECT_N = 4  # Number of pieces in a row to win
MIN_DIMENSION = CONNECT_N  # Smaller boards cannot hold a single winning run

DEFAULT_PLAYER1_COLOR = "red"
DEFAULT_PLAYER2_COLOR = "yellow"

# Win-scan strategies
WIN_SCAN_FULL = "full"          # Rescan every run on the board
WIN_SCAN_ANCHORED = "anchored"  # Only runs through the piece just placed
WIN_SCAN_STRATEGIES = (WIN_SCAN_FULL, WIN_SCAN_ANCHORED)

Coord = Tuple[int, int]


class Player(Enum):
    """Enumeration representing players and cell states."""
    EMPTY = 0
    ONE = 1    # First player
    TWO = 2    # Second player

    def other(self) -> "Player":
        """Get the other player."""
        if self == Player.ONE:
            return Player.TWO
        elif self == Player.TWO:
            return Player.ONE
        return Player.EMPTY

    def __str__(self):
        if self == Player.EMPTY:
            return " "
        elif self == Player.ONE:
            return "X"
        else:
            return "O"


class GameStatus(Enum):
    """Enumeration representing the engine's state machine."""
    NOT_STARTED = auto()
    IN_PROGRESS = auto()
    WON = auto()
    TIED = auto()

    def is_game_over(self) -> bool:
        """Check if the game reached a terminal state."""
        return self in (GameStatus.WON, GameStatus.TIED)

    def is_active(self) -> bool:
        """Check if moves may be accepted."""
        return self == GameStatus.IN_PROGRESS


class MoveOutcome(Enum):
    """What a drop_piece call reports back to the caller."""
    PLACED = auto()
    WON = auto()
    TIED = auto()
    INVALID = auto()


class InvalidReason(Enum):
    """Why a drop_piece call was rejected."""
    COLUMN_OUT_OF_RANGE = auto()
    COLUMN_FULL = auto()
    GAME_NOT_ACTIVE = auto()


class Direction(Enum):
    """Enumeration representing directions for win checking."""
    HORIZONTAL = auto()
    VERTICAL = auto()
    DIAGONAL_DOWN_RIGHT = auto()
    DIAGONAL_DOWN_LEFT = auto()


# Direction vectors (row, col) for each direction; row 0 is the top of the board
DIRECTION_VECTORS = {
    Direction.HORIZONTAL: (0, 1),
    Direction.VERTICAL: (1, 0),
    Direction.DIAGONAL_DOWN_RIGHT: (1, 1),
    Direction.DIAGONAL_DOWN_LEFT: (1, -1)
}


def is_valid_position(row: int, col: int, rows: int, cols: int) -> bool:
    """
    Check if a position is within the board boundaries.

    Args:
        row: Row index
        col: Column index
        rows: Board height
        cols: Board width

    Returns:
        True if position is valid, False otherwise
    """
    return 0 <= row < rows and 0 <= col < cols


def get_run(row: int, col: int, direction: Direction, length: int = CONNECT_N) -> List[Coord]:
    """
    Build the run of `length` cells starting at (row, col) and stepping in `direction`.

    The coordinates are not bounds-checked.
    """
    dr, dc = DIRECTION_VECTORS[direction]
    return [(row + i * dr, col + i * dc) for i in range(length)]


def is_winning_run(grid: np.ndarray, cells: List[Coord], player_value: int) -> bool:
    """
    Check that every cell of a run is on the board and owned by the player.

    Args:
        grid: The game board
        cells: Coordinates of the run
        player_value: Value of the player to check for

    Returns:
        True if the run wins for the player
    """
    if player_value == Player.EMPTY.value:
        return False

    rows, cols = grid.shape
    return all(
        is_valid_position(r, c, rows, cols) and grid[r, c] == player_value
        for r, c in cells
    )


def find_winning_run(grid: np.ndarray, player_value: int) -> Optional[List[Coord]]:
    """
    Scan the whole board for four-in-a-row of the player's pieces.

    Cells are visited in row-major order; at each cell the four directions are tried
    in DIRECTION_VECTORS order and the first winning run is returned.

    Args:
        grid: The game board
        player_value: Value of the player to check for

    Returns:
        The winning run as a list of (row, col), or None
    """
    rows, cols = grid.shape
    for row in range(rows):
        for col in range(cols):
            if grid[row, col] != player_value:
                continue
            for direction in DIRECTION_VECTORS:
                cells = get_run(row, col, direction)
                if is_winning_run(grid, cells, player_value):
                    return cells
    return None


def find_winning_run_at(grid: np.ndarray, row: int, col: int) -> Optional[List[Coord]]:
    """
    Look for a winning run that passes through (row, col).

    Only the owner of (row, col) is considered. Every run of CONNECT_N cells that
    contains the position is checked, so the answer matches find_winning_run whenever
    the position holds the piece that was just placed.

    Args:
        grid: The game board
        row: Row index of the anchor cell
        col: Column index of the anchor cell

    Returns:
        The winning run as a list of (row, col), or None
    """
    player_value = grid[row, col]
    if player_value == Player.EMPTY.value:
        return None

    for direction, (dr, dc) in DIRECTION_VECTORS.items():
        for offset in range(CONNECT_N):
            cells = get_run(row - offset * dr, col - offset * dc, direction)
            if is_winning_run(grid, cells, player_value):
                return cells
    return None


def check_win(grid: np.ndarray, player_value: int) -> bool:
    """Check whether the player has four-in-a-row anywhere on the board."""
    return find_winning_run(grid, player_value) is not None


def check_win_at_position(grid: np.ndarray, row: int, col: int) -> bool:
    """Check whether the piece at (row, col) is part of four-in-a-row."""
    return find_winning_run_at(grid, row, col) is not None


def render_board_ascii(grid: np.ndarray) -> str:
    """
    Render the board as ASCII art.

    Args:
        grid: The game board

    Returns:
        ASCII representation of the board
    """
    rows, cols = grid.shape
    border = "|" + "-" * (cols * 2 - 1) + "|"
    result = [border]

    for row in range(rows):
        cells = [str(Player(int(grid[row, col]))) for col in range(cols)]
        result.append("|" + " ".join(cells) + "|")

    result.append(border)
    result.append("|" + " ".join(str(i % 10) for i in range(cols)) + "|")

    return "\n".join(result)
