"""
board.py - Board representation and drop resolution for Connect Four

This module implements the Board class which owns the grid storage and resolves
gravity-based drops. It knows nothing about turns or game status; the game engine
in rules.py drives it.
"""

from typing import List, Optional

import numpy as np

from connect4_engine.config import validate_dimensions
from connect4_engine.debug import debug
from connect4_engine.errors import ColumnOutOfRange
from connect4_engine.utils import (DEFAULT_ROWS, DEFAULT_COLS, Player,
                                   is_valid_position, render_board_ascii)


class Board:
    """
    Represents a Connect Four game board.

    The grid is a (height x width) numpy array indexed [row, col]. Row 0 is the
    top of the board and row height-1 the bottom, so pieces fall towards higher
    row indices. Cells hold Player.EMPTY.value or the owning player's value.
    """

    def __init__(self, height: int = DEFAULT_ROWS, width: int = DEFAULT_COLS):
        """Initialize an empty board of the given size."""
        debug.debug(f"Initializing new {height}x{width} Board", "board")
        self.reset(height, width)

    def reset(self, height: int, width: int) -> None:
        """
        Reinitialize the board to an empty state.

        Raises:
            InvalidDimensions: if height or width is below the minimum size
        """
        validate_dimensions(height, width)
        debug.debug(f"Resetting board to {height}x{width}", "board")
        self.height = height
        self.width = width
        self.grid = np.zeros((height, width), dtype=int)

    def copy(self) -> 'Board':
        """
        Create a deep copy of the current board.

        Returns:
            A new Board instance with the same state
        """
        debug.trace("Creating board copy", "board")
        new_board = Board(self.height, self.width)
        new_board.grid = self.grid.copy()
        return new_board

    def _check_column(self, column: int) -> None:
        if isinstance(column, bool) or not isinstance(column, (int, np.integer)) \
                or not (0 <= column < self.width):
            raise ColumnOutOfRange(column, self.width)

    def _check_cell(self, row: int, column: int) -> None:
        if not is_valid_position(row, column, self.height, self.width):
            raise IndexError(f"Cell ({row}, {column}) is outside the {self.height}x{self.width} board")

    def find_drop_row(self, column: int) -> Optional[int]:
        """
        Find where a piece dropped into `column` would land.

        Args:
            column: The column to drop into (0-indexed)

        Returns:
            The lowest empty row index in the column, or None if the column is full

        Raises:
            ColumnOutOfRange: if column is outside [0, width)
        """
        self._check_column(column)

        for row in range(self.height - 1, -1, -1):
            if self.grid[row, column] == Player.EMPTY.value:
                return row
        return None

    def place(self, row: int, column: int, player: Player) -> None:
        """
        Put `player`'s piece on an empty cell.

        The row must come from find_drop_row on the same board state.
        """
        self._check_cell(row, column)
        if self.grid[row, column] != Player.EMPTY.value:
            raise ValueError(f"Cell ({row}, {column}) is already occupied")
        debug.trace(f"Placing {player.name} at ({row}, {column})", "board")
        self.grid[row, column] = player.value

    def is_full(self) -> bool:
        """Return True if every cell is occupied."""
        return bool(np.all(self.grid != Player.EMPTY.value))

    def cell_at(self, row: int, column: int) -> Player:
        """Return the occupant of a cell."""
        self._check_cell(row, column)
        return Player(int(self.grid[row, column]))

    def column_height(self, column: int) -> int:
        """Return the number of pieces in a column."""
        self._check_column(column)
        return int(np.count_nonzero(self.grid[:, column] != Player.EMPTY.value))

    def valid_columns(self) -> List[int]:
        """Columns that still have room for a piece."""
        return [col for col in range(self.width) if self.grid[0, col] == Player.EMPTY.value]

    def get_state(self) -> np.ndarray:
        """
        Get the current board state as a numpy array.

        Returns:
            2D numpy array representing the board
        """
        return self.grid.copy()

    def to_list(self) -> List[List[int]]:
        """Row-major occupancy as plain lists, for serialization."""
        return self.grid.tolist()

    @classmethod
    def from_list(cls, rows: List[List[int]]) -> 'Board':
        """
        Rebuild a board from row-major occupancy.

        Raises:
            ValueError: if the rows are ragged or hold values other than 0, 1, 2
            InvalidDimensions: if the grid is smaller than the minimum size
        """
        height = len(rows)
        width = len(rows[0]) if rows else 0
        if any(len(row) != width for row in rows):
            raise ValueError("Board rows must all have the same length")

        board = cls(height, width)
        grid = np.array(rows, dtype=int)
        allowed = [p.value for p in Player]
        if not np.all(np.isin(grid, allowed)):
            raise ValueError(f"Board cells must be one of {allowed}")
        board.grid = grid
        return board

    def render(self) -> str:
        """
        Render the board as a string.

        Returns:
            String representation of the board
        """
        return render_board_ascii(self.grid)

    def __str__(self) -> str:
        """String representation of the board."""
        return self.render()
