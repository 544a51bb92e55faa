"""
rules.py - Turn order, win/tie detection and the game state machine for Connect Four

This module provides:
1. PlayerInfo, the identity and display color of each of the two players
2. MoveResult, the value every drop_piece call returns to the presentation layer
3. GameEngine, which owns the board, the turn order and the game status

The engine never prints or prompts. Callers render from the returned results.
"""

import operator
from collections import Counter
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np

from connect4_engine.config import GameConfig
from connect4_engine.debug import debug
from connect4_engine.errors import (InvalidMove, ColumnOutOfRange, ColumnFull,
                                    GameNotActive)
from connect4_engine.game.board import Board
from connect4_engine.utils import (Player, GameStatus, MoveOutcome, InvalidReason,
                                   Coord, WIN_SCAN_ANCHORED, find_winning_run,
                                   find_winning_run_at)


@dataclass
class PlayerInfo:
    """One of the two players. Only `color` may change during a session."""
    num: int
    color: str

    def __post_init__(self):
        if self.num not in (Player.ONE.value, Player.TWO.value):
            raise ValueError(f"Player number must be 1 or 2, got {self.num}")

    @property
    def piece(self) -> Player:
        return Player(self.num)

    def __str__(self) -> str:
        return f"Player {self.num}"


@dataclass(frozen=True)
class MoveResult:
    """
    Outcome of a single drop_piece call.

    PLACED, WON and TIED carry the row/column/player of the piece that was placed;
    PLACED also carries the player whose turn is next. WON carries the winning run.
    INVALID carries the reason and the matching exception, and means nothing changed.
    """
    outcome: MoveOutcome
    column: Any = None
    row: Optional[int] = None
    player: Optional[PlayerInfo] = None
    next_player: Optional[PlayerInfo] = None
    reason: Optional[InvalidReason] = None
    error: Optional[InvalidMove] = field(default=None, compare=False)
    winning_line: Optional[List[Coord]] = None

    @property
    def ok(self) -> bool:
        return self.outcome != MoveOutcome.INVALID

    @property
    def is_terminal(self) -> bool:
        return self.outcome in (MoveOutcome.WON, MoveOutcome.TIED)

    def raise_for_error(self) -> "MoveResult":
        """Raise the stored InvalidMove for rejected moves, otherwise return self."""
        if self.error is not None:
            raise self.error
        return self

    def describe(self) -> str:
        """Human-readable one-line summary for status lines and logs."""
        if self.outcome == MoveOutcome.WON:
            return f"{self.player} won!"
        if self.outcome == MoveOutcome.TIED:
            return "Tie!"
        if self.outcome == MoveOutcome.PLACED:
            return (f"{self.player} played column {self.column}; "
                    f"{self.next_player}'s turn")
        return f"Invalid move: {self.error}"


PlayerArg = Union[PlayerInfo, str, None]


class GameEngine:
    """
    Connect Four game manager.

    States: NOT_STARTED -> IN_PROGRESS -> WON | TIED. Only start() or reset_game()
    leave a terminal state. Calls must be serialized by the caller.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """Create an engine with an empty board. The game is NOT_STARTED until start()."""
        self.config = (config or GameConfig()).validate()
        debug.debug(f"Initializing GameEngine ({self.config.win_scan} win scan)", "engine")

        self.player1 = PlayerInfo(Player.ONE.value, self.config.player1_color)
        self.player2 = PlayerInfo(Player.TWO.value, self.config.player2_color)
        self.board = Board(self.config.height, self.config.width)
        self.current_player = self.player1
        self.status = GameStatus.NOT_STARTED
        self.winner: Optional[PlayerInfo] = None
        self.last_move: Optional[Coord] = None
        self.moves_made: List[int] = []

    @property
    def players(self) -> Tuple[PlayerInfo, PlayerInfo]:
        return self.player1, self.player2

    def _resolve_player(self, value: PlayerArg, existing: PlayerInfo) -> PlayerInfo:
        if value is None:
            return existing
        if isinstance(value, PlayerInfo):
            if value.num != existing.num:
                raise ValueError(f"Expected player {existing.num}, got player {value.num}")
            return value
        return replace(existing, color=str(value))

    def start(self, player1: PlayerArg = None, player2: PlayerArg = None,
              height: Optional[int] = None, width: Optional[int] = None) -> None:
        """
        Begin a fresh game.

        Players may be given as PlayerInfo objects or as color strings; omitted
        arguments keep the current players and board size. Only the players'
        display colors survive from the previous game.

        Raises:
            InvalidDimensions: if height or width is too small; the engine is unchanged
            ValueError: if a PlayerInfo has the wrong number; the engine is unchanged
        """
        height = self.board.height if height is None else height
        width = self.board.width if width is None else width
        board = Board(height, width)

        player1 = self._resolve_player(player1, self.player1)
        player2 = self._resolve_player(player2, self.player2)

        self.status = GameStatus.NOT_STARTED
        self.player1, self.player2 = player1, player2
        self.board = board
        self.current_player = self.player1
        self.winner = None
        self.last_move = None
        self.moves_made = []
        self.status = GameStatus.IN_PROGRESS
        debug.info(f"Started {height}x{width} game "
                   f"({self.player1.color} vs {self.player2.color})", "engine")

    def reset_game(self) -> None:
        """Restart with the same players and board size."""
        debug.debug("Resetting game", "engine")
        self.start()

    def update_colors(self, color1: Optional[str] = None, color2: Optional[str] = None) -> None:
        """Change the players' display colors. Has no effect on the rules."""
        if color1 is not None:
            self.player1.color = color1
        if color2 is not None:
            self.player2.color = color2
        debug.debug(f"Colors set to {self.player1.color} / {self.player2.color}", "engine")

    def other_player(self, player: PlayerInfo) -> PlayerInfo:
        return self.player2 if player is self.player1 else self.player1

    def _invalid(self, column, reason: InvalidReason, error: InvalidMove) -> MoveResult:
        debug.debug(f"Rejected move in column {column}: {error}", "engine")
        return MoveResult(MoveOutcome.INVALID, column=column, reason=reason, error=error)

    def _find_win(self, row: int, column: int, player: PlayerInfo) -> Optional[List[Coord]]:
        if self.config.win_scan == WIN_SCAN_ANCHORED:
            return find_winning_run_at(self.board.grid, row, column)
        return find_winning_run(self.board.grid, player.num)

    def drop_piece(self, column: int) -> MoveResult:
        """
        Drop the current player's piece into `column`.

        Args:
            column: Column to play (0-indexed)

        Returns:
            MoveResult with outcome PLACED, WON, TIED or INVALID. An INVALID
            result leaves the board, the status and the current player untouched.
        """
        if not self.status.is_active():
            return self._invalid(column, InvalidReason.GAME_NOT_ACTIVE,
                                 GameNotActive(self.status))

        try:
            row = self.board.find_drop_row(column)
        except ColumnOutOfRange as e:
            return self._invalid(column, InvalidReason.COLUMN_OUT_OF_RANGE, e)
        column = operator.index(column)
        if row is None:
            return self._invalid(column, InvalidReason.COLUMN_FULL, ColumnFull(column))

        player = self.current_player
        self.board.place(row, column, player.piece)
        self.last_move = (row, column)
        self.moves_made.append(column)

        debug.start_timer("win_check")
        winning_line = self._find_win(row, column, player)
        debug.end_timer("win_check", "engine")

        if winning_line is not None:
            self.status = GameStatus.WON
            self.winner = player
            debug.info(f"{player} wins after move at {self.last_move}", "engine")
            return MoveResult(MoveOutcome.WON, column=column, row=row, player=player,
                              winning_line=winning_line)

        if self.board.is_full():
            self.status = GameStatus.TIED
            debug.info("Game ends in a tie", "engine")
            return MoveResult(MoveOutcome.TIED, column=column, row=row, player=player)

        self.current_player = self.other_player(player)
        debug.debug(f"{player} played ({row}, {column}); "
                    f"switching to {self.current_player}", "engine")
        return MoveResult(MoveOutcome.PLACED, column=column, row=row, player=player,
                          next_player=self.current_player)

    def is_game_over(self) -> bool:
        return self.status.is_game_over()

    def get_winner(self) -> Optional[PlayerInfo]:
        return self.winner

    def get_valid_moves(self) -> List[int]:
        """Columns that would accept a piece right now."""
        if not self.status.is_active():
            return []
        return self.board.valid_columns()

    def winning_line(self) -> List[Coord]:
        """Positions of the winning run, or an empty list if nobody has won."""
        if self.status != GameStatus.WON or self.winner is None:
            return []
        return find_winning_run(self.board.grid, self.winner.num) or []

    def status_line(self) -> str:
        if self.status == GameStatus.NOT_STARTED:
            return "Game not started"
        if self.status == GameStatus.WON:
            return f"{self.winner} ({self.winner.color}) won!"
        if self.status == GameStatus.TIED:
            return "Tie!"
        return f"{self.current_player} ({self.current_player.color}, "\
               f"{self.current_player.piece}) to move"

    def render(self) -> str:
        """
        Render the game as a string.

        Returns:
            String representation of the board followed by a status line
        """
        return f"{self.board.render()}\n{self.status_line()}"

    def to_dict(self) -> Dict[str, Any]:
        """Serializable snapshot of the game."""
        return {
            "height": self.board.height,
            "width": self.board.width,
            "grid": self.board.to_list(),
            "current_player": self.current_player.num,
            "status": self.status.name,
            "winner": self.winner.num if self.winner else None,
            "players": [
                {"num": p.num, "color": p.color} for p in self.players
            ],
            "moves_made": list(self.moves_made),
            "win_scan": self.config.win_scan,
        }

    def _check_restored_position(self, check_moves: bool) -> None:
        grid = self.board.grid
        occupied = grid != Player.EMPTY.value
        if np.any(occupied[:-1] & ~occupied[1:]):
            raise ValueError("Grid has a piece resting above an empty cell")

        ones = int(np.count_nonzero(grid == Player.ONE.value))
        twos = int(np.count_nonzero(grid == Player.TWO.value))
        if ones - twos not in (0, 1):
            raise ValueError(f"Piece counts {ones}/{twos} are not reachable by alternating turns")
        last_mover = self.player2 if ones == twos else self.player1

        if check_moves:
            heights = Counter({col: self.board.column_height(col) for col in range(self.board.width)})
            if any(not 0 <= col < self.board.width for col in self.moves_made) \
                    or Counter(self.moves_made) != +heights:
                raise ValueError("Move history does not match the grid")

        wins = {p.num: find_winning_run(grid, p.num) is not None for p in self.players}

        if self.status == GameStatus.NOT_STARTED:
            if ones or self.current_player is not self.player1:
                raise ValueError("A game that has not started must have an empty board")
        elif self.status == GameStatus.IN_PROGRESS:
            if any(wins.values()) or self.board.is_full():
                raise ValueError("A game in progress cannot have a win or a full board")
            if self.current_player is last_mover:
                raise ValueError(f"{self.current_player} cannot move twice in a row")
        elif self.status == GameStatus.WON:
            loser = self.other_player(self.winner)
            if not wins[self.winner.num] or wins[loser.num]:
                raise ValueError(f"Grid does not show a win for {self.winner} alone")
            if self.winner is not last_mover or self.current_player is not last_mover:
                raise ValueError(f"{self.winner} did not make the last move")
        elif self.status == GameStatus.TIED:
            if any(wins.values()) or not self.board.is_full():
                raise ValueError("A tied game must have a full board and no win")
            if self.current_player is not last_mover:
                raise ValueError(f"{self.current_player} did not make the last move")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameEngine":
        """
        Rebuild an engine from to_dict() output.

        The position must be reachable by legal play: pieces rest on the bottom
        or on other pieces, the players alternate starting with player 1, and
        the status, winner and player to move agree with the grid.

        Raises:
            KeyError: if a required field is missing
            ValueError: if the fields do not describe a consistent game
            TypeError: if a move in the history is not an integer
        """
        board = Board.from_list(data["grid"])
        if (board.height, board.width) != (data["height"], data["width"]):
            raise ValueError("Grid size does not match height/width")

        colors = {p["num"]: p["color"] for p in data.get("players", [])}
        config = GameConfig(
            height=board.height,
            width=board.width,
            player1_color=colors.get(Player.ONE.value, GameConfig.player1_color),
            player2_color=colors.get(Player.TWO.value, GameConfig.player2_color),
            win_scan=data.get("win_scan", GameConfig.win_scan),
        )
        if data["current_player"] not in (Player.ONE.value, Player.TWO.value):
            raise ValueError(f"Unknown current player {data['current_player']}")

        engine = cls(config)
        engine.board = board
        engine.status = GameStatus[data["status"]]
        engine.current_player = (engine.player1 if data["current_player"] == Player.ONE.value
                                 else engine.player2)

        winner = data.get("winner")
        if engine.status == GameStatus.WON:
            if winner not in (Player.ONE.value, Player.TWO.value):
                raise ValueError("A won game must name its winner")
            engine.winner = engine.player1 if winner == Player.ONE.value else engine.player2
        elif winner is not None:
            raise ValueError(f"Only a won game has a winner (status {engine.status.name})")

        engine.moves_made = [operator.index(c) for c in data.get("moves_made", [])]
        engine._check_restored_position("moves_made" in data)
        debug.debug(f"Restored {engine.status.name} game with "
                    f"{len(engine.moves_made)} moves", "engine")
        return engine
