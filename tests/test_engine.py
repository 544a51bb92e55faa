"""
Tests for the GameEngine: turn order, outcomes and the game state machine.
"""

import numpy as np
import pytest

from connect4_engine.config import GameConfig
from connect4_engine.errors import (InvalidDimensions, InvalidMove, ColumnOutOfRange,
                                    ColumnFull, GameNotActive)
from connect4_engine.game.rules import GameEngine, MoveResult, PlayerInfo
from connect4_engine.utils import (Player, GameStatus, MoveOutcome, InvalidReason,
                                   WIN_SCAN_ANCHORED)

VERTICAL_WIN = [0, 1, 0, 1, 0, 1, 0]
HORIZONTAL_WIN = [0, 0, 1, 1, 2, 2, 3]
DIAGONAL_DOWN_LEFT_WIN = [0, 1, 1, 2, 3, 2, 2, 3, 6, 3, 3]
DIAGONAL_DOWN_RIGHT_WIN = [6, 5, 5, 4, 3, 4, 4, 3, 0, 3, 3]


class TestLifecycle:
    """Test construction, start and reset."""

    def test_new_engine_not_started(self):
        engine = GameEngine()
        assert engine.status == GameStatus.NOT_STARTED
        assert engine.current_player is engine.player1
        assert engine.get_valid_moves() == []

    def test_drop_before_start(self):
        engine = GameEngine()
        result = engine.drop_piece(3)
        assert result.outcome == MoveOutcome.INVALID
        assert result.reason == InvalidReason.GAME_NOT_ACTIVE
        assert engine.board.cell_at(5, 3) == Player.EMPTY

    def test_start(self, engine):
        assert engine.status == GameStatus.IN_PROGRESS
        assert engine.current_player is engine.player1
        assert (engine.board.height, engine.board.width) == (6, 7)
        assert engine.get_valid_moves() == list(range(7))

    def test_start_with_colors_and_size(self):
        engine = GameEngine()
        engine.start("blue", "green", 5, 8)
        assert engine.player1.color == "blue"
        assert engine.player2.color == "green"
        assert (engine.board.height, engine.board.width) == (5, 8)

    def test_start_with_player_objects(self):
        engine = GameEngine()
        p1, p2 = PlayerInfo(1, "black"), PlayerInfo(2, "white")
        engine.start(p1, p2)
        assert engine.current_player is p1
        assert engine.players == (p1, p2)

    def test_start_rejects_swapped_players(self):
        engine = GameEngine()
        with pytest.raises(ValueError):
            engine.start(PlayerInfo(2, "black"), PlayerInfo(1, "white"))
        assert engine.player1.color == "red"
        assert engine.player2.color == "yellow"
        assert engine.status == GameStatus.NOT_STARTED

    def test_rejected_start_keeps_colors(self, engine, play):
        """A color given for player 1 is not applied when player 2 is rejected."""
        play(engine, [3])
        original = engine.player1
        with pytest.raises(ValueError):
            engine.start("blue", PlayerInfo(1, "green"))
        assert engine.player1 is original
        assert engine.player1.color == "red"
        assert engine.player2.color == "yellow"
        assert engine.moves_made == [3]

    def test_rejected_resize_keeps_colors(self, engine):
        with pytest.raises(InvalidDimensions):
            engine.start("blue", "green", height=2)
        assert (engine.player1.color, engine.player2.color) == ("red", "yellow")

    def test_player_number_validation(self):
        with pytest.raises(ValueError):
            PlayerInfo(3, "purple")

    def test_start_invalid_dimensions_leaves_engine_unchanged(self, engine, play):
        play(engine, [3, 4])
        with pytest.raises(InvalidDimensions):
            engine.start(height=3, width=7)
        assert engine.status == GameStatus.IN_PROGRESS
        assert engine.moves_made == [3, 4]
        assert engine.board.cell_at(5, 3) == Player.ONE

    def test_invalid_config(self):
        with pytest.raises(InvalidDimensions):
            GameEngine(GameConfig(height=6, width=2))

    def test_reset_game(self, engine, play):
        engine.start(height=5, width=5)
        play(engine, VERTICAL_WIN)
        assert engine.status == GameStatus.WON

        engine.reset_game()
        assert engine.status == GameStatus.IN_PROGRESS
        assert engine.winner is None
        assert engine.current_player is engine.player1
        assert engine.moves_made == []
        assert engine.last_move is None
        assert (engine.board.height, engine.board.width) == (5, 5)
        assert engine.board.column_height(0) == 0

    def test_reset_game_starts_a_new_engine(self):
        engine = GameEngine()
        engine.reset_game()
        assert engine.status == GameStatus.IN_PROGRESS

    def test_colors_survive_reset(self, engine):
        engine.update_colors("pink", None)
        engine.reset_game()
        assert engine.player1.color == "pink"
        assert engine.player2.color == "yellow"


class TestDropPiece:
    """Test the central move operation."""

    def test_placed_result(self, engine):
        result = engine.drop_piece(3)
        assert result.outcome == MoveOutcome.PLACED
        assert (result.row, result.column) == (5, 3)
        assert result.player is engine.player1
        assert result.next_player is engine.player2
        assert result.ok and not result.is_terminal
        assert engine.board.cell_at(5, 3) == Player.ONE
        assert engine.last_move == (5, 3)

    def test_players_alternate(self, engine):
        expected = [engine.player1, engine.player2] * 3
        for i, column in enumerate([0, 1, 2, 3, 4, 5]):
            assert engine.current_player is expected[i]
            result = engine.drop_piece(column)
            assert result.player is expected[i]
            assert engine.current_player is not expected[i]

    def test_numpy_column(self, engine):
        result = engine.drop_piece(np.int64(3))
        assert result.outcome == MoveOutcome.PLACED
        assert engine.moves_made == [3]
        assert type(engine.moves_made[0]) is int
        assert type(result.column) is int

    def test_stacking(self, engine, play):
        play(engine, [2, 2, 2])
        assert engine.board.cell_at(5, 2) == Player.ONE
        assert engine.board.cell_at(4, 2) == Player.TWO
        assert engine.board.cell_at(3, 2) == Player.ONE

    def test_column_out_of_range(self, engine, play):
        play(engine, [0, 1])
        before = engine.board.get_state()
        result = engine.drop_piece(7)
        assert result.outcome == MoveOutcome.INVALID
        assert result.reason == InvalidReason.COLUMN_OUT_OF_RANGE
        assert isinstance(result.error, ColumnOutOfRange)
        assert (engine.board.grid == before).all()
        assert engine.current_player is engine.player1
        assert engine.moves_made == [0, 1]

    def test_negative_column(self, engine):
        result = engine.drop_piece(-1)
        assert result.reason == InvalidReason.COLUMN_OUT_OF_RANGE
        assert engine.board.column_height(6) == 0

    def test_column_full(self, engine, play):
        play(engine, [0] * 6)
        before = engine.board.get_state()
        current = engine.current_player
        result = engine.drop_piece(0)
        assert result.outcome == MoveOutcome.INVALID
        assert result.reason == InvalidReason.COLUMN_FULL
        assert isinstance(result.error, ColumnFull)
        assert (engine.board.grid == before).all()
        assert engine.current_player is current
        assert 0 not in engine.get_valid_moves()

    def test_error_messages(self, engine, play):
        assert "out of range" in engine.drop_piece(9).describe()
        play(engine, [0] * 6)
        assert "full" in engine.drop_piece(0).describe()


class TestOutcomes:
    """Test win and tie detection through the engine."""

    def test_vertical_win(self, any_scan_engine, play):
        results = play(any_scan_engine, VERTICAL_WIN)
        assert all(r.outcome == MoveOutcome.PLACED for r in results[:-1])
        assert results[-1].outcome == MoveOutcome.WON
        assert results[-1].player is any_scan_engine.player1
        assert any_scan_engine.status == GameStatus.WON
        assert any_scan_engine.get_winner() is any_scan_engine.player1
        assert sorted(results[-1].winning_line) == [(2, 0), (3, 0), (4, 0), (5, 0)]

    def test_horizontal_win(self, any_scan_engine, play):
        result = play(any_scan_engine, HORIZONTAL_WIN)[-1]
        assert result.outcome == MoveOutcome.WON
        assert sorted(result.winning_line) == [(5, 0), (5, 1), (5, 2), (5, 3)]

    def test_diagonal_down_left_win(self, any_scan_engine, play):
        result = play(any_scan_engine, DIAGONAL_DOWN_LEFT_WIN)[-1]
        assert result.outcome == MoveOutcome.WON
        assert result.player is any_scan_engine.player1
        assert sorted(result.winning_line) == [(2, 3), (3, 2), (4, 1), (5, 0)]

    def test_diagonal_down_right_win(self, any_scan_engine, play):
        result = play(any_scan_engine, DIAGONAL_DOWN_RIGHT_WIN)[-1]
        assert result.outcome == MoveOutcome.WON
        assert sorted(result.winning_line) == [(2, 3), (3, 4), (4, 5), (5, 6)]

    def test_second_player_wins(self, engine, play):
        result = play(engine, [6, 0, 1, 0, 1, 0, 1, 0])[-1]
        assert result.outcome == MoveOutcome.WON
        assert result.player is engine.player2
        assert engine.winner is engine.player2

    def test_tie(self, any_scan_engine, play, tie_sequence):
        results = play(any_scan_engine, tie_sequence)
        assert len(results) == 42
        assert all(r.outcome == MoveOutcome.PLACED for r in results[:-1])
        assert results[-1].outcome == MoveOutcome.TIED
        assert results[-1].describe() == "Tie!"
        assert any_scan_engine.status == GameStatus.TIED
        assert any_scan_engine.get_winner() is None
        assert any_scan_engine.board.is_full()

    def test_win_on_last_cell_is_a_win(self, play):
        """Filling the board with a winning move is a win, not a tie."""
        engine = GameEngine(GameConfig(height=4, width=4))
        engine.start()
        # Player 2 completes the top row with the sixteenth piece
        results = play(engine, [3, 2, 3, 3, 1, 3, 1, 1, 2, 1, 2, 2, 0, 0, 0, 0])
        assert all(r.outcome == MoveOutcome.PLACED for r in results[:-1])
        assert engine.board.is_full()
        assert results[-1].outcome == MoveOutcome.WON
        assert results[-1].player is engine.player2
        assert sorted(results[-1].winning_line) == [(0, 0), (0, 1), (0, 2), (0, 3)]

    def test_full_scan_finds_win_away_from_last_piece(self):
        """The default strategy rescans the whole board for the mover's pieces."""
        engine = GameEngine()
        engine.start()
        engine.board.grid[5, 0:4] = Player.ONE.value
        result = engine.drop_piece(6)
        assert result.outcome == MoveOutcome.WON
        assert sorted(result.winning_line) == [(5, 0), (5, 1), (5, 2), (5, 3)]

    def test_anchored_scan_only_checks_last_piece(self):
        engine = GameEngine(GameConfig(win_scan=WIN_SCAN_ANCHORED))
        engine.start()
        engine.board.grid[5, 0:4] = Player.ONE.value
        assert engine.drop_piece(6).outcome == MoveOutcome.PLACED


class TestTerminalStates:
    """Once a game is over nothing changes until it is restarted."""

    def test_no_moves_after_win(self, engine, play):
        play(engine, VERTICAL_WIN)
        before = engine.board.get_state()
        for column in range(-1, 8):
            result = engine.drop_piece(column)
            assert result.outcome == MoveOutcome.INVALID
            assert result.reason == InvalidReason.GAME_NOT_ACTIVE
        assert (engine.board.grid == before).all()
        assert engine.status == GameStatus.WON
        assert engine.get_valid_moves() == []

    def test_no_moves_after_tie(self, engine, play, tie_sequence):
        play(engine, tie_sequence)
        result = engine.drop_piece(0)
        assert result.reason == InvalidReason.GAME_NOT_ACTIVE
        assert engine.status == GameStatus.TIED

    def test_winning_line_accessor(self, engine, play):
        assert engine.winning_line() == []
        play(engine, HORIZONTAL_WIN)
        assert engine.winning_line() == [(5, 0), (5, 1), (5, 2), (5, 3)]

    def test_render_status_line(self, engine, play):
        assert engine.render().endswith("Player 1 (red, X) to move")
        play(engine, VERTICAL_WIN)
        assert engine.render().endswith("Player 1 (red) won!")


class TestMoveResultErrors:
    """Test converting rejected moves back into exceptions."""

    def test_raise_for_error_ok(self, engine):
        result = engine.drop_piece(0)
        assert result.raise_for_error() is result

    def test_raise_for_error_column_full(self, engine, play):
        play(engine, [0] * 6)
        with pytest.raises(ColumnFull):
            engine.drop_piece(0).raise_for_error()

    def test_raise_for_error_not_active(self):
        with pytest.raises(GameNotActive):
            GameEngine().drop_piece(0).raise_for_error()

    def test_errors_share_base_class(self, engine):
        with pytest.raises(InvalidMove):
            engine.drop_piece(99).raise_for_error()

    def test_results_compare_by_value(self):
        a = MoveResult(MoveOutcome.TIED, column=1, row=0)
        b = MoveResult(MoveOutcome.TIED, column=1, row=0)
        assert a == b


class TestSerialization:
    """Test engine snapshots."""

    def test_round_trip_in_progress(self, engine, play):
        engine.update_colors("navy", "gold")
        play(engine, [3, 3, 4])
        restored = GameEngine.from_dict(engine.to_dict())
        assert restored.status == GameStatus.IN_PROGRESS
        assert restored.current_player is restored.player2
        assert restored.player1.color == "navy"
        assert restored.board.to_list() == engine.board.to_list()
        assert restored.moves_made == [3, 3, 4]
        assert restored.drop_piece(4).outcome == MoveOutcome.PLACED

    def test_round_trip_won(self, engine, play):
        play(engine, VERTICAL_WIN)
        restored = GameEngine.from_dict(engine.to_dict())
        assert restored.status == GameStatus.WON
        assert restored.winner is restored.player1
        assert restored.drop_piece(3).reason == InvalidReason.GAME_NOT_ACTIVE

    def test_snapshot_fields(self, engine):
        data = engine.to_dict()
        assert data["height"] == 6 and data["width"] == 7
        assert data["current_player"] == 1
        assert data["status"] == "IN_PROGRESS"
        assert data["winner"] is None
        assert len(data["grid"]) == 6 and len(data["grid"][0]) == 7

    def test_size_mismatch(self, engine):
        data = engine.to_dict()
        data["width"] = 8
        with pytest.raises(ValueError):
            GameEngine.from_dict(data)

    def test_won_without_winner(self, engine):
        data = engine.to_dict()
        data["status"] = "WON"
        with pytest.raises(ValueError):
            GameEngine.from_dict(data)

    def test_unknown_status(self, engine):
        data = engine.to_dict()
        data["status"] = "PAUSED"
        with pytest.raises(KeyError):
            GameEngine.from_dict(data)

    def test_bad_current_player(self, engine):
        data = engine.to_dict()
        data["current_player"] = 3
        with pytest.raises(ValueError):
            GameEngine.from_dict(data)

    def test_round_trip_tie(self, engine, play, tie_sequence):
        play(engine, tie_sequence)
        restored = GameEngine.from_dict(engine.to_dict())
        assert restored.status == GameStatus.TIED
        assert restored.board.is_full()

    def test_round_trip_not_started(self):
        restored = GameEngine.from_dict(GameEngine().to_dict())
        assert restored.status == GameStatus.NOT_STARTED

    def test_floating_piece(self, engine, play):
        play(engine, [3, 3])
        data = engine.to_dict()
        data["grid"][5][3] = 0
        data["grid"][5][4] = 2
        data["moves_made"] = [3, 4]
        with pytest.raises(ValueError, match="above an empty cell"):
            GameEngine.from_dict(data)

    def test_impossible_piece_counts(self, engine):
        data = engine.to_dict()
        data["grid"][5][0:3] = [2, 2, 2]
        data["moves_made"] = [0, 1, 2]
        with pytest.raises(ValueError, match="Piece counts"):
            GameEngine.from_dict(data)

    def test_wrong_player_to_move(self, engine, play):
        play(engine, [3, 4])
        data = engine.to_dict()
        data["current_player"] = 2
        with pytest.raises(ValueError, match="twice in a row"):
            GameEngine.from_dict(data)

    def test_in_progress_with_win_on_board(self, engine, play):
        play(engine, VERTICAL_WIN)
        data = engine.to_dict()
        data["status"] = "IN_PROGRESS"
        data["winner"] = None
        data["current_player"] = 2
        with pytest.raises(ValueError):
            GameEngine.from_dict(data)

    def test_won_without_winning_run(self, engine, play):
        play(engine, [0, 1, 0])
        data = engine.to_dict()
        data["status"] = "WON"
        data["winner"] = 1
        data["current_player"] = 1
        with pytest.raises(ValueError, match="does not show a win"):
            GameEngine.from_dict(data)

    def test_won_by_wrong_player(self, engine, play):
        play(engine, VERTICAL_WIN)
        data = engine.to_dict()
        data["winner"] = 2
        with pytest.raises(ValueError):
            GameEngine.from_dict(data)

    def test_tied_with_empty_cells(self, engine, play):
        play(engine, [0, 1])
        data = engine.to_dict()
        data["status"] = "TIED"
        with pytest.raises(ValueError, match="full board"):
            GameEngine.from_dict(data)

    def test_not_started_with_pieces(self, engine, play):
        play(engine, [0])
        data = engine.to_dict()
        data["status"] = "NOT_STARTED"
        data["current_player"] = 1
        with pytest.raises(ValueError, match="empty board"):
            GameEngine.from_dict(data)

    def test_history_does_not_match_grid(self, engine, play):
        play(engine, [3, 4])
        data = engine.to_dict()
        data["moves_made"] = [3, 3]
        with pytest.raises(ValueError, match="Move history"):
            GameEngine.from_dict(data)

    def test_history_is_optional(self, engine, play):
        play(engine, [3, 4])
        data = engine.to_dict()
        del data["moves_made"]
        assert GameEngine.from_dict(data).moves_made == []
