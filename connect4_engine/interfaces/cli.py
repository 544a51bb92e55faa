"""
cli.py - Command-line interface for the Connect Four engine

This module is the terminal presentation layer: it renders the board, turns typed
column numbers into drop_piece calls and reports the results the engine returns.
It also offers position analysis and a small benchmark of the two win-scan strategies.
"""

import argparse
import random
import sys
from dataclasses import replace
from typing import Callable, List, Optional, Union

from connect4_engine.config import GameConfig
from connect4_engine.data.data_manager import (save_game, load_game, game_path,
                                               list_saved_games)
from connect4_engine.debug import debug, DebugLevel, LEVEL_NAMES
from connect4_engine.errors import ConnectFourError, GameDataError
from connect4_engine.game.board import Board
from connect4_engine.game.rules import GameEngine
from connect4_engine.utils import (Player, GameStatus, MoveOutcome, WIN_SCAN_STRATEGIES,
                                   WIN_SCAN_FULL, WIN_SCAN_ANCHORED, find_winning_run)

QUIT = 'q'
RESTART = 'r'
COLORS = 'c'
SAVE = 's'
COMMANDS = (QUIT, RESTART, COLORS, SAVE)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Connect Four CLI')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug mode (equivalent to --debug_level debug)')
    parser.add_argument('--debug_level', choices=list(LEVEL_NAMES), default=None,
                        help='Set debug level: none (silent) ... trace (most verbose)')
    parser.add_argument('--log_file', type=str, default=None,
                        help='Also write log messages to this file')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    play_parser = subparsers.add_parser('play', help='Play a two-player game in the terminal')
    play_parser.add_argument('--height', type=int, default=None, help='Board rows (default: 6)')
    play_parser.add_argument('--width', type=int, default=None, help='Board columns (default: 7)')
    play_parser.add_argument('--color1', type=str, default=None, help='Display color of player 1')
    play_parser.add_argument('--color2', type=str, default=None, help='Display color of player 2')
    play_parser.add_argument('--win-scan', dest='win_scan', choices=WIN_SCAN_STRATEGIES,
                             default=None, help='Win detection strategy')
    play_parser.add_argument('--save', type=str, default=None,
                             help='Save file name or path used by the "s" command')
    play_parser.add_argument('--load', type=str, default=None,
                             help='Resume a saved game (file name or path)')

    test_parser = subparsers.add_parser('test', help='Analyse a board position')
    test_parser.add_argument('--position', type=str, required=True,
                             help='Comma-separated cell values (0, 1, 2), row-major, top row first')
    test_parser.add_argument('--height', type=int, default=None, help='Board rows (default: 6)')
    test_parser.add_argument('--width', type=int, default=None, help='Board columns (default: 7)')

    benchmark_parser = subparsers.add_parser('benchmark', help='Benchmark the win-scan strategies')
    benchmark_parser.add_argument('--iterations', type=int, default=200,
                                  help='Number of random games per strategy')
    benchmark_parser.add_argument('--seed', type=int, default=None, help='Random seed')
    benchmark_parser.add_argument('--height', type=int, default=None, help='Board rows (default: 6)')
    benchmark_parser.add_argument('--width', type=int, default=None, help='Board columns (default: 7)')

    subparsers.add_parser('saves', help='List saved games')

    return parser


def resolve_save_path(name: str) -> str:
    """Treat bare names as files in the games directory and anything else as a path."""
    if any(sep in name for sep in ('/', '\\')):
        return name
    return game_path(name)


class SimpleCLI:
    """Simple command-line interface for Connect Four."""

    def __init__(self, input_func: Callable[[str], str] = input):
        """Initialize the CLI."""
        self.input = input_func
        self.engine: Optional[GameEngine] = None
        self.args = None

    def parse_args(self, argv: Optional[List[str]] = None) -> None:
        """Parse command-line arguments and configure logging."""
        self.args = build_parser().parse_args(argv)

        if self.args.debug:
            debug.configure(level=DebugLevel.DEBUG)
        elif self.args.debug_level:
            debug.set_from_string(self.args.debug_level)

        if self.args.log_file:
            debug.configure(log_file=self.args.log_file)

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Run the CLI based on the parsed arguments. Returns the exit status."""
        if not self.args:
            self.parse_args(argv)

        try:
            if self.args.command == 'play':
                self.play_game()
            elif self.args.command == 'test':
                self.test_position()
            elif self.args.command == 'benchmark':
                self.benchmark()
            elif self.args.command == 'saves':
                self.list_saves()
            else:
                print("Please specify a command. Use --help for options.")
                return 1
        except ConnectFourError as e:
            debug.error(str(e), "cli")
            print(f"Error: {e}")
            return 1

        return 0

    def play_game(self) -> None:
        """Play a Connect Four game interactively."""
        if self.args.load:
            self.engine = load_game(resolve_save_path(self.args.load))
            print(f"Resumed game from {self.args.load}.")
        else:
            self.engine = GameEngine(GameConfig.from_args(self.args))
        if self.engine.status == GameStatus.NOT_STARTED:
            self.engine.start()

        width = self.engine.board.width
        print("Starting a new Connect Four game!")
        print(f"Enter column number (0-{width - 1}) to make a move.")
        print("Other commands: 'q' to quit, 'r' to restart, 'c' to change colors, 's' to save.")
        print(self.engine.render())

        while True:
            move = self.get_human_move()
            if move is None:
                continue
            if move == QUIT:
                print("Quitting game.")
                return
            if move == RESTART:
                self.engine.reset_game()
                print("Game restarted.")
                print(self.engine.render())
                continue
            if move == COLORS:
                self.change_colors()
                continue
            if move == SAVE:
                self.save()
                continue

            result = self.engine.drop_piece(move)
            if result.outcome == MoveOutcome.INVALID:
                print(result.describe())
                continue

            print(self.engine.render())
            if result.is_terminal:
                print("Game over! " + result.describe())
                print("Press 'r' to play again or 'q' to quit.")

    def get_human_move(self) -> Optional[Union[int, str]]:
        """
        Get a move from the current player.

        Returns:
            Column index, a command letter, or None if the input was not understood
        """
        if self.engine.status.is_active():
            prompt = f"{self.engine.current_player} move (q/r/c/s): "
        else:
            prompt = "Command (r/q/c/s): "

        try:
            user_input = self.input(prompt).strip().lower()
        except EOFError:
            return QUIT

        if user_input in COMMANDS:
            return user_input

        try:
            return int(user_input)
        except ValueError:
            print("Invalid input. Please enter a column number or a command.")
            return None

    def change_colors(self) -> None:
        color1 = self.input(f"Color for player 1 [{self.engine.player1.color}]: ").strip()
        color2 = self.input(f"Color for player 2 [{self.engine.player2.color}]: ").strip()
        self.engine.update_colors(color1 or None, color2 or None)
        print(f"Colors: player 1 {self.engine.player1.color}, "
              f"player 2 {self.engine.player2.color}")

    def save(self) -> None:
        path = resolve_save_path(self.args.save or 'autosave')
        if save_game(self.engine, path):
            print(f"Game saved to {path}")
        else:
            print(f"Could not save game to {path}")

    def list_saves(self) -> None:
        games = list_saved_games()
        if not games:
            print("No saved games.")
            return
        for game in games:
            print(f"{game['name']:<20} {game['status'] or '?':<12} "
                  f"{game['moves']:>3} moves  {game['saved_at'] or ''}")

    def parse_position(self) -> Board:
        """
        Build a board from the --position argument.

        Raises:
            GameDataError: if the position string is malformed
        """
        config = GameConfig.from_args(self.args)
        height, width = config.height, config.width
        try:
            values = [int(c) for c in self.args.position.split(',')]
        except ValueError as e:
            raise GameDataError(f"Error parsing position: {e}") from e

        if len(values) != height * width:
            raise GameDataError(f"Position string must have {height * width} values, "
                                f"got {len(values)}")

        rows = [values[r * width:(r + 1) * width] for r in range(height)]
        try:
            return Board.from_list(rows)
        except ValueError as e:
            raise GameDataError(f"Error parsing position: {e}") from e

    def test_position(self) -> None:
        """Analyse a specific board position."""
        board = self.parse_position()
        print("Loaded position:")
        print(board.render())

        print("\nTesting win conditions:")
        has_win = False
        for player in (Player.ONE, Player.TWO):
            line = find_winning_run(board.grid, player.value)
            if line:
                print(f"Win for player {player.value} ({player}) along {line}")
                has_win = True

        if not has_win:
            print("No win detected for any player")

        if board.is_full():
            print("Board is full")
        else:
            empty_count = int((board.grid == Player.EMPTY.value).sum())
            print(f"Empty spaces: {empty_count}")
            print(f"Valid moves: {board.valid_columns()}")

    def benchmark(self) -> None:
        """Benchmark random games under each win-scan strategy."""
        iterations = max(1, self.args.iterations)
        print(f"Running benchmark with {iterations} random games per strategy...")

        for strategy in (WIN_SCAN_FULL, WIN_SCAN_ANCHORED):
            rng = random.Random(self.args.seed)
            config = replace(GameConfig.from_args(self.args), win_scan=strategy)
            engine = GameEngine(config)
            total_moves = 0
            outcomes = {MoveOutcome.WON: 0, MoveOutcome.TIED: 0}

            debug.start_timer(f"benchmark_{strategy}")
            for _ in range(iterations):
                engine.start()
                while not engine.is_game_over():
                    result = engine.drop_piece(rng.choice(engine.get_valid_moves()))
                    total_moves += 1
                    if result.is_terminal:
                        outcomes[result.outcome] += 1
            elapsed = debug.end_timer(f"benchmark_{strategy}", "cli")

            print(f"{strategy:>9} scan: {total_moves} moves in {elapsed:.4f}s "
                  f"({elapsed / total_moves * 1000:.4f} ms per move), "
                  f"{outcomes[MoveOutcome.WON]} wins, {outcomes[MoveOutcome.TIED]} ties")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    cli = SimpleCLI()
    return cli.run(argv)


if __name__ == "__main__":
    sys.exit(main())
