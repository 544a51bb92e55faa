"""
connect4_engine.game - Core game mechanics for Connect Four

This package contains the board representation and the game engine that
drives turns, win/tie detection and the game status.
"""

from connect4_engine.game.board import Board
from connect4_engine.game.rules import GameEngine, MoveResult, PlayerInfo

__all__ = ['Board', 'GameEngine', 'MoveResult', 'PlayerInfo']
