"""
connect4_engine - Connect Four rules engine and turn-based state machine

This package provides the board representation, drop resolution, four-in-a-row
detection and the game state machine, plus a terminal interface and JSON save
files built on top of them.
"""

# Version number
__version__ = '1.0.0'
