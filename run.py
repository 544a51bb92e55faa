#!/usr/bin/env python3
"""
run.py - Main entry point for the Connect Four engine

Examples:

    # Two players at one terminal on the standard 6x7 board
    python run.py play

    # A bigger board, custom colors, saves go to data/games/evening.json
    python run.py play --height 7 --width 9 --color1 blue --color2 orange --save evening

    # Resume that game
    python run.py play --load evening

    # Analyse a position (row-major, top row first)
    python run.py test --height 4 --width 4 --position 1,0,0,0,2,1,0,0,2,2,1,0,2,1,2,1

    # Compare the full-board and anchored win scans
    python run.py benchmark --iterations 500 --seed 7
"""

import sys

from connect4_engine.interfaces.cli import main

if __name__ == "__main__":
    sys.exit(main())
