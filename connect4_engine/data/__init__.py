"""
connect4_engine.data - Saved games for Connect Four

This package stores and restores game snapshots as JSON files.
"""

__all__ = []
