"""
connect4_engine.interfaces - User interfaces for Connect Four

This package contains the presentation layer that renders the board, reads
column choices and reports results coming back from the engine.
"""

# Don't import anything here to avoid circular imports
__all__ = []
