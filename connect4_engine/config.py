"""
config.py - Game configuration for the Connect Four engine

The engine consumes board dimensions and per-player display colors; it never
produces configuration. Colors are pass-through data for the presentation layer.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict

from connect4_engine.errors import InvalidDimensions
from connect4_engine.utils import (DEFAULT_ROWS, DEFAULT_COLS, MIN_DIMENSION,
                                   DEFAULT_PLAYER1_COLOR, DEFAULT_PLAYER2_COLOR,
                                   WIN_SCAN_FULL, WIN_SCAN_STRATEGIES)


def validate_dimensions(height, width) -> None:
    """Raise InvalidDimensions unless both values are integers >= MIN_DIMENSION."""
    for value in (height, width):
        # bool is an int subclass but never a sensible board size
        if isinstance(value, bool) or not isinstance(value, int) or value < MIN_DIMENSION:
            raise InvalidDimensions(height, width, MIN_DIMENSION)


@dataclass
class GameConfig:
    height: int = DEFAULT_ROWS
    width: int = DEFAULT_COLS
    player1_color: str = DEFAULT_PLAYER1_COLOR
    player2_color: str = DEFAULT_PLAYER2_COLOR
    win_scan: str = WIN_SCAN_FULL

    def validate(self) -> "GameConfig":
        validate_dimensions(self.height, self.width)
        if self.win_scan not in WIN_SCAN_STRATEGIES:
            raise ValueError(
                f"Unknown win scan strategy '{self.win_scan}' "
                f"(expected one of {', '.join(WIN_SCAN_STRATEGIES)})"
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameConfig":
        known = {key: data[key] for key in cls.__dataclass_fields__ if key in data}
        return cls(**known).validate()

    @classmethod
    def from_args(cls, args) -> "GameConfig":
        """Build a config from an argparse namespace, keeping defaults for missing options."""
        defaults = cls()

        def option(name, default):
            value = getattr(args, name, None)
            return default if value is None else value

        return cls(
            height=option("height", defaults.height),
            width=option("width", defaults.width),
            player1_color=option("color1", defaults.player1_color),
            player2_color=option("color2", defaults.player2_color),
            win_scan=option("win_scan", defaults.win_scan),
        ).validate()
