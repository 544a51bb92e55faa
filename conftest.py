import pytest

from connect4_engine.config import GameConfig
from connect4_engine.debug import debug, DebugLevel
from connect4_engine.game.rules import GameEngine
from connect4_engine.utils import WIN_SCAN_FULL, WIN_SCAN_ANCHORED

# Column order that fills a 6x7 board without anyone connecting four.
# Final board, bottom row first: XXOOXXO / OOXXOOX / XXOOXXO / ...
TIE_SEQUENCE = ([0] + [2] * 6 + [0] * 5 +
                [1] + [3] * 6 + [1] * 5 +
                [4] + [6] * 6 + [4] * 5 +
                [5] * 6)


def play(engine, columns):
    """Drop pieces into `columns` in order and return the list of results."""
    return [engine.drop_piece(column) for column in columns]


@pytest.fixture
def engine():
    game = GameEngine()
    game.start()
    return game


@pytest.fixture(params=[WIN_SCAN_FULL, WIN_SCAN_ANCHORED])
def any_scan_engine(request):
    game = GameEngine(GameConfig(win_scan=request.param))
    game.start()
    return game


@pytest.fixture
def restore_debug():
    yield debug
    debug.configure(level=DebugLevel.WARNING, enabled=True, components=[], log_file="")


@pytest.fixture(name="play")
def play_fixture():
    return play


@pytest.fixture
def tie_sequence():
    return list(TIE_SEQUENCE)
