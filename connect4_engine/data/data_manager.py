"""
data_manager.py - Saved game storage for Connect Four

This module stores game snapshots (GameEngine.to_dict output) as JSON files.
Reads and writes go through a file lock and writes replace the target atomically,
so two processes sharing a save file never see a half-written game.
"""

import datetime
import json
import os
import shutil
from typing import Any, Dict, List, Optional

import filelock

from connect4_engine.debug import debug
from connect4_engine.errors import GameDataError, ConnectFourError
from connect4_engine.game.rules import GameEngine

# Define paths to data files
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
DATA_DIR = os.environ.get("CONNECT4_DATA_DIR", os.path.join(BASE_DIR, 'data'))
GAMES_DIR = os.path.join(DATA_DIR, 'games')

SAVE_FORMAT_VERSION = 1
LOCK_TIMEOUT = 10  # seconds


def safe_read_json(file_path: str, default: Any = None) -> Any:
    """
    Safely read a JSON file with file locking.

    Args:
        file_path: Path to JSON file
        default: Value returned when the file does not exist

    Returns:
        Parsed JSON data

    Raises:
        GameDataError: if the file cannot be read or is not valid JSON
    """
    if not os.path.exists(file_path):
        return default

    lock_path = f"{file_path}.lock"
    try:
        with filelock.FileLock(lock_path, timeout=LOCK_TIMEOUT):
            with open(file_path, 'r', encoding='utf-8') as f:
                return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        debug.error(f"Error decoding JSON from {file_path}: {e}", "data")
        raise GameDataError(f"{file_path} is not valid JSON: {e}") from e
    except (OSError, filelock.Timeout) as e:
        debug.error(f"Error reading {file_path}: {e}", "data")
        raise GameDataError(f"Cannot read {file_path}: {e}") from e


def safe_write_json(file_path: str, data: Any) -> bool:
    """
    Safely write data to a JSON file with atomic updates.

    Args:
        file_path: Path to JSON file
        data: Data to write

    Returns:
        True if successful, False otherwise
    """
    directory = os.path.dirname(os.path.abspath(file_path))
    lock_path = f"{file_path}.lock"
    temp_file = f"{file_path}.tmp"
    try:
        os.makedirs(directory, exist_ok=True)
        with filelock.FileLock(lock_path, timeout=LOCK_TIMEOUT):
            # Write to a temporary file first
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)

            # Replace the original file
            shutil.move(temp_file, file_path)
            return True
    except (OSError, TypeError, ValueError, filelock.Timeout) as e:
        debug.error(f"Error writing to {file_path}: {e}", "data")
        if os.path.isfile(temp_file):
            os.remove(temp_file)
        return False


def game_path(name: str, games_dir: Optional[str] = None) -> str:
    """Path of the save file called `name` in the games directory."""
    if not name.endswith('.json'):
        name = f"{name}.json"
    return os.path.join(games_dir or GAMES_DIR, name)


def save_game(engine: GameEngine, path: str) -> bool:
    """
    Save a game snapshot.

    Args:
        engine: The game to save
        path: Target file

    Returns:
        True if successful, False otherwise
    """
    record = {
        "version": SAVE_FORMAT_VERSION,
        "saved_at": datetime.datetime.now().isoformat(),
        "game": engine.to_dict(),
    }

    if safe_write_json(path, record):
        debug.info(f"Saved {engine.status.name} game to {path}", "data")
        return True

    debug.error(f"Failed to save game to {path}", "data")
    return False


def load_game(path: str) -> GameEngine:
    """
    Load a game saved with save_game.

    Args:
        path: Save file to read

    Returns:
        The restored GameEngine

    Raises:
        GameDataError: if the file is missing, unreadable or does not hold a valid game
    """
    record = safe_read_json(path)
    if record is None:
        raise GameDataError(f"No saved game at {path}")

    if not isinstance(record, dict) or "game" not in record:
        raise GameDataError(f"{path} does not contain a saved game")

    version = record.get("version")
    if version != SAVE_FORMAT_VERSION:
        raise GameDataError(f"Unsupported save format version {version} in {path}")

    try:
        engine = GameEngine.from_dict(record["game"])
    except (KeyError, TypeError, ValueError, ConnectFourError) as e:
        raise GameDataError(f"Invalid saved game in {path}: {e}") from e

    debug.info(f"Loaded {engine.status.name} game from {path}", "data")
    return engine


def list_saved_games(games_dir: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    List the save files in a directory.

    Args:
        games_dir: Directory to scan, or None for the default games directory

    Returns:
        One entry per readable save file, sorted by name
    """
    games_dir = games_dir or GAMES_DIR
    if not os.path.isdir(games_dir):
        return []

    games = []
    for file_name in sorted(os.listdir(games_dir)):
        if not file_name.endswith('.json'):
            continue

        path = os.path.join(games_dir, file_name)
        try:
            record = safe_read_json(path, default={})
        except GameDataError:
            debug.warning(f"Skipping unreadable save file {path}", "data")
            continue

        game = record.get("game", {}) if isinstance(record, dict) else {}
        games.append({
            "name": file_name[:-len('.json')],
            "path": path,
            "saved_at": record.get("saved_at") if isinstance(record, dict) else None,
            "status": game.get("status"),
            "moves": len(game.get("moves_made", [])),
        })

    return games
