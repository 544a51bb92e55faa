"""
debug.py - Debug and logging functionality for the Connect Four engine

This module provides centralized debug and logging capabilities with configurable levels,
per-component filtering and simple performance timers. The engine itself never prints;
everything it has to say goes through the `debug` singleton defined here.
"""

import logging
import os
import sys
import time
from enum import Enum
from typing import List, Optional, Dict, Set

LOGGER_NAME = "connect4_engine"
ENV_LEVEL_VAR = "CONNECT4_DEBUG"


class DebugLevel(Enum):
    NONE = 0
    ERROR = 1
    WARNING = 2
    INFO = 3
    DEBUG = 4
    TRACE = 5


# Mapping to standard logging levels
LEVEL_MAP = {
    DebugLevel.NONE: logging.CRITICAL + 1,
    DebugLevel.ERROR: logging.ERROR,
    DebugLevel.WARNING: logging.WARNING,
    DebugLevel.INFO: logging.INFO,
    DebugLevel.DEBUG: logging.DEBUG,
    DebugLevel.TRACE: logging.DEBUG  # TRACE messages are emitted as DEBUG records
}

LEVEL_NAMES = {level.name.lower(): level for level in DebugLevel}


class DebugManager:
    """Manages debug and logging output for the Connect Four engine."""

    def __init__(self, level: DebugLevel = DebugLevel.WARNING):
        self._level = level
        self._enabled = True
        self._log_file: Optional[str] = None
        self._enabled_components: Set[str] = set()  # Empty set means all components
        self._logger = self._setup_logger()
        self._performance_markers: Dict[str, float] = {}

    def _setup_logger(self) -> logging.Logger:
        """Configure and return the package logger."""
        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(LEVEL_MAP[self._level])

        # Only attach the console handler once, even if several managers exist
        if not any(getattr(h, "_connect4_console", False) for h in logger.handlers):
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler._connect4_console = True
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%H:%M:%S'
            )
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        return logger

    @property
    def level(self) -> DebugLevel:
        return self._level

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def configure(self, level: DebugLevel = None,
                  enabled: bool = None,
                  log_file: str = None,
                  components: List[str] = None):
        """
        Configure the debug manager settings.

        Args:
            level: Debug level to set
            enabled: Whether debugging is enabled
            log_file: Path to log file ("" to stop logging to a file)
            components: List of components to enable debugging for (empty for all)
        """
        if level is not None:
            self._level = level
            self._logger.setLevel(LEVEL_MAP[level])

        if enabled is not None:
            self._enabled = enabled

        if log_file is not None:
            for handler in self._logger.handlers[:]:
                if isinstance(handler, logging.FileHandler):
                    self._logger.removeHandler(handler)
                    handler.close()

            self._log_file = log_file or None
            if self._log_file:
                file_handler = logging.FileHandler(self._log_file)
                formatter = logging.Formatter(
                    '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                    datefmt='%Y-%m-%d %H:%M:%S'
                )
                file_handler.setFormatter(formatter)
                self._logger.addHandler(file_handler)

        if components is not None:
            self._enabled_components = set(components)

    def _should_log(self, level: DebugLevel, component: str = None) -> bool:
        """Determine if a message should be logged based on settings."""
        if not self._enabled or DebugLevel.NONE in (level, self._level):
            return False

        if level.value > self._level.value:
            return False

        if component and self._enabled_components and component not in self._enabled_components:
            return False

        return True

    def log(self, level: DebugLevel, message: str, component: str = None, _depth: int = 1):
        """
        Log a message at the specified level.

        Records carry the component as `record.component` and point at the
        code that called into the manager, not at this module.

        Args:
            level: Debug level for the message
            message: The message to log
            component: Optional component name for filtering
        """
        if not self._should_log(level, component):
            return

        if component:
            message = f"[{component}] {message}"
        if level == DebugLevel.TRACE:
            message = f"TRACE: {message}"

        self._logger.log(LEVEL_MAP[level], message,
                         extra={"component": component}, stacklevel=_depth + 1)

    def error(self, message: str, component: str = None):
        self.log(DebugLevel.ERROR, message, component, _depth=2)

    def warning(self, message: str, component: str = None):
        self.log(DebugLevel.WARNING, message, component, _depth=2)

    def info(self, message: str, component: str = None):
        self.log(DebugLevel.INFO, message, component, _depth=2)

    def debug(self, message: str, component: str = None):
        self.log(DebugLevel.DEBUG, message, component, _depth=2)

    def trace(self, message: str, component: str = None):
        """DEBUG-level record prefixed with TRACE, shown only at DebugLevel.TRACE."""
        self.log(DebugLevel.TRACE, message, component, _depth=2)

    def start_timer(self, marker_name: str):
        """Start a timer for performance tracking."""
        self._performance_markers[marker_name] = time.perf_counter()

    def end_timer(self, marker_name: str, component: str = None) -> Optional[float]:
        """
        End a timer and log the elapsed time.

        Args:
            marker_name: Name of the marker to end
            component: Optional component name for the log entry

        Returns:
            Elapsed time in seconds, or None if marker not found
        """
        if marker_name not in self._performance_markers:
            self.warning(f"Timer '{marker_name}' not started", "debug")
            return None

        elapsed = time.perf_counter() - self._performance_markers.pop(marker_name)
        self.trace(f"Performance [{marker_name}]: {elapsed:.6f} seconds", component)
        return elapsed

    def set_from_string(self, level_str: str) -> bool:
        """
        Set debug level from a string (for command line arguments).

        Returns:
            True if the level was recognised and applied
        """
        level = LEVEL_NAMES.get(level_str.strip().lower())
        if level is None:
            self.warning(f"Unknown debug level: {level_str}")
            return False

        self.configure(level=level)
        self.info(f"Debug level set to {level.name}")
        return True


def _level_from_environment() -> DebugLevel:
    value = os.environ.get(ENV_LEVEL_VAR, "")
    return LEVEL_NAMES.get(value.strip().lower(), DebugLevel.WARNING)


# Create a singleton instance
debug = DebugManager(level=_level_from_environment())
