"""Centralized logging configuration for chordcraft.

Library modules only ever call get_logger(__name__). Nothing is configured
on import. Applications (the CLI, or a caller embedding the library) call
setup_logging() once.
"""

import logging
import sys
from typing import Dict, Optional

# Log levels for different modules
MODULE_LOG_LEVELS = {
    "chordcraft": logging.WARNING,
    "chordcraft.engine.generator": logging.WARNING,  # DEBUG shows search statistics
    "chordcraft.engine.analyzer": logging.WARNING,
    "chordcraft.engine.progression": logging.WARNING,  # DEBUG shows relaxed transitions
    "chordcraft.app.api": logging.WARNING,
    "chordcraft.app.cli": logging.WARNING,
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Shared console handler
_console_handler: Optional[logging.Handler] = None

# Cache for loggers to avoid duplicate setup
_logger_cache: Dict[str, logging.Logger] = {}


def setup_logging(level: Optional[str] = None) -> None:
    """Set up logging for all chordcraft modules.

    Args:
        level: If provided, override every chordcraft module level with this
            level (e.g. "DEBUG").

    Raises:
        ValueError: If level is not a logging level name
    """
    global _console_handler

    if _console_handler is None:
        _console_handler = logging.StreamHandler(sys.stderr)
        _console_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    log_levels = MODULE_LOG_LEVELS.copy()
    if level:
        numeric_level = logging.getLevelName(level.upper())
        if not isinstance(numeric_level, int):
            raise ValueError(f"Invalid log level: {level}")
        log_levels = {name: numeric_level for name in log_levels}

    for module_name, module_level in log_levels.items():
        logger = logging.getLogger(module_name)
        logger.setLevel(module_level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.addHandler(_console_handler)
        logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a cached logger for a chordcraft module.

    Modules not listed in MODULE_LOG_LEVELS inherit from the "chordcraft"
    logger.
    """
    if name not in _logger_cache:
        logger = logging.getLogger(name)
        if name in MODULE_LOG_LEVELS and logger.level == logging.NOTSET:
            logger.setLevel(MODULE_LOG_LEVELS[name])
        _logger_cache[name] = logger
    return _logger_cache[name]
