"""
Central logging configuration for taskcal.

Installs a single colorized console handler on the root logger and sets the
level for taskcal modules. Debug output can be forced through the environment
for troubleshooting without changing code.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from colorlog import ColoredFormatter

LOG_FORMAT = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}

_TRUTHY = ("1", "true", "yes", "on")


def resolve_level(level_name: Optional[str], debug_mode: bool = False) -> int:
    """Work out the effective level.

    Precedence: TASKCAL_DEBUG, then TASKCAL_LOG_LEVEL, then ``debug_mode``,
    then ``level_name`` (INFO when unset or unknown).
    """
    if os.getenv("TASKCAL_DEBUG", "").strip().lower() in _TRUTHY:
        return logging.DEBUG

    env_level = os.getenv("TASKCAL_LOG_LEVEL", "").strip().upper()
    if env_level in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        return getattr(logging, env_level)

    if debug_mode:
        return logging.DEBUG

    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), None)
        if isinstance(level, int):
            return level
    return logging.INFO


def configure_logging(level_name: Optional[str] = None, debug_mode: bool = False) -> int:
    """Configure console logging for taskcal.

    Only adds a handler when the root logger has none, so repeated calls
    (and host applications with their own handlers) do not duplicate output.

    Args:
        level_name: Level name from configuration (e.g. "INFO")
        debug_mode: Force DEBUG unless the environment says otherwise

    Returns:
        The effective logging level
    """
    level = resolve_level(level_name, debug_mode)

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt="%H:%M:%S", log_colors=LOG_COLORS))
        root.addHandler(handler)
    root.setLevel(level)

    logging.getLogger("taskcal").setLevel(level)
    logging.getLogger(__name__).debug("Logging initialized at level %s", logging.getLevelName(level))
    return level
