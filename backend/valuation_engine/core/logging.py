"""
logging.py — Engine-Wide Logging Configuration

Purpose:
- One log format for the engine and its command-line runner:
  timestamp | level | module | message
- Input defaults (unparseable amounts, unrated drivers, fallback multiples)
  log at DEBUG/INFO; integrity failures (malformed ratings, unreadable
  reference table) log at ERROR before raising.

Log records go to stderr so the runner's JSON output on stdout stays clean.
The engine never configures logging on import; the embedding process does.
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def resolve_level(level: Optional[str]) -> int:
    """Numeric level for a level name; unknown or empty names map to INFO."""
    name = (level or "").strip().upper()
    return getattr(logging, name) if name in LEVEL_NAMES else logging.INFO


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging once per process.

    Args:
        level: Level name; defaults to settings.LOG_LEVEL
    """
    if level is None:
        from valuation_engine.core.config import settings
        level = settings.LOG_LEVEL

    logging.basicConfig(level=resolve_level(level), format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger(__name__).info("Logging initialized with level %s", logging.getLevelName(resolve_level(level)))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
