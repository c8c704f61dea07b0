"""Process-wide logging configuration for the API server and CLI entry points."""

import logging
from typing import Optional

from studytimer.config import settings


def setup_logging(debug: Optional[bool] = None) -> None:
    """Configure logging based on the debug flag (defaults to settings.DEBUG)."""
    debug = settings.DEBUG if debug is None else debug
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    # Reduce noise from the database driver (unless debug)
    if not debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        logging.getLogger("aiosqlite").setLevel(logging.WARNING)
