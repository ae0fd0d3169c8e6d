"""
Logging setup for the realtime agents service.

Every module logs through the single application logger named by LOGGER_NAME.
configure_logging() attaches a stdout handler and a size-rotated file under logs/,
and stops records from reaching the root logger so uvicorn's own handlers do not
print them twice.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from app.config.constants import LOGGER_NAME

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
LOG_FILE = LOG_DIR / "realtime_agents.log"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the application logger with console and file handlers.

    Calling it again replaces the handlers rather than stacking them.

    Args:
        level: Level name overriding LOG_LEVEL (e.g. from a --log-level flag)

    Returns:
        logging.Logger: The configured application logger
    """
    # Create logger
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO))

    # Drop handlers from an earlier call
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    # Create formatter
    formatter = logging.Formatter(LOG_FORMAT)

    # Create console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Create rotating file handler if the log directory can be created
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            LOG_FILE, maxBytes=MAX_LOG_SIZE, backupCount=BACKUP_COUNT
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError as e:
        logger.warning(f"Could not set up file logging in {LOG_DIR}: {e}")

    # Prevent propagation to root logger
    logger.propagate = False

    logger.debug(f"Logging configured at level {logging.getLevelName(logger.level)}")
    return logger
