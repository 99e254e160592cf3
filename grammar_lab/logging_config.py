import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
DEFAULT_LEVEL = "WARNING"


def setup_logger(name: Optional[str] = None, level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Sets up a logger from ``level`` or the LOG_LEVEL environment variable. Falls back to WARNING.
    """
    level_name = (level or os.getenv("LOG_LEVEL", DEFAULT_LEVEL)).upper()
    log_level = getattr(logging, level_name, None)
    if not isinstance(log_level, int):
        log_level = logging.WARNING

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    logger.handlers = []  # Clear existing handlers
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)
    return logger
