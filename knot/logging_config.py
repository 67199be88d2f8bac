"""
Logging Configuration
Sets up the logger for the 'knot' namespace.
"""
import logging
import sys
from typing import Optional, Union

from .config import get_settings


def setup_logging(level: Union[int, str, None] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Logging level; defaults to the LOG_LEVEL setting.
        log_file: Optional path to also write logs to.
    """
    if level is None:
        level = get_settings().LOG_LEVEL

    logger = logging.getLogger("knot")
    logger.setLevel(level)

    # Avoid duplicate output when called more than once
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
