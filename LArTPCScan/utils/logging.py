"""Logging infrastructure for the angular scan driver.

All modules log through the ``lartpc_scan`` logger. Per-grid-point lines and
event totals go out at INFO; set ``LARTPC_SCAN_LOG_LEVEL`` (e.g. ``DEBUG`` or
``WARNING``) to change what reaches the console without touching the
configuration file.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional


DEFAULT_LOGGER_NAME = 'lartpc_scan'
LOG_LEVEL_ENV_VAR = 'LARTPC_SCAN_LOG_LEVEL'
CONSOLE_FORMAT = '%(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
BANNER_WIDTH = 60


def console_level_from_env(default: int = logging.INFO) -> int:
    """Console level named by ``LARTPC_SCAN_LOG_LEVEL``, or ``default``.

    Unknown level names are ignored.
    """
    name = os.environ.get(LOG_LEVEL_ENV_VAR, '').strip().upper()
    level = logging.getLevelName(name) if name else None
    return level if isinstance(level, int) else default


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    console_level: Optional[int] = None,
    file_level: int = logging.DEBUG
) -> logging.Logger:
    """Set up logger with console and optional file output.

    Args:
        name: Logger name
        level: Overall logging level
        log_file: Optional path to log file
        console_level: Logging level for console output; defaults to
            ``LARTPC_SCAN_LOG_LEVEL`` or INFO
        file_level: Logging level for file output

    Returns:
        Configured logger instance
    """
    if console_level is None:
        console_level = console_level_from_env()

    logger = logging.getLogger(name)
    logger.setLevel(min(level, console_level))
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """Get existing logger instance."""
    return logging.getLogger(name)


def log_banner(logger: logging.Logger, title: str) -> None:
    """Log ``title`` between two rules, as used around a full scan run."""
    logger.info("=" * BANNER_WIDTH)
    logger.info(title)
    logger.info("=" * BANNER_WIDTH)
