"""Logging configuration for ledger-diff."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "ledger_diff"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    log_format: Optional[str] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Configure application logging.

    Console output goes through rich so diagnostics interleave cleanly with
    the progress display and result tables. Record rejections are logged at
    WARNING, so they stay visible at the default level.

    Args:
        level: Logging level for the console handler
        log_file: Optional path to a rotating log file (always DEBUG)
        log_format: Optional format string for the file handler
        console: Optional rich console to attach the handler to

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file else level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(log_format or DEFAULT_FORMAT))
        logger.addHandler(file_handler)

    return logger
