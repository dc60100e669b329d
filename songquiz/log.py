"""Logger wiring for the songquiz commands."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import coloredlogs


def setup_logger(
    name: str = "songquiz",
    log_file: Path | None = None,
    level: str = "INFO",
    max_size_mb: int = 5,
    backup_count: int = 3,
) -> logging.Logger:
    """Attach a coloured stderr handler, plus a rotating file when log_file is given."""
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    # stderr keeps log lines out of the quiz prompts on stdout.
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(
        coloredlogs.ColoredFormatter(fmt="%(asctime)s %(levelname)s %(message)s", datefmt="%H:%M:%S")
    )
    logger.addHandler(console_handler)

    return logger
