"""
Centralized logging configuration for the tilemap generator.

All project loggers ('model.*' and 'main_app') write to the console (WARNING+ by default) and, when a log directory
is given, to a rotating log file (DEBUG+ by default).

Usage:
    from logging_config import setup_logging
    setup_logging(log_dir)  # Call once at startup
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys

import constants


FILE_FORMAT = "%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)-25s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(levelname)-8s | %(name)-25s | %(message)s"


def setup_logging(
    log_dir: Path | str | None = None,
    log_level: int = constants.LOG_FILE_LEVEL_DEFAULT,
    console_level: int = constants.LOG_CONSOLE_LEVEL_DEFAULT,
) -> Path | None:
    """Configures the logging system of the project.

    May be called repeatedly; existing handlers are replaced.

    Args:
        log_dir: Directory that receives the log file. No log file is written if None.
        log_level: Level for file logging.
        console_level: Level for console output.

    Returns:
        The path of the log file, or None if only console logging was configured.
    """
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT))
    handlers: list[logging.Handler] = [console_handler]

    log_file = None
    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        log_file = log_path / constants.LOG_FILE_NAME

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=constants.LOG_MAX_BYTES,
            backupCount=constants.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
        handlers.append(file_handler)

    for logger_name in constants.LOGGER_NAMES:
        project_logger = logging.getLogger(logger_name)
        project_logger.setLevel(min(log_level, console_level))

        for handler in list(project_logger.handlers):
            project_logger.removeHandler(handler)
            handler.close()
        for handler in handlers:
            project_logger.addHandler(handler)

        # Don't propagate to the Python root logger to avoid duplicate output.
        project_logger.propagate = False

    if log_file is not None:
        logging.getLogger(constants.LOGGER_NAMES[0]).info(f"Logging initialized, log file: {log_file}")
    return log_file
