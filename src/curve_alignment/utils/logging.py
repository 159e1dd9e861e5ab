"""
Logging Utilities

Every module obtains its logger through ``setup_logger(__name__)`` so that
console output shares one format. Scripts call ``configure_package_logging``
once the configuration is known to raise or lower the verbosity of the loggers
that were already created at import time.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER_PREFIX = "curve_alignment"

_CONSOLE_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
_FILE_FORMAT = '%(asctime)s | %(levelname)s | %(processName)s[%(process)d] | %(name)s | %(message)s'
_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _file_handler(log_file: str, level: int) -> logging.FileHandler:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_file)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT))
    return handler


def setup_logger(name: str,
                 level: int = logging.INFO,
                 log_file: Optional[str] = None) -> logging.Logger:
    """
    Set up a logger with consistent formatting.

    Args:
        name: Logger name (usually __name__)
        level: Logging level (default: logging.INFO)
        log_file: Optional log file path. If provided, logs will be written to this file

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid adding multiple handlers
    if logger.handlers:
        return logger

    logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        logger.addHandler(_file_handler(log_file, level))

    return logger


def configure_package_logging(level: int | str = logging.INFO,
                              log_file: Optional[str] = None) -> None:
    """
    Apply a level (and optional log file) to every curve_alignment logger.

    Module loggers are created at import time with the default INFO level;
    this walks the logger registry and updates those loggers and their handlers.

    Args:
        level: Numeric level or level name such as "DEBUG"
        log_file: Optional file that receives a copy of all package log lines
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    names = [
        name for name in logging.root.manager.loggerDict
        if name == PACKAGE_LOGGER_PREFIX or name.startswith(PACKAGE_LOGGER_PREFIX + ".")
    ]
    for name in names:
        logger = logging.getLogger(name)
        if not logger.handlers:
            continue
        logger.setLevel(level)
        has_file = False
        for handler in logger.handlers:
            handler.setLevel(level)
            if isinstance(handler, logging.FileHandler):
                has_file = True
        if log_file and not has_file:
            logger.addHandler(_file_handler(log_file, level))
