"""
Logging configuration for the library API.

Handlers are attached to the ``library_api`` logger rather than the
root logger, so the application's records are formatted the same way
whether it runs under uvicorn, pytest or a plain script, and other
libraries keep their own setup.  Every module obtains its logger
through ``logging.getLogger(__name__)`` and inherits these handlers.

The optional log file rotates by size; ``LOG_MAX_BYTES`` and
``LOG_BACKUP_COUNT`` bound the disk space it can take.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


APP_LOGGER = "library_api"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_HANDLER = "library_api.console"


def _has_file_handler(logger: logging.Logger, path: Path) -> bool:
    return any(
        isinstance(handler, logging.FileHandler) and Path(handler.baseFilename).resolve() == path
        for handler in logger.handlers
    )


def setup_logging(
    level: str = "INFO",
    logfile: Optional[str] = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> logging.Logger:
    """Configure the application logger and return it.

    Safe to call more than once (each ``create_app`` call does): the
    level is always updated, while the console handler and the handler
    of a given log file are only added the first time.

    Parameters
    ----------
    level : str
        Logging level name, case insensitive; unknown names fall back
        to ``INFO``.
    logfile : Optional[str]
        Path of a file to also write records to.  Parent directories
        are created when missing.
    max_bytes, backup_count : int
        Rotation threshold of the log file and number of rotated files
        kept.
    """
    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    if not any(handler.get_name() == CONSOLE_HANDLER for handler in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.set_name(CONSOLE_HANDLER)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if logfile:
        log_path = Path(logfile).resolve()
        if not _has_file_handler(logger, log_path):
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
