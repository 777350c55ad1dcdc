import logging
from logging.handlers import RotatingFileHandler

import pytest

from library_api.app.core.logging_config import APP_LOGGER, CONSOLE_HANDLER, setup_logging


@pytest.fixture
def app_logger():
    logger = logging.getLogger(APP_LOGGER)
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)


def test_repeated_setup_keeps_one_handler_per_target(app_logger, tmp_path):
    logfile = tmp_path / "logs" / "library.log"

    setup_logging("DEBUG", str(logfile))
    setup_logging("DEBUG", str(logfile))

    consoles = [h for h in app_logger.handlers if h.get_name() == CONSOLE_HANDLER]
    files = [h for h in app_logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(consoles) == 1
    assert len(files) == 1
    assert app_logger.level == logging.DEBUG


def test_module_records_reach_the_log_file(app_logger, tmp_path):
    logfile = tmp_path / "logs" / "library.log"
    setup_logging("INFO", str(logfile), max_bytes=1024, backup_count=2)

    logging.getLogger("library_api.app.services.catalog_service").info("Created book %s", 1)
    for handler in app_logger.handlers:
        handler.flush()

    assert "[INFO] library_api.app.services.catalog_service: Created book 1" in logfile.read_text(encoding="utf-8")
    rotating = [h for h in app_logger.handlers if isinstance(h, RotatingFileHandler)][0]
    assert rotating.maxBytes == 1024
    assert rotating.backupCount == 2


def test_unknown_level_falls_back_to_info(app_logger):
    setup_logging("chatty")
    assert app_logger.level == logging.INFO
