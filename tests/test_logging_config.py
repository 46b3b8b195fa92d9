import dataclasses
import logging

import pytest

from cleanslate_api.app.core.config import settings
from cleanslate_api.app.core.logging_config import PACKAGE_LOGGER, setup_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    saved_handlers, saved_level = list(logger.handlers), logger.level
    for handler in saved_handlers:
        logger.removeHandler(handler)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in saved_handlers:
        logger.addHandler(handler)
    logger.setLevel(saved_level)


def test_level_applies_to_the_package_logger_only(package_logger):
    root_level = logging.getLogger().level

    setup_logging(dataclasses.replace(settings, log_level="debug", log_file=""))

    assert package_logger.level == logging.DEBUG
    assert logging.getLogger().level == root_level
    assert package_logger.propagate is True


def test_unknown_level_falls_back_to_info(package_logger):
    setup_logging(dataclasses.replace(settings, log_level="chatty", log_file=""))

    assert package_logger.level == logging.INFO


def test_repeated_setup_keeps_one_console_handler(package_logger):
    app_settings = dataclasses.replace(settings, log_level="INFO", log_file="")

    setup_logging(app_settings)
    setup_logging(app_settings)

    assert len(package_logger.handlers) == 1


def test_log_file_receives_service_messages(package_logger, tmp_path):
    first, second = tmp_path / "first.log", tmp_path / "second.log"

    setup_logging(dataclasses.replace(settings, log_level="INFO", log_file=str(first)))
    logging.getLogger("cleanslate_api.app.services.booking_service").info("booking created")
    setup_logging(dataclasses.replace(settings, log_level="INFO", log_file=str(second)))
    logging.getLogger("cleanslate_api.app.services.worker_service").info("worker promoted")

    assert len(package_logger.handlers) == 2
    assert "booking created" in first.read_text(encoding="utf-8")
    assert "worker promoted" not in first.read_text(encoding="utf-8")
    assert "worker promoted" in second.read_text(encoding="utf-8")
