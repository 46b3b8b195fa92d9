"""
Logging for the marketplace service.

Handlers are attached to the ``cleanslate_api`` package logger rather
than the root logger, so the level chosen through ``LOG_LEVEL`` applies
to booking, worker and payment messages without turning on debug output
from uvicorn or httpx.  Records still propagate to the root logger,
where test runners and process managers can pick them up.
"""

import logging
from pathlib import Path
from typing import Optional

from .config import Settings, settings as default_settings


PACKAGE_LOGGER = "cleanslate_api"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_CONSOLE_HANDLER = "cleanslate-console"
_FILE_HANDLER = "cleanslate-file"


def _named_handler(logger: logging.Logger, name: str) -> Optional[logging.Handler]:
    for handler in logger.handlers:
        if handler.get_name() == name:
            return handler
    return None


def setup_logging(app_settings: Optional[Settings] = None) -> logging.Logger:
    """Configure the package logger from ``app_settings.log_level`` and ``log_file``.

    Safe to call more than once (each ``create_app`` call does): the
    console handler is added only once, and the file handler is replaced
    when ``log_file`` points somewhere new.  An unknown level name falls
    back to ``INFO``.  Returns the package logger.
    """
    app_settings = app_settings or default_settings
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, app_settings.log_level.upper(), logging.INFO))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    if _named_handler(logger, _CONSOLE_HANDLER) is None:
        console = logging.StreamHandler()
        console.set_name(_CONSOLE_HANDLER)
        console.setFormatter(formatter)
        logger.addHandler(console)

    current = _named_handler(logger, _FILE_HANDLER)
    wanted = str(Path(app_settings.log_file).resolve()) if app_settings.log_file else None
    if current is not None and getattr(current, "baseFilename", None) != wanted:
        logger.removeHandler(current)
        current.close()
        current = None
    if wanted and current is None:
        file_handler = logging.FileHandler(wanted, encoding="utf-8")
        file_handler.set_name(_FILE_HANDLER)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    return logger
