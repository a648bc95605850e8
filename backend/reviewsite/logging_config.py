"""Logging configuration for the review site.

Handlers are attached to the ``reviewsite`` package logger rather than the
root logger, so the CLI can call setup_logging() on every invocation
without stacking handlers. Log lines go to stderr; command output owns
stdout.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List

from reviewsite.config import settings

PACKAGE_LOGGER = "reviewsite"
SQL_LOGGER = "sqlalchemy.engine"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _build_handlers(level: int) -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if settings.log_path:
        log_file = Path(settings.log_path)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        ))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def _replace_handlers(logger: logging.Logger, handlers: List[logging.Handler]) -> None:
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for handler in handlers:
        logger.addHandler(handler)


def setup_logging() -> logging.Logger:
    """Configure the review site loggers from settings.

    ``LOG_LEVEL`` sets the package level, ``LOG_PATH`` adds a rotating file
    and ``DATABASE_ECHO`` routes SQL statements through the same handlers.
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    handlers = _build_handlers(level)

    app_logger = logging.getLogger(PACKAGE_LOGGER)
    app_logger.setLevel(level)
    _replace_handlers(app_logger, handlers)

    sql_logger = logging.getLogger(SQL_LOGGER)
    if settings.database_echo:
        sql_logger.setLevel(logging.INFO)
        _replace_handlers(sql_logger, handlers)
    else:
        sql_logger.setLevel(logging.WARNING)
        _replace_handlers(sql_logger, [])

    logging.getLogger("alembic").setLevel(logging.WARNING)
    return app_logger


def reset_logging() -> None:
    """Detach every handler installed by setup_logging() and clear levels."""
    for name in (PACKAGE_LOGGER, SQL_LOGGER):
        logger = logging.getLogger(name)
        _replace_handlers(logger, [])
        logger.setLevel(logging.NOTSET)
