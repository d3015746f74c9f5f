"""Centralized logging configuration for the upload service."""

import os
import sys
import logging
from typing import Optional

DEFAULT_LOGGER_NAME = "webp-upload"
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

LOG_FORMATS = {
    "structured": (
        "%(asctime)s | %(name)s | %(levelname)-8s | "
        "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
    ),
    "simple": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
HANDLER_NAME = "webp-upload-stdout"


def resolve_level(level: Optional[str] = None) -> int:
    """Level name from the argument or LOG_LEVEL; unknown names mean INFO."""
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def build_formatter(format_type: str = "structured") -> logging.Formatter:
    """LOG_FORMAT overrides ``format_type``; unknown names fall back to simple."""
    chosen = os.getenv("LOG_FORMAT", format_type).lower()
    return logging.Formatter(LOG_FORMATS.get(chosen, LOG_FORMATS["simple"]), datefmt=DATE_FORMAT)


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Configure ``name`` with a single stdout handler.

    Args:
        name: Logger name (defaults to "webp-upload")
        level: Log level override (defaults to LOG_LEVEL, then INFO)
        format_type: "structured" or "simple", overridden by LOG_FORMAT

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(resolve_level(level))

    # Repeated calls only adjust the level.
    if not any(h.get_name() == HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(build_formatter(format_type))
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger under the service namespace.

    ``get_logger("pipeline")`` is ``webp-upload.pipeline``. Children carry no
    level or handler of their own and propagate to ``webp-upload``, so the
    level set there (LOG_LEVEL or ``serve --log-level``) applies to all of them.
    """
    if name == DEFAULT_LOGGER_NAME:
        return setup_logger(name)
    if not name.startswith(DEFAULT_LOGGER_NAME + "."):
        name = f"{DEFAULT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_server_logging(level: Optional[str] = None) -> None:
    """Set the service and uvicorn loggers to ``level``. Call before serving."""
    setup_logger(DEFAULT_LOGGER_NAME, level=level)
    for uvicorn_logger in UVICORN_LOGGERS:
        setup_logger(uvicorn_logger, level=level)


logger = setup_logger()
