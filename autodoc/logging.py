"""Logger hierarchy shared by the reader, coordinator, CLI and HTTP service.

Library modules only ever call :func:`get_logger`; handlers are installed by
the entry points (``autodoc analyze``/``autodoc serve``) through
:func:`configure_logging`.
"""

from __future__ import annotations

import logging
from pathlib import Path

ROOT_LOGGER = "autodoc"
CONSOLE_FORMAT = "[autodoc] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s]: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``autodoc.<name>``, or the package logger when ``name`` is empty."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def _drop_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send autodoc records to stderr and, optionally, to ``log_file``.

    ``verbose`` lowers the threshold to DEBUG, which also makes per-unit
    analyzer failures and coordinator tracebacks visible. Calling this again
    replaces the previous handlers.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.propagate = False
    _drop_handlers(logger)

    logger.addHandler(_handler(logging.StreamHandler(), level, CONSOLE_FORMAT))
    if log_file is not None:
        logger.addHandler(_handler(logging.FileHandler(log_file, encoding="utf-8"), level, FILE_FORMAT))
    return logger


__all__ = ["configure_logging", "get_logger"]
