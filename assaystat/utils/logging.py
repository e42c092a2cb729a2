"""Logging helpers shared by the assaystat modules."""

from __future__ import annotations

import logging
from typing import Optional

_DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_ROOT_NAME = "assaystat"

logging.getLogger(_ROOT_NAME).addHandler(logging.NullHandler())


def configure_logging(
    *,
    level: str = "INFO",
    log_format: str = _DEFAULT_FORMAT,
    force: bool = False,
) -> logging.Logger:
    """Attach a stream handler with a shared format to the package logger.

    Parameters
    ----------
    level:
        Logging level name (e.g. ``"INFO"`` or ``"DEBUG"``).
    log_format:
        Format string used for log records.
    force:
        If ``True``, handlers previously attached by this function are
        removed first.
    """

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    package_logger = logging.getLogger(_ROOT_NAME)
    if force:
        for handler in list(package_logger.handlers):
            if not isinstance(handler, logging.NullHandler):
                package_logger.removeHandler(handler)
    if not any(
        not isinstance(h, logging.NullHandler) for h in package_logger.handlers
    ):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(log_format))
        package_logger.addHandler(handler)
    package_logger.setLevel(numeric_level)
    return package_logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-specific logger under the package namespace."""

    return logging.getLogger(name or _ROOT_NAME)


__all__ = ["configure_logging", "get_logger"]
