"""Logging setup for command-line use.

Library modules only create ``logging.getLogger(__name__)`` loggers; handlers
are installed here, once, by the entrypoint.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

_CONFIGURED_ATTR = "_workspacefs_configured"


def configure_logging(level: int = logging.WARNING, log_path: Path | None = None) -> logging.Logger:
    """Attach a stderr handler (and optionally a file handler) to the package logger.

    Repeated calls only adjust the level so handlers are never duplicated.
    """
    logger = logging.getLogger("workspacefs")
    logger.setLevel(level)
    if getattr(logger, _CONFIGURED_ATTR, False):
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    setattr(logger, _CONFIGURED_ATTR, True)
    logger.debug("logging initialized (level=%s, file=%s)", logging.getLevelName(level), log_path)
    return logger


__all__ = [
    "LOG_FORMAT",
    "configure_logging",
]
