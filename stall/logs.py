"""Logging setup for the ``stall`` logger tree.

Library modules only call ``logging.getLogger(__name__)``; the CLI calls
`configure_logging` once to attach a single stream handler.
"""
from __future__ import annotations

import json
import logging
import sys
from typing import TextIO

from stall.config.schemas.observability import LoggingConfig

LOGGER_NAME = "stall"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        data = {
            "ts": record.created,
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


def configure_logging(
    cfg: LoggingConfig | None = None,
    *,
    verbose: bool = False,
    quiet: bool = False,
    trace: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Install one handler on the ``stall`` logger; idempotent.

    ``trace`` > ``verbose`` > config level; ``quiet`` limits to errors.
    """
    cfg = cfg or LoggingConfig()
    level = _LEVELS[cfg.level]
    if verbose:
        level = min(level, logging.INFO)
    if trace:
        level = logging.DEBUG
    if quiet:
        level = logging.ERROR

    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        if getattr(h, "_stall_handler", False):
            logger.removeHandler(h)
    h = logging.StreamHandler(stream or sys.stderr)
    h._stall_handler = True  # type: ignore[attr-defined]
    if cfg.format == "json":
        h.setFormatter(JsonLineFormatter())
    else:
        h.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(h)
    logger.setLevel(level)
    return logger


__all__ = ["configure_logging", "JsonLineFormatter", "LOGGER_NAME"]
