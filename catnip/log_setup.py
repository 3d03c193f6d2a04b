"""One-time set-up of the package's logging from the environment."""

from __future__ import annotations

import logging
import os
import threading

ENV_VAR = "CATNIP_LOG"
LOGGER_NAME = "catnip"

_LEVELS = {
    "off": logging.CRITICAL + 10,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}

_lock = threading.Lock()
_initialized = False


def _parse_level(spec: str | None) -> int:
    """Turn a specification such as ``"debug"`` or ``"catnip=info"`` into a level."""
    if spec is None:
        return logging.ERROR
    level: int | None = None
    for directive in spec.split(","):
        directive = directive.strip()
        if not directive:
            continue
        name = directive.rsplit("=", 1)[-1].strip().lower()
        try:
            value = _LEVELS[name]
        except KeyError:
            raise ValueError(f"invalid log specification: {spec!r}") from None
        level = value if level is None else min(level, value)
    return logging.ERROR if level is None else level


def initialize() -> logging.Logger:
    """Configure the package logger once, from ``CATNIP_LOG``; later calls do nothing."""
    global _initialized
    logger = logging.getLogger(LOGGER_NAME)
    with _lock:
        if not _initialized:
            level = _parse_level(os.environ.get(ENV_VAR))
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter("%(levelname)s [%(name)s] %(message)s")
            )
            logger.addHandler(handler)
            logger.setLevel(level)
            _initialized = True
    return logger