"""Logging configuration helpers."""

from __future__ import annotations

import logging

DISPATCH_LOGGERS = ("profilekit.dispatch", "profilekit.tracker", "profilekit.observer")


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def configure_logging(level: str = "INFO", *, dispatch_level: str | None = None) -> None:
    """Configure root logging; ``dispatch_level`` traces hook invocation separately."""
    logging.basicConfig(
        level=_level(level),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    if dispatch_level:
        for name in DISPATCH_LOGGERS:
            logging.getLogger(name).setLevel(_level(dispatch_level))
