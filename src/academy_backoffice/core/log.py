from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Install one stream handler on the package logger.

    Safe to call more than once (tests build several apps).
    """

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger("academy_backoffice")
    logger.setLevel(level)
    if not any(getattr(h, "_academy_backoffice", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._academy_backoffice = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
