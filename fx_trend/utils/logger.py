"""Logging setup shared by the library, the CLI and the Streamlit page."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL_ENV = "FX_TREND_LOG_LEVEL"
PACKAGE_LOGGER = "fx_trend"

_configured = False


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV) or logging.INFO
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level!r}")
        return resolved
    return level


def configure_logging(level: int | str | None = None) -> None:
    """Install the root handler once and set the ``fx_trend`` logger level.

    ``level`` falls back to ``$FX_TREND_LOG_LEVEL`` and then INFO. Calling it
    again only changes the level.
    """

    global _configured
    if not _configured:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        _configured = True
    logging.getLogger(PACKAGE_LOGGER).setLevel(_resolve_level(level))


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    if not _configured:
        configure_logging()
    return logging.getLogger(name)


__all__ = ["LOG_FORMAT", "LOG_LEVEL_ENV", "configure_logging", "get_logger"]
