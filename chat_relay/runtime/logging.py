"""Logging initialization."""

from __future__ import annotations

import logging

from chat_relay.config.logging import LOG_LEVEL, LOG_FORMAT


def configure_logging() -> None:
    # uvicorn's access log duplicates our connect/disconnect lines.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)


__all__ = ["configure_logging"]
