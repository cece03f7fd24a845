"""Configuration module exports (env-resolved constants only)."""

from .server import DEFAULT_PORT, SERVER_HOST
from .websocket import WS_ENDPOINT_PATH, WS_MAX_MESSAGE_BYTES

__all__ = [
    "DEFAULT_PORT",
    "SERVER_HOST",
    "WS_ENDPOINT_PATH",
    "WS_MAX_MESSAGE_BYTES",
]
