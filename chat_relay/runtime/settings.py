"""Environment parsing for runtime settings."""

from __future__ import annotations

import os
import logging

from chat_relay.config.server import ENV_PORT, DEFAULT_PORT, SERVER_HOST
from chat_relay.config.websocket import WS_SEND_TIMEOUT_S, WS_MAX_MESSAGE_BYTES, WS_RELAY_OVERHEAD_BYTES
from chat_relay.state.settings import AppSettings, ServerSettings, WebSocketSettings

logger = logging.getLogger(__name__)

_PORT_MIN = 1
_PORT_MAX = 65535


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except Exception:
        logger.warning("ignoring non-integer %s=%r; using %s", name, raw, default)
        return default


def _load_server_settings() -> ServerSettings:
    port = _int_env(ENV_PORT, DEFAULT_PORT)
    if port < _PORT_MIN or port > _PORT_MAX:
        logger.warning("ignoring out-of-range %s=%s; using %s", ENV_PORT, port, DEFAULT_PORT)
        port = DEFAULT_PORT
    return ServerSettings(host=SERVER_HOST, port=port)


def _load_websocket_settings() -> WebSocketSettings:
    return WebSocketSettings(
        max_message_bytes=WS_MAX_MESSAGE_BYTES,
        send_timeout_s=WS_SEND_TIMEOUT_S,
        relay_overhead_bytes=WS_RELAY_OVERHEAD_BYTES,
    )


def load_settings() -> AppSettings:
    return AppSettings(
        server=_load_server_settings(),
        websocket=_load_websocket_settings(),
    )


__all__ = ["load_settings"]
