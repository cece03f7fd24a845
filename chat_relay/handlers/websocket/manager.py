"""Primary WebSocket connection handler orchestration."""

from __future__ import annotations

import logging
import contextlib

from fastapi import WebSocket

from chat_relay.runtime.dependencies import RuntimeDeps
from chat_relay.config.websocket import WS_KEY_ID, WS_EVENT_CONNECT

from .errors import safe_send_envelope
from .message_loop import run_message_loop

logger = logging.getLogger(__name__)


async def handle_websocket_connection(ws: WebSocket, runtime_deps: RuntimeDeps) -> None:
    registry = runtime_deps.registry
    relay = runtime_deps.relay

    await ws.accept()
    conn = registry.register(ws)
    try:
        # Handshake: tell the client which id its events will be stamped with.
        if not await safe_send_envelope(ws, msg_type=WS_EVENT_CONNECT, payload={WS_KEY_ID: conn.id}):
            return
        logger.info("a user connected id=%s. Active: %s", conn.id, registry.count())
        await relay.announce_join(conn)
        await run_message_loop(ws, conn, runtime_deps)
    finally:
        registry.unregister(conn)
        with contextlib.suppress(Exception):
            await relay.announce_leave(conn)
        logger.info("user disconnected id=%s. Active: %s", conn.id, registry.count())


__all__ = ["handle_websocket_connection"]
