"""WebSocket receive loop: parse, size-check and dispatch one frame at a time."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from chat_relay.errors import PayloadTooLargeError
from chat_relay.runtime.dependencies import RuntimeDeps
from chat_relay.handlers.connections import Connection
from chat_relay.config.websocket import (
    WS_KEY_TYPE,
    WS_KEY_PAYLOAD,
    WS_ERROR_INTERNAL,
    WS_ERROR_INVALID_MESSAGE,
    WS_ERROR_PAYLOAD_TOO_LARGE,
)

from .dispatch import HANDLERS
from .errors import send_error
from .parser import frame_size_bytes, parse_client_message

logger = logging.getLogger(__name__)


async def _recv_frame(ws: WebSocket) -> str | bytes:
    message = await ws.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(code=message.get("code", 1000), reason=message.get("reason"))
    text = message.get("text")
    if text is not None:
        return text
    return message.get("bytes") or b""


async def _parse_or_send_error(ws: WebSocket, raw: str | bytes, max_bytes: int) -> dict[str, Any] | None:
    size = frame_size_bytes(raw)
    if max_bytes > 0 and size > max_bytes:
        await send_error(
            ws,
            error_code=WS_ERROR_PAYLOAD_TOO_LARGE,
            message=f"message of {size} bytes exceeds the {max_bytes} byte limit",
            reason_code="payload_too_large",
            details={"size_bytes": size, "max_bytes": max_bytes},
        )
        return None
    try:
        return parse_client_message(raw)
    except ValueError as exc:
        await send_error(
            ws,
            error_code=WS_ERROR_INVALID_MESSAGE,
            message=str(exc),
            reason_code="invalid_message",
        )
        return None


async def run_message_loop(ws: WebSocket, conn: Connection, runtime_deps: RuntimeDeps) -> None:
    max_bytes = runtime_deps.settings.websocket.max_message_bytes
    relay = runtime_deps.relay
    try:
        while True:
            raw = await _recv_frame(ws)

            msg = await _parse_or_send_error(ws, raw, max_bytes)
            if msg is None:
                continue

            msg_type = msg[WS_KEY_TYPE]
            handler = HANDLERS.get(msg_type)
            if handler is None:
                await send_error(
                    ws,
                    error_code=WS_ERROR_INVALID_MESSAGE,
                    message=f"event type '{msg_type}' is not supported",
                    reason_code="unknown_event_type",
                )
                continue

            try:
                await handler(relay, conn, msg[WS_KEY_PAYLOAD])
            except PayloadTooLargeError as exc:
                # Stamping the sender pushed the frame past what clients accept.
                await send_error(
                    ws,
                    error_code=WS_ERROR_PAYLOAD_TOO_LARGE,
                    message=str(exc),
                    reason_code="payload_too_large",
                    details={"size_bytes": exc.size_bytes, "max_bytes": exc.limit_bytes},
                )
            except Exception:
                logger.exception("relay of '%s' from %s failed", msg_type, conn.id)
                await send_error(
                    ws,
                    error_code=WS_ERROR_INTERNAL,
                    message="event could not be relayed",
                    reason_code="relay_failed",
                )
    except WebSocketDisconnect:
        return


__all__ = ["run_message_loop"]
