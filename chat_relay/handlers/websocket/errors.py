"""Error helpers for the WebSocket JSON envelope."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from chat_relay.models.envelope import encode_envelope
from chat_relay.config.websocket import WS_EVENT_ERROR

logger = logging.getLogger(__name__)


def build_error_payload(
    code: str,
    message: str,
    *,
    details: dict[str, Any] | None = None,
    reason_code: str | None = None,
) -> dict[str, Any]:
    payload_details = dict(details or {})
    if reason_code:
        payload_details.setdefault("reason_code", reason_code)
    return {"code": code, "message": message, "details": payload_details}


async def safe_send_text(ws: WebSocket, text: str) -> bool:
    try:
        await ws.send_text(text)
    except WebSocketDisconnect:
        return False
    except Exception:
        logger.debug("WebSocket send failed", exc_info=True)
        return False
    return True


async def safe_send_envelope(ws: WebSocket, *, msg_type: str, payload: Any = None) -> bool:
    return await safe_send_text(ws, encode_envelope(msg_type, payload))


async def send_error(
    ws: WebSocket,
    *,
    error_code: str,
    message: str,
    reason_code: str | None = None,
    details: dict[str, Any] | None = None,
) -> bool:
    return await safe_send_envelope(
        ws,
        msg_type=WS_EVENT_ERROR,
        payload=build_error_payload(error_code, message, details=details, reason_code=reason_code),
    )


__all__ = [
    "build_error_payload",
    "safe_send_envelope",
    "safe_send_text",
    "send_error",
]
