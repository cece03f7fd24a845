"""Client message parsing/validation for the `{type, payload}` envelope."""

from __future__ import annotations

from typing import Any

import orjson

from chat_relay.config.websocket import WS_KEY_TYPE, WS_KEY_PAYLOAD


def frame_size_bytes(raw: str | bytes) -> int:
    if isinstance(raw, bytes):
        return len(raw)
    if raw.isascii():
        return len(raw)
    return len(raw.encode("utf-8"))


def parse_client_message(raw: str | bytes) -> dict[str, Any]:
    try:
        msg = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise ValueError(f"invalid JSON: {exc}") from exc

    if not isinstance(msg, dict):
        raise ValueError("message must be a JSON object")

    msg_type = msg.get(WS_KEY_TYPE)
    if not isinstance(msg_type, str) or not msg_type.strip():
        raise ValueError("message missing non-empty 'type'")

    # Payload shape depends on the event; handlers coerce it.
    msg[WS_KEY_TYPE] = msg_type.strip()
    msg[WS_KEY_PAYLOAD] = msg.get(WS_KEY_PAYLOAD)
    return msg


__all__ = ["frame_size_bytes", "parse_client_message"]
