"""Outbound relay events and their JSON envelope encoding."""

from __future__ import annotations

from typing import Any
from dataclasses import field, dataclass

import orjson

from chat_relay.config.websocket import (
    WS_KEY_TYPE,
    WS_KEY_PAYLOAD,
    WS_EVENT_TYPING,
    WS_KEY_SENDER_ID,
    WS_KEY_ATTACHMENT,
    WS_EVENT_STOP_TYPING,
    WS_EVENT_CHAT_MESSAGE,
    WS_EVENT_CHAT_ATTACHMENT,
)

from .message import ChatMessage


def build_envelope(msg_type: str, payload: Any = None) -> dict[str, Any]:
    return {WS_KEY_TYPE: msg_type, WS_KEY_PAYLOAD: {} if payload is None else payload}


def encode_envelope(msg_type: str, payload: Any = None) -> str:
    return orjson.dumps(build_envelope(msg_type, payload)).decode("utf-8")


@dataclass(frozen=True, slots=True)
class RelayEvent:
    """A sender-stamped event ready for fan-out."""

    event_type: str
    sender_id: str
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def chat_message(cls, message: ChatMessage) -> RelayEvent:
        return cls(WS_EVENT_CHAT_MESSAGE, message.sender_id or "", message.to_payload())

    @classmethod
    def chat_attachment(cls, sender_id: str, attachment: Any) -> RelayEvent:
        # The attachment body is forwarded exactly as the sender supplied it.
        return cls(
            WS_EVENT_CHAT_ATTACHMENT,
            sender_id,
            {WS_KEY_SENDER_ID: sender_id, WS_KEY_ATTACHMENT: attachment},
        )

    @classmethod
    def typing(cls, sender_id: str) -> RelayEvent:
        return cls(WS_EVENT_TYPING, sender_id, {WS_KEY_SENDER_ID: sender_id})

    @classmethod
    def stop_typing(cls, sender_id: str) -> RelayEvent:
        return cls(WS_EVENT_STOP_TYPING, sender_id, {WS_KEY_SENDER_ID: sender_id})

    def encode(self) -> str:
        return encode_envelope(self.event_type, self.payload)


__all__ = ["RelayEvent", "build_envelope", "encode_envelope"]
