"""Chat message value object."""

from __future__ import annotations

from typing import Any
from dataclasses import dataclass

from chat_relay.config.presence import SYSTEM_SENDER_ID, JOIN_NOTICE_TEXT
from chat_relay.config.websocket import WS_KEY_TEXT, WS_KEY_SENDER_ID


def coerce_text(value: Any) -> str:
    """Best-effort text extraction from an inbound chat payload."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return coerce_text(value.get(WS_KEY_TEXT))
    return str(value)


@dataclass(frozen=True, slots=True)
class ChatMessage:
    sender_id: str | None
    text: str

    @property
    def is_system(self) -> bool:
        return self.sender_id == SYSTEM_SENDER_ID

    @classmethod
    def system(cls, text: str) -> ChatMessage:
        return cls(sender_id=SYSTEM_SENDER_ID, text=text)

    @classmethod
    def join_notice(cls) -> ChatMessage:
        return cls.system(JOIN_NOTICE_TEXT)

    @classmethod
    def from_payload(cls, payload: Any) -> ChatMessage:
        """Build from an outbound `{senderId, text}` payload, tolerating junk."""
        if not isinstance(payload, dict):
            return cls(sender_id=None, text=coerce_text(payload))
        sender = payload.get(WS_KEY_SENDER_ID)
        return cls(
            sender_id=sender if isinstance(sender, str) and sender else None,
            text=coerce_text(payload.get(WS_KEY_TEXT)),
        )

    def to_payload(self) -> dict[str, Any]:
        return {WS_KEY_SENDER_ID: self.sender_id, WS_KEY_TEXT: self.text}


__all__ = ["ChatMessage", "coerce_text"]
