"""Dispatch handlers for relayed client events."""

from __future__ import annotations

from typing import Any
from collections.abc import Callable, Awaitable

from chat_relay.models import ChatMessage, RelayEvent
from chat_relay.relay.broadcast import BroadcastRelay
from chat_relay.models.message import coerce_text
from chat_relay.handlers.connections import Connection
from chat_relay.config.websocket import (
    WS_EVENT_TYPING,
    WS_EVENT_STOP_TYPING,
    WS_EVENT_CHAT_MESSAGE,
    WS_EVENT_CHAT_ATTACHMENT,
)

HandlerFn = Callable[[BroadcastRelay, Connection, Any], Awaitable[int]]


async def _handle_chat_message(relay: BroadcastRelay, conn: Connection, payload: Any) -> int:
    message = ChatMessage(sender_id=conn.id, text=coerce_text(payload))
    return await relay.publish(RelayEvent.chat_message(message))


async def _handle_chat_attachment(relay: BroadcastRelay, conn: Connection, payload: Any) -> int:
    attachment = payload if isinstance(payload, dict) else {}
    return await relay.publish(RelayEvent.chat_attachment(conn.id, attachment))


async def _handle_typing(relay: BroadcastRelay, conn: Connection, _payload: Any) -> int:
    return await relay.publish(RelayEvent.typing(conn.id))


async def _handle_stop_typing(relay: BroadcastRelay, conn: Connection, _payload: Any) -> int:
    return await relay.publish(RelayEvent.stop_typing(conn.id))


HANDLERS: dict[str, HandlerFn] = {
    WS_EVENT_CHAT_MESSAGE: _handle_chat_message,
    WS_EVENT_CHAT_ATTACHMENT: _handle_chat_attachment,
    WS_EVENT_TYPING: _handle_typing,
    WS_EVENT_STOP_TYPING: _handle_stop_typing,
}

__all__ = ["HANDLERS"]
