"""Client reconciliation of optimistic renders, server echoes and presence."""

from __future__ import annotations

import enum
import logging
from typing import Any
from dataclasses import dataclass
from collections.abc import Callable

from chat_relay.errors import IdentityPendingError
from chat_relay.models import Attachment, ChatMessage
from chat_relay.config.presence import SYSTEM_SENDER_ID, TYPING_ONE_TEXT, TYPING_MANY_TEXT
from chat_relay.config.websocket import (
    WS_KEY_ID,
    WS_EVENT_TYPING,
    WS_EVENT_CONNECT,
    WS_KEY_SENDER_ID,
    WS_KEY_ATTACHMENT,
    WS_EVENT_STOP_TYPING,
    WS_EVENT_CHAT_MESSAGE,
    WS_EVENT_CHAT_ATTACHMENT,
)

logger = logging.getLogger(__name__)


class Alignment(enum.Enum):
    SELF = "self"
    PEER = "peer"
    SYSTEM = "system"


@dataclass(frozen=True, slots=True)
class RenderedItem:
    sender_id: str | None
    alignment: Alignment
    text: str = ""
    attachment: Attachment | None = None
    optimistic: bool = False


RenderFn = Callable[[RenderedItem], None]
TypingFn = Callable[[str], None]


def _sender_of(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    sender = payload.get(WS_KEY_SENDER_ID)
    return sender if isinstance(sender, str) and sender else None


def typing_indicator_text(count: int) -> str:
    if count <= 0:
        return ""
    return TYPING_ONE_TEXT if count == 1 else TYPING_MANY_TEXT


class ChatReconciler:
    """Decide what each inbound event does to the local view.

    Own sends are rendered at once with the local id; the server echoes them
    back to everyone, and the echo is recognised by its sender id and dropped.
    Peers announcing `typing` are tracked until they send `stop typing` or an
    authored chat event.
    """

    def __init__(self, *, on_render: RenderFn | None = None, on_typing: TypingFn | None = None) -> None:
        self._on_render = on_render
        self._on_typing = on_typing
        self._self_id: str | None = None
        self._typers: set[str] = set()
        self._rendered: list[RenderedItem] = []

    @property
    def self_id(self) -> str | None:
        return self._self_id

    @property
    def typers(self) -> frozenset[str]:
        return frozenset(self._typers)

    @property
    def rendered(self) -> list[RenderedItem]:
        return list(self._rendered)

    def typing_indicator(self) -> str:
        return typing_indicator_text(len(self._typers))

    def assign_identity(self, conn_id: str) -> None:
        self._self_id = conn_id
        # Our own id can never be a peer typer.
        self._typers.discard(conn_id)

    def connection_lost(self) -> None:
        self._self_id = None
        if self._typers:
            self._typers.clear()
            self._render_typing()

    def alignment_for(self, sender_id: str | None) -> Alignment:
        if sender_id == SYSTEM_SENDER_ID:
            return Alignment.SYSTEM
        if self._self_id is not None and sender_id == self._self_id:
            return Alignment.SELF
        return Alignment.PEER

    def _require_identity(self) -> str:
        if self._self_id is None:
            raise IdentityPendingError()
        return self._self_id

    def _render(self, item: RenderedItem) -> RenderedItem:
        self._rendered.append(item)
        if self._on_render is not None:
            self._on_render(item)
        return item

    def _render_typing(self) -> None:
        if self._on_typing is not None:
            self._on_typing(self.typing_indicator())

    def render_local_message(self, text: str) -> RenderedItem:
        sender_id = self._require_identity()
        return self._render(RenderedItem(sender_id, Alignment.SELF, text=text, optimistic=True))

    def render_local_attachment(self, attachment: Attachment) -> RenderedItem:
        sender_id = self._require_identity()
        return self._render(RenderedItem(sender_id, Alignment.SELF, attachment=attachment, optimistic=True))

    def ensure_can_send(self) -> str:
        return self._require_identity()

    def _is_echo(self, sender_id: str | None) -> bool:
        return self._self_id is not None and sender_id == self._self_id

    def _clear_typer(self, sender_id: str | None) -> None:
        if sender_id and sender_id in self._typers:
            self._typers.discard(sender_id)
            self._render_typing()

    def _handle_chat_message(self, payload: Any) -> RenderedItem | None:
        message = ChatMessage.from_payload(payload)
        if self._is_echo(message.sender_id):
            return None
        self._clear_typer(message.sender_id)
        return self._render(RenderedItem(message.sender_id, self.alignment_for(message.sender_id), text=message.text))

    def _handle_chat_attachment(self, payload: Any) -> RenderedItem | None:
        sender_id = _sender_of(payload)
        if self._is_echo(sender_id):
            return None
        self._clear_typer(sender_id)
        raw = payload.get(WS_KEY_ATTACHMENT) if isinstance(payload, dict) else None
        attachment = Attachment.from_payload(raw)
        return self._render(RenderedItem(sender_id, self.alignment_for(sender_id), attachment=attachment))

    def _handle_typing(self, payload: Any) -> None:
        sender_id = _sender_of(payload)
        if sender_id is None or sender_id == self._self_id:
            return
        self._typers.add(sender_id)
        self._render_typing()

    def _handle_stop_typing(self, payload: Any) -> None:
        sender_id = _sender_of(payload)
        if sender_id is None:
            return
        self._typers.discard(sender_id)
        self._render_typing()

    def handle_event(self, event_type: str, payload: Any) -> RenderedItem | None:
        """Apply one server event; return the item rendered for it, if any."""
        if event_type == WS_EVENT_CHAT_MESSAGE:
            return self._handle_chat_message(payload)
        if event_type == WS_EVENT_CHAT_ATTACHMENT:
            return self._handle_chat_attachment(payload)
        if event_type == WS_EVENT_TYPING:
            self._handle_typing(payload)
            return None
        if event_type == WS_EVENT_STOP_TYPING:
            self._handle_stop_typing(payload)
            return None
        if event_type == WS_EVENT_CONNECT:
            conn_id = payload.get(WS_KEY_ID) if isinstance(payload, dict) else None
            if isinstance(conn_id, str) and conn_id:
                self.assign_identity(conn_id)
            return None
        logger.debug("ignoring event type %r", event_type)
        return None


__all__ = ["Alignment", "ChatReconciler", "RenderedItem", "typing_indicator_text"]
