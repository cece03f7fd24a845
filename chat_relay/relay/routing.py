"""Audience policy per relayed event type."""

from __future__ import annotations

import enum

from chat_relay.config.websocket import (
    WS_EVENT_TYPING,
    WS_EVENT_STOP_TYPING,
    WS_EVENT_CHAT_MESSAGE,
    WS_EVENT_CHAT_ATTACHMENT,
)


class Audience(enum.Enum):
    # Everyone, the sender included; clients drop their own echo.
    ALL = "all"
    # Everyone except the sender.
    OTHERS = "others"


ROUTES: dict[str, Audience] = {
    WS_EVENT_CHAT_MESSAGE: Audience.ALL,
    WS_EVENT_CHAT_ATTACHMENT: Audience.ALL,
    WS_EVENT_TYPING: Audience.OTHERS,
    WS_EVENT_STOP_TYPING: Audience.OTHERS,
}


def audience_for(event_type: str) -> Audience:
    try:
        return ROUTES[event_type]
    except KeyError:
        raise ValueError(f"no route for event type '{event_type}'") from None


__all__ = ["Audience", "ROUTES", "audience_for"]
