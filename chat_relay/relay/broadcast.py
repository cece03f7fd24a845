"""Fire-and-forget fan-out of relay events to live connections."""

from __future__ import annotations

import asyncio
import logging
import contextlib

from fastapi import WebSocketDisconnect

from chat_relay.models import ChatMessage, RelayEvent
from chat_relay.errors import PayloadTooLargeError
from chat_relay.config.websocket import (
    WS_SEND_TIMEOUT_S,
    WS_MAX_MESSAGE_BYTES,
    WS_RELAY_OVERHEAD_BYTES,
    WS_CLOSE_SLOW_CONSUMER_CODE,
)
from chat_relay.handlers.connections import Connection, ConnectionRegistry

from .routing import Audience, audience_for

logger = logging.getLogger(__name__)


class BroadcastRelay:
    """Deliver encoded events to a snapshot of the registry.

    Each recipient is attempted independently: a recipient that raises or has
    gone away is logged and skipped. One that does not take the frame within
    `send_timeout_s` may be left mid-frame, so its socket is closed as well.
    There is no retry and no buffering.

    Frames larger than `max_frame_bytes` after stamping are refused before any
    recipient sees them.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        *,
        send_timeout_s: float = WS_SEND_TIMEOUT_S,
        max_frame_bytes: int = WS_MAX_MESSAGE_BYTES + WS_RELAY_OVERHEAD_BYTES,
    ) -> None:
        self._registry = registry
        self._send_timeout_s = float(send_timeout_s)
        self._max_frame_bytes = int(max_frame_bytes)

    async def _close_slow(self, conn: Connection) -> None:
        with contextlib.suppress(Exception):
            await asyncio.wait_for(
                conn.ws.close(code=WS_CLOSE_SLOW_CONSUMER_CODE),
                timeout=self._send_timeout_s,
            )

    async def _deliver(self, conn: Connection, text: str) -> bool:
        try:
            if self._send_timeout_s > 0:
                await asyncio.wait_for(conn.ws.send_text(text), timeout=self._send_timeout_s)
            else:
                await conn.ws.send_text(text)
        except TimeoutError:
            logger.debug("send to %s timed out; closing its socket", conn.id)
            await self._close_slow(conn)
            return False
        except WebSocketDisconnect:
            logger.debug("recipient %s already disconnected; dropping frame", conn.id)
            return False
        except Exception:
            logger.debug("send to %s failed; dropping frame", conn.id, exc_info=True)
            return False
        return True

    def _check_size(self, text: str) -> None:
        if self._max_frame_bytes <= 0:
            return
        size = len(text.encode("utf-8"))
        if size > self._max_frame_bytes:
            raise PayloadTooLargeError(size_bytes=size, limit_bytes=self._max_frame_bytes)

    async def broadcast(self, text: str, *, exclude_id: str | None = None) -> int:
        """Send `text` to every live connection but `exclude_id`; return how many accepted it."""
        delivered = 0
        for conn in self._registry.snapshot():
            if conn.id == exclude_id:
                continue
            if await self._deliver(conn, text):
                delivered += 1
        return delivered

    async def publish(self, event: RelayEvent) -> int:
        audience = audience_for(event.event_type)
        exclude_id = event.sender_id if audience is Audience.OTHERS else None
        text = event.encode()
        self._check_size(text)
        return await self.broadcast(text, exclude_id=exclude_id)

    async def announce_join(self, conn: Connection) -> int:
        event = RelayEvent.chat_message(ChatMessage.join_notice())
        return await self.broadcast(event.encode(), exclude_id=conn.id)

    async def announce_leave(self, conn: Connection) -> int:
        # Peers may still show this id as typing; clear it unconditionally.
        return await self.publish(RelayEvent.stop_typing(conn.id))


__all__ = ["BroadcastRelay"]
