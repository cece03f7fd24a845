"""WebSocket chat client wiring the reconciler and debouncer to a live server."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from pathlib import Path
from collections.abc import Callable

import orjson
import websockets

from chat_relay.models import Attachment
from chat_relay.models.envelope import build_envelope
from chat_relay.errors import AttachmentReadError, PayloadTooLargeError
from chat_relay.config.websocket import (
    WS_KEY_TYPE,
    WS_KEY_PAYLOAD,
    WS_EVENT_ERROR,
    WS_EVENT_CONNECT,
    WS_MAX_MESSAGE_BYTES,
    WS_EVENT_CHAT_MESSAGE,
    WS_RELAY_OVERHEAD_BYTES,
    WS_EVENT_CHAT_ATTACHMENT,
)

from .debouncer import TypingDebouncer
from .reconciler import RenderFn, TypingFn, RenderedItem, ChatReconciler

logger = logging.getLogger(__name__)

ErrorFn = Callable[[dict[str, Any]], None]

DEFAULT_HANDSHAKE_TIMEOUT_S = 10.0


def encode_frame(event_type: str, payload: Any, *, max_bytes: int = WS_MAX_MESSAGE_BYTES) -> str:
    """Encode an outbound envelope, refusing anything the server would reject."""
    frame = orjson.dumps(build_envelope(event_type, payload))
    if max_bytes > 0 and len(frame) > max_bytes:
        raise PayloadTooLargeError(size_bytes=len(frame), limit_bytes=max_bytes)
    return frame.decode("utf-8")


async def read_attachment(path: Path, *, max_bytes: int = WS_MAX_MESSAGE_BYTES) -> Attachment:
    """Read a file off the event loop and wrap it as an attachment."""
    try:
        content = await asyncio.to_thread(path.read_bytes)
    except OSError as exc:
        raise AttachmentReadError(path=str(path), reason=exc.strerror or str(exc)) from exc
    # Raw size alone already rules the file out; skip base64-encoding it.
    if max_bytes > 0 and len(content) > max_bytes:
        raise PayloadTooLargeError(size_bytes=len(content), limit_bytes=max_bytes)
    return Attachment.from_bytes(path.name, content)


class ChatClient:
    """One participant connection.

    Outbound frames go through a single writer queue so the server sees them in
    the order they were produced. Inbound frames are fed to the reconciler in
    arrival order.
    """

    def __init__(
        self,
        url: str,
        *,
        on_render: RenderFn | None = None,
        on_typing: TypingFn | None = None,
        on_error: ErrorFn | None = None,
        max_message_bytes: int = WS_MAX_MESSAGE_BYTES,
        handshake_timeout_s: float = DEFAULT_HANDSHAKE_TIMEOUT_S,
    ) -> None:
        self.url = url
        self.reconciler = ChatReconciler(on_render=on_render, on_typing=on_typing)
        self.debouncer = TypingDebouncer(self._emit_presence)
        self._on_error = on_error
        self._max_bytes = int(max_message_bytes)
        self._handshake_timeout_s = float(handshake_timeout_s)

        self._ws: Any = None
        self._outbox: asyncio.Queue[str] = asyncio.Queue()
        self._identified = asyncio.Event()
        self._reader_task: asyncio.Task | None = None
        self._writer_task: asyncio.Task | None = None

    @property
    def connected(self) -> bool:
        return self._ws is not None and self._identified.is_set()

    @property
    def max_receive_bytes(self) -> int | None:
        """Inbound frame cap: what we may send plus the relay's sender stamp."""
        if self._max_bytes <= 0:
            return None
        return self._max_bytes + WS_RELAY_OVERHEAD_BYTES

    @property
    def self_id(self) -> str | None:
        return self.reconciler.self_id

    async def __aenter__(self) -> ChatClient:
        await self.connect()
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.close()

    async def connect(self) -> str:
        """Open the socket and wait for the server to assign our id."""
        self._ws = await websockets.connect(self.url, max_size=self.max_receive_bytes)
        self._reader_task = asyncio.create_task(self._reader_loop())
        self._writer_task = asyncio.create_task(self._writer_loop())
        try:
            await asyncio.wait_for(self._identified.wait(), timeout=self._handshake_timeout_s)
        except TimeoutError:
            await self.close()
            raise
        logger.info("connected as %s", self.self_id)
        return self.self_id or ""

    async def close(self) -> None:
        for task in (self._reader_task, self._writer_task):
            if task is not None:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError, Exception):
                    await task
        self._reader_task = None
        self._writer_task = None
        if self._ws is not None:
            with contextlib.suppress(Exception):
                await self._ws.close()
            self._ws = None
        self._connection_lost()

    def input_changed(self, value: str | None) -> None:
        self.debouncer.input_changed(value)

    async def send_message(self, text: str) -> RenderedItem | None:
        text = (text or "").strip()
        if not text:
            return None
        self.reconciler.ensure_can_send()
        frame = encode_frame(WS_EVENT_CHAT_MESSAGE, text, max_bytes=self._max_bytes)
        item = self.reconciler.render_local_message(text)
        self._outbox.put_nowait(frame)
        self.debouncer.message_sent()
        return item

    async def send_attachment(self, path: Path) -> RenderedItem:
        self.reconciler.ensure_can_send()
        attachment = await read_attachment(path, max_bytes=self._max_bytes)
        frame = encode_frame(WS_EVENT_CHAT_ATTACHMENT, attachment.to_payload(), max_bytes=self._max_bytes)
        item = self.reconciler.render_local_attachment(attachment)
        self._outbox.put_nowait(frame)
        return item

    def _emit_presence(self, event_type: str) -> None:
        if self._ws is None:
            logger.debug("not connected; dropping %s", event_type)
            return
        self._outbox.put_nowait(encode_frame(event_type, None, max_bytes=self._max_bytes))

    def _connection_lost(self) -> None:
        self._identified.clear()
        self.debouncer.reset()
        self.reconciler.connection_lost()

    def _dispatch(self, raw: str | bytes) -> None:
        try:
            msg = orjson.loads(raw)
        except orjson.JSONDecodeError:
            logger.debug("ignoring undecodable frame")
            return
        if not isinstance(msg, dict) or not isinstance(msg.get(WS_KEY_TYPE), str):
            logger.debug("ignoring frame without a type")
            return

        msg_type = msg[WS_KEY_TYPE]
        payload = msg.get(WS_KEY_PAYLOAD)
        if msg_type == WS_EVENT_ERROR:
            logger.warning("server error: %s", payload)
            if self._on_error is not None:
                self._on_error(payload if isinstance(payload, dict) else {})
            return

        self.reconciler.handle_event(msg_type, payload)
        if msg_type == WS_EVENT_CONNECT and self.reconciler.self_id is not None:
            self._identified.set()

    async def _reader_loop(self) -> None:
        try:
            async for raw in self._ws:
                self._dispatch(raw)
        except websockets.exceptions.ConnectionClosed:
            logger.info("connection closed by server")
        finally:
            self._connection_lost()

    async def _writer_loop(self) -> None:
        while True:
            frame = await self._outbox.get()
            try:
                await self._ws.send(frame)
            except websockets.exceptions.ConnectionClosed:
                logger.debug("connection closed; dropping outbound frame")
                return


__all__ = ["ChatClient", "encode_frame", "read_attachment"]
