from __future__ import annotations

from pathlib import Path

import orjson
import pytest

from chat_relay.client.session import ChatClient, encode_frame, read_attachment
from chat_relay.client.reconciler import Alignment
from chat_relay.errors import AttachmentReadError, IdentityPendingError, PayloadTooLargeError
from chat_relay.config.websocket import WS_MAX_MESSAGE_BYTES, WS_RELAY_OVERHEAD_BYTES


def _frame(msg_type: str, payload: object) -> str:
    return orjson.dumps({"type": msg_type, "payload": payload}).decode("utf-8")


def test_encode_frame_enforces_limit() -> None:
    assert orjson.loads(encode_frame("chat message", "hi")) == {"type": "chat message", "payload": "hi"}
    with pytest.raises(PayloadTooLargeError) as exc:
        encode_frame("chat message", "x" * 100, max_bytes=50)
    assert exc.value.limit_bytes == 50
    assert exc.value.size_bytes > 50


@pytest.mark.asyncio
async def test_read_attachment(tmp_path: Path) -> None:
    path = tmp_path / "hello.txt"
    path.write_bytes(b"hi")
    att = await read_attachment(path)
    assert att.name == "hello.txt"
    assert att.mime_type == "text/plain"
    assert att.size_bytes == 2
    assert att.decode() == b"hi"


@pytest.mark.asyncio
async def test_read_missing_attachment_fails(tmp_path: Path) -> None:
    with pytest.raises(AttachmentReadError):
        await read_attachment(tmp_path / "nope.bin")


@pytest.mark.asyncio
async def test_oversized_attachment_fails_before_anything_is_sent(tmp_path: Path) -> None:
    path = tmp_path / "big.bin"
    path.write_bytes(b"\0" * 10_000_001)
    client = ChatClient("ws://unused/ws")
    client.reconciler.assign_identity("s1")

    with pytest.raises(PayloadTooLargeError):
        await client.send_attachment(path)

    assert client.reconciler.rendered == []
    assert client._outbox.empty()


@pytest.mark.asyncio
async def test_attachment_under_raw_cap_but_over_frame_cap_fails(tmp_path: Path) -> None:
    path = tmp_path / "mid.bin"
    # base64 inflates 4/3, so this fits raw but not once encoded.
    path.write_bytes(b"\0" * 900)
    client = ChatClient("ws://unused/ws", max_message_bytes=1000)
    client.reconciler.assign_identity("s1")

    with pytest.raises(PayloadTooLargeError):
        await client.send_attachment(path)
    assert client._outbox.empty()


@pytest.mark.asyncio
async def test_send_before_handshake_is_rejected() -> None:
    client = ChatClient("ws://unused/ws")
    with pytest.raises(IdentityPendingError):
        await client.send_message("hello")
    assert client.reconciler.rendered == []
    assert client._outbox.empty()


@pytest.mark.asyncio
async def test_optimistic_render_then_echo_is_dropped() -> None:
    rendered = []
    client = ChatClient("ws://unused/ws", on_render=rendered.append)
    client._dispatch(_frame("connect", {"id": "s1"}))
    assert client.self_id == "s1"

    item = await client.send_message("  hello  ")
    assert item is not None
    assert (item.sender_id, item.text, item.alignment) == ("s1", "hello", Alignment.SELF)
    assert orjson.loads(client._outbox.get_nowait()) == {"type": "chat message", "payload": "hello"}

    client._dispatch(_frame("chat message", {"senderId": "s1", "text": "hello"}))
    client._dispatch(_frame("chat message", {"senderId": "s2", "text": "hey"}))
    assert [(i.sender_id, i.text) for i in rendered] == [("s1", "hello"), ("s2", "hey")]


@pytest.mark.asyncio
async def test_blank_message_is_not_sent() -> None:
    client = ChatClient("ws://unused/ws")
    client.reconciler.assign_identity("s1")
    assert await client.send_message("   ") is None
    assert client._outbox.empty()


def test_server_errors_reach_callback_and_junk_is_ignored() -> None:
    errors = []
    client = ChatClient("ws://unused/ws", on_error=errors.append)
    client._dispatch(_frame("error", {"code": "payload_too_large", "message": "too big"}))
    client._dispatch("not json")
    client._dispatch(orjson.dumps([1, 2]))
    assert errors == [{"code": "payload_too_large", "message": "too big"}]
    assert client.reconciler.rendered == []


def test_presence_is_dropped_while_disconnected() -> None:
    client = ChatClient("ws://unused/ws")
    client._emit_presence("typing")
    assert client._outbox.empty()


@pytest.mark.asyncio
async def test_typing_then_send_queues_presence_around_the_message() -> None:
    client = ChatClient("ws://unused/ws")
    client._dispatch(_frame("connect", {"id": "s1"}))
    client._ws = object()

    client.input_changed("h")
    client.input_changed("he")
    client.input_changed("hello")
    await client.send_message("hello")
    # Input cleared after the send; already idle, so nothing more goes out.
    client.input_changed("")

    frames = []
    while not client._outbox.empty():
        frames.append(orjson.loads(client._outbox.get_nowait()))
    assert [f["type"] for f in frames] == ["typing", "chat message", "stop typing"]
    assert frames[0] == {"type": "typing", "payload": {}}
    assert frames[1]["payload"] == "hello"
    assert not client.debouncer.is_typing


@pytest.mark.asyncio
async def test_clearing_input_queues_stop_typing() -> None:
    client = ChatClient("ws://unused/ws")
    client._dispatch(_frame("connect", {"id": "s1"}))
    client._ws = object()

    client.input_changed("draft")
    client.input_changed("   ")

    frames = [orjson.loads(client._outbox.get_nowait()) for _ in range(client._outbox.qsize())]
    assert [f["type"] for f in frames] == ["typing", "stop typing"]


def test_receive_cap_leaves_room_for_the_sender_stamp() -> None:
    assert ChatClient("ws://unused/ws").max_receive_bytes == WS_MAX_MESSAGE_BYTES + WS_RELAY_OVERHEAD_BYTES
    assert ChatClient("ws://unused/ws", max_message_bytes=0).max_receive_bytes is None
