from __future__ import annotations

import pytest

from chat_relay.models import Attachment
from chat_relay.errors import IdentityPendingError
from chat_relay.client.reconciler import Alignment, RenderedItem, ChatReconciler


def _reconciler(self_id: str | None = "s1") -> tuple[ChatReconciler, list[RenderedItem], list[str]]:
    rendered: list[RenderedItem] = []
    indicators: list[str] = []
    reconciler = ChatReconciler(on_render=rendered.append, on_typing=indicators.append)
    if self_id is not None:
        reconciler.handle_event("connect", {"id": self_id})
    return reconciler, rendered, indicators


def test_join_then_hello_scenario() -> None:
    a, a_rendered, _ = _reconciler("s1")
    b, b_rendered, _ = _reconciler("s2")

    a.handle_event("chat message", {"senderId": "system", "text": "A new user has joined the chat"})
    assert a_rendered[-1] == RenderedItem("system", Alignment.SYSTEM, text="A new user has joined the chat")

    mine = a.render_local_message("hello")
    assert (mine.sender_id, mine.text, mine.alignment) == ("s1", "hello", Alignment.SELF)

    echo = {"senderId": "s1", "text": "hello"}
    assert b.handle_event("chat message", echo) == RenderedItem("s1", Alignment.PEER, text="hello")
    assert a.handle_event("chat message", echo) is None

    assert [i.text for i in a_rendered] == ["A new user has joined the chat", "hello"]
    assert [i.text for i in b_rendered] == ["hello"]


def test_send_before_handshake_is_rejected() -> None:
    reconciler, rendered, _ = _reconciler(self_id=None)
    with pytest.raises(IdentityPendingError):
        reconciler.render_local_message("too early")
    with pytest.raises(IdentityPendingError):
        reconciler.render_local_attachment(Attachment.from_bytes("a.txt", b"x"))
    assert rendered == []


def test_attachment_echo_suppressed_and_peer_rendered() -> None:
    reconciler, rendered, _ = _reconciler("s1")
    body = Attachment.from_bytes("cat.png", b"\x89PNG").to_payload()
    assert reconciler.handle_event("chat attachment", {"senderId": "s1", "attachment": body}) is None
    item = reconciler.handle_event("chat attachment", {"senderId": "s9", "attachment": body})
    assert item is not None
    assert item.alignment is Alignment.PEER
    assert item.attachment == Attachment.from_payload(body)
    assert rendered == [item]


def test_typing_set_tracks_peers_and_indicator_phrasing() -> None:
    reconciler, _rendered, indicators = _reconciler("s1")
    reconciler.handle_event("typing", {"senderId": "s2"})
    assert reconciler.typers == {"s2"}
    assert indicators[-1] == "Someone is typing…"

    reconciler.handle_event("typing", {"senderId": "s3"})
    assert indicators[-1] == "Multiple people are typing…"

    reconciler.handle_event("stop typing", {"senderId": "s2"})
    assert reconciler.typers == {"s3"}
    assert indicators[-1] == "Someone is typing…"

    reconciler.handle_event("stop typing", {"senderId": "s3"})
    assert reconciler.typing_indicator() == ""
    assert indicators[-1] == ""


def test_own_typing_echo_ignored() -> None:
    reconciler, _rendered, indicators = _reconciler("s1")
    reconciler.handle_event("typing", {"senderId": "s1"})
    assert reconciler.typers == frozenset()
    assert indicators == []


def test_authored_event_clears_typer() -> None:
    reconciler, _rendered, _ = _reconciler("s1")
    reconciler.handle_event("typing", {"senderId": "s2"})
    reconciler.handle_event("typing", {"senderId": "s3"})
    reconciler.handle_event("chat message", {"senderId": "s2", "text": "yo"})
    reconciler.handle_event("chat attachment", {"senderId": "s3", "attachment": {}})
    assert reconciler.typers == frozenset()


def test_disconnect_stop_typing_removes_peer() -> None:
    reconciler, _rendered, _ = _reconciler("s1")
    reconciler.handle_event("typing", {"senderId": "s2"})
    # The server synthesises this when s2 drops.
    reconciler.handle_event("stop typing", {"senderId": "s2"})
    assert "s2" not in reconciler.typers


def test_malformed_payloads_degrade_to_defaults() -> None:
    reconciler, rendered, _ = _reconciler("s1")
    item = reconciler.handle_event("chat message", None)
    assert item == RenderedItem(None, Alignment.PEER, text="")
    item = reconciler.handle_event("chat message", {"senderId": "s2"})
    assert item is not None and item.text == ""
    item = reconciler.handle_event("chat attachment", "garbage")
    assert item is not None
    assert item.attachment == Attachment(name="file", mime_type="application/octet-stream", size_bytes=0, data="")
    reconciler.handle_event("typing", "garbage")
    reconciler.handle_event("stop typing", None)
    reconciler.handle_event("mystery", {"x": 1})
    assert reconciler.typers == frozenset()
    assert len(rendered) == 3


def test_connection_lost_forgets_identity_and_presence() -> None:
    reconciler, _rendered, indicators = _reconciler("s1")
    reconciler.handle_event("typing", {"senderId": "s2"})
    reconciler.connection_lost()
    assert reconciler.self_id is None
    assert reconciler.typers == frozenset()
    assert indicators[-1] == ""

    # Reconnect hands out a new id; old echoes are now peer messages.
    reconciler.handle_event("connect", {"id": "s7"})
    item = reconciler.handle_event("chat message", {"senderId": "s1", "text": "old"})
    assert item is not None and item.alignment is Alignment.PEER
