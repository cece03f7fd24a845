#!/usr/bin/env python3
"""Terminal chat client.

Lines typed on stdin are sent as chat messages. `/file <path>` sends an
attachment and `/quit` leaves.
"""

from __future__ import annotations

import sys
import asyncio
import argparse
from pathlib import Path

import websockets

from chat_relay.runtime.logging import configure_logging
from chat_relay.config.presence import DEFAULT_ATTACHMENT_NAME
from chat_relay.config.websocket import WS_ENDPOINT_PATH
from chat_relay.errors import AttachmentReadError, IdentityPendingError, PayloadTooLargeError

from .session import ChatClient
from .reconciler import Alignment, RenderedItem

FILE_COMMAND = "/file"
QUIT_COMMAND = "/quit"

_SHORT_ID_LEN = 6


def ws_url(server: str, secure: bool) -> str:
    """Generate a WebSocket URL for the relay endpoint."""
    server = (server or "").strip().rstrip("/")
    if server.startswith(("ws://", "wss://")):
        return server if server.endswith(WS_ENDPOINT_PATH) else f"{server}{WS_ENDPOINT_PATH}"
    if server.startswith(("http://", "https://")):
        scheme = "wss" if server.startswith("https://") or secure else "ws"
        host = server.split("://", 1)[1]
        return f"{scheme}://{host}{WS_ENDPOINT_PATH}"
    scheme = "wss" if secure else "ws"
    return f"{scheme}://{server}{WS_ENDPOINT_PATH}"


def format_item(item: RenderedItem) -> str:
    body = item.attachment.describe() if item.attachment is not None else item.text
    if item.alignment is Alignment.SYSTEM:
        return f"  -- {body} --"
    if item.alignment is Alignment.SELF:
        return f"{'you':>8} > {body}"
    sender = (item.sender_id or "unknown")[:_SHORT_ID_LEN]
    return f"{sender:>8} > {body}"


def save_attachment(item: RenderedItem, download_dir: Path) -> Path | None:
    if item.attachment is None or item.alignment is Alignment.SELF:
        return None
    target = download_dir / (Path(item.attachment.name).name or DEFAULT_ATTACHMENT_NAME)
    target.write_bytes(item.attachment.decode())
    return target


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Join a chat relay from the terminal")
    p.add_argument("--server", default="localhost:3000", help="host:port or ws://host:port")
    p.add_argument("--secure", action="store_true")
    p.add_argument("--download-dir", type=Path, default=None, help="Save received attachments here")
    return p.parse_args(argv)


def _make_render(download_dir: Path | None):
    def _render(item: RenderedItem) -> None:
        print(format_item(item))
        if download_dir is None:
            return
        try:
            saved = save_attachment(item, download_dir)
        except OSError as exc:
            print(f"cannot save attachment: {exc}", file=sys.stderr)
            return
        if saved is not None:
            print(f"{'':>8}   saved to {saved}")

    return _render


def _show_typing(indicator: str) -> None:
    if indicator:
        print(f"{'':>8}   {indicator}")


async def _handle_line(client: ChatClient, line: str) -> bool:
    if line == QUIT_COMMAND:
        return False
    try:
        if line.startswith(FILE_COMMAND + " "):
            await client.send_attachment(Path(line[len(FILE_COMMAND) + 1 :].strip()).expanduser())
        else:
            # A finished line is one keystroke burst: start typing, then the send stops it.
            client.input_changed(line)
            await client.send_message(line)
    except (AttachmentReadError, PayloadTooLargeError, IdentityPendingError) as exc:
        print(f"error: {exc}", file=sys.stderr)
    return True


async def run(args: argparse.Namespace) -> int:
    if args.download_dir is not None:
        args.download_dir.mkdir(parents=True, exist_ok=True)

    client = ChatClient(
        ws_url(args.server, args.secure),
        on_render=_make_render(args.download_dir),
        on_typing=_show_typing,
        on_error=lambda payload: print(f"server error: {payload.get('message', '')}", file=sys.stderr),
    )
    try:
        await client.connect()
    except (OSError, TimeoutError, websockets.exceptions.WebSocketException) as exc:
        print(f"cannot connect to {client.url}: {exc}", file=sys.stderr)
        return 1

    try:
        while True:
            raw = await asyncio.to_thread(sys.stdin.readline)
            if not raw:
                break
            line = raw.strip()
            if not line:
                continue
            if not await _handle_line(client, line):
                break
    finally:
        await client.close()
    return 0


def main() -> None:
    configure_logging()
    try:
        sys.exit(asyncio.run(run(parse_args())))
    except KeyboardInterrupt:
        sys.exit(130)


__all__ = ["format_item", "main", "parse_args", "run", "save_attachment", "ws_url"]
