"""Runtime dependency construction (connection registry + broadcast relay)."""

from __future__ import annotations

import logging

from chat_relay.state import RuntimeDeps
from chat_relay.state.settings import AppSettings
from chat_relay.relay.broadcast import BroadcastRelay
from chat_relay.handlers.connections import ConnectionRegistry

from .settings import load_settings

logger = logging.getLogger(__name__)


def build_runtime_deps(settings: AppSettings | None = None) -> RuntimeDeps:
    settings = settings or load_settings()
    registry = ConnectionRegistry()
    relay = BroadcastRelay(
        registry,
        send_timeout_s=settings.websocket.send_timeout_s,
        max_frame_bytes=settings.websocket.max_relay_frame_bytes,
    )
    return RuntimeDeps(registry=registry, relay=relay, settings=settings)


__all__ = ["RuntimeDeps", "build_runtime_deps"]
