"""Runtime settings (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass

from chat_relay.config.websocket import WS_RELAY_OVERHEAD_BYTES


@dataclass(frozen=True, slots=True)
class ServerSettings:
    host: str
    port: int


@dataclass(frozen=True, slots=True)
class WebSocketSettings:
    max_message_bytes: int
    send_timeout_s: float
    relay_overhead_bytes: int = WS_RELAY_OVERHEAD_BYTES

    @property
    def max_relay_frame_bytes(self) -> int:
        """Largest frame the relay may forward once it has stamped the sender."""
        if self.max_message_bytes <= 0:
            return 0
        return self.max_message_bytes + max(0, self.relay_overhead_bytes)


@dataclass(frozen=True, slots=True)
class AppSettings:
    server: ServerSettings
    websocket: WebSocketSettings


__all__ = [
    "AppSettings",
    "ServerSettings",
    "WebSocketSettings",
]
