"""Typed runtime state objects for dependency wiring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from chat_relay.relay.broadcast import BroadcastRelay
    from chat_relay.state.settings import AppSettings
    from chat_relay.handlers.connections import ConnectionRegistry


@dataclass(slots=True)
class RuntimeDeps:
    registry: ConnectionRegistry
    relay: BroadcastRelay
    settings: AppSettings

    async def shutdown(self) -> None:
        live = self.registry.count()
        if live:
            logger.info("runtime shutdown with %s live connections", live)
        self.registry.clear()


__all__ = ["RuntimeDeps"]
