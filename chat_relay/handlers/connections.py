"""Live connection registry.

Every accepted WebSocket gets an opaque id for as long as it stays connected.
Membership is the only shared state on the server: it is mutated on connect and
disconnect and read by the broadcast relay through `snapshot()`.
"""

from __future__ import annotations

import secrets
from typing import Any
from dataclasses import dataclass
from collections.abc import Callable

IdFactory = Callable[[], str]

# 15 random bytes -> 20 url-safe characters.
_ID_ENTROPY_BYTES = 15


def new_connection_id() -> str:
    return secrets.token_urlsafe(_ID_ENTROPY_BYTES)


@dataclass(slots=True, eq=False)
class Connection:
    id: str
    ws: Any


class ConnectionRegistry:
    def __init__(self, *, id_factory: IdFactory | None = None) -> None:
        self._id_factory = id_factory or new_connection_id
        self._active: dict[str, Connection] = {}

    def register(self, ws: Any) -> Connection:
        """Admit a transport and assign it an id unused by any live connection."""
        conn_id = self._id_factory()
        while not conn_id or conn_id in self._active:
            conn_id = self._id_factory()
        conn = Connection(id=conn_id, ws=ws)
        self._active[conn_id] = conn
        return conn

    def unregister(self, conn: Connection) -> bool:
        current = self._active.get(conn.id)
        if current is not conn:
            return False
        del self._active[conn.id]
        return True

    def get(self, conn_id: str) -> Connection | None:
        return self._active.get(conn_id)

    def is_live(self, conn: Connection) -> bool:
        return self._active.get(conn.id) is conn

    def snapshot(self) -> list[Connection]:
        return list(self._active.values())

    def ids(self) -> set[str]:
        return set(self._active)

    def count(self) -> int:
        return len(self._active)

    def clear(self) -> None:
        self._active.clear()


__all__ = ["Connection", "ConnectionRegistry", "new_connection_id"]
