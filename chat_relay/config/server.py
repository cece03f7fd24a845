"""Listen address configuration."""

from __future__ import annotations

ENV_PORT = "PORT"
DEFAULT_PORT = 3000

SERVER_HOST = "0.0.0.0"

__all__ = ["DEFAULT_PORT", "ENV_PORT", "SERVER_HOST"]
