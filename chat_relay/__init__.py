"""Real-time group chat relay (FastAPI WebSocket server + presence-aware client)."""

__all__: list[str] = []
