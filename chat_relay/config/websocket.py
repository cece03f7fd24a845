"""WebSocket protocol configuration and constants."""

from __future__ import annotations

WS_ENDPOINT_PATH = "/ws"

# Envelope keys
WS_KEY_TYPE = "type"
WS_KEY_PAYLOAD = "payload"

# Payload keys
WS_KEY_ID = "id"
WS_KEY_SENDER_ID = "senderId"
WS_KEY_TEXT = "text"
WS_KEY_ATTACHMENT = "attachment"

# Event types
WS_EVENT_CONNECT = "connect"
WS_EVENT_CHAT_MESSAGE = "chat message"
WS_EVENT_CHAT_ATTACHMENT = "chat attachment"
WS_EVENT_TYPING = "typing"
WS_EVENT_STOP_TYPING = "stop typing"
WS_EVENT_ERROR = "error"

# Largest single frame a client may send and the server will accept.
WS_MAX_MESSAGE_BYTES = 10_000_000

# A recipient that cannot take a frame within this window is skipped.
WS_SEND_TIMEOUT_S = 5.0

# Headroom over WS_MAX_MESSAGE_BYTES for the sender stamp the relay adds to a
# forwarded frame. Clients must accept frames this much larger than they send.
WS_RELAY_OVERHEAD_BYTES = 1024

# Close codes
WS_CLOSE_SLOW_CONSUMER_CODE = 1008

# Errors (payload.code values)
WS_ERROR_INVALID_MESSAGE = "invalid_message"
WS_ERROR_PAYLOAD_TOO_LARGE = "payload_too_large"
WS_ERROR_INTERNAL = "internal_error"

__all__ = [
    "WS_CLOSE_SLOW_CONSUMER_CODE",
    "WS_ENDPOINT_PATH",
    "WS_ERROR_INTERNAL",
    "WS_ERROR_INVALID_MESSAGE",
    "WS_ERROR_PAYLOAD_TOO_LARGE",
    "WS_EVENT_CHAT_ATTACHMENT",
    "WS_EVENT_CHAT_MESSAGE",
    "WS_EVENT_CONNECT",
    "WS_EVENT_ERROR",
    "WS_EVENT_STOP_TYPING",
    "WS_EVENT_TYPING",
    "WS_KEY_ATTACHMENT",
    "WS_KEY_ID",
    "WS_KEY_PAYLOAD",
    "WS_KEY_SENDER_ID",
    "WS_KEY_TEXT",
    "WS_KEY_TYPE",
    "WS_MAX_MESSAGE_BYTES",
    "WS_RELAY_OVERHEAD_BYTES",
    "WS_SEND_TIMEOUT_S",
]
