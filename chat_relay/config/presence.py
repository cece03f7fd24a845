"""Presence and system-message constants shared by server and client."""

from __future__ import annotations

# Sender id stamped on server-authored messages.
SYSTEM_SENDER_ID = "system"
JOIN_NOTICE_TEXT = "A new user has joined the chat"

# Quiet period after the last keystroke before typing is considered over.
TYPING_TIMEOUT_S = 1.2
# Extra delay on each watchdog so it fires strictly after the quiet period.
TYPING_WATCHDOG_SLACK_S = 0.01

TYPING_ONE_TEXT = "Someone is typing…"
TYPING_MANY_TEXT = "Multiple people are typing…"

DEFAULT_ATTACHMENT_NAME = "file"
DEFAULT_ATTACHMENT_MIME = "application/octet-stream"

__all__ = [
    "DEFAULT_ATTACHMENT_MIME",
    "DEFAULT_ATTACHMENT_NAME",
    "JOIN_NOTICE_TEXT",
    "SYSTEM_SENDER_ID",
    "TYPING_MANY_TEXT",
    "TYPING_ONE_TEXT",
    "TYPING_TIMEOUT_S",
    "TYPING_WATCHDOG_SLACK_S",
]
