"""Shared error types for the chat relay."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PayloadTooLargeError(Exception):
    """Raised when an outbound frame would exceed the transport frame cap."""

    size_bytes: int
    limit_bytes: int

    def __str__(self) -> str:
        return f"payload of {self.size_bytes} bytes exceeds the {self.limit_bytes} byte limit"


@dataclass(frozen=True, slots=True)
class IdentityPendingError(Exception):
    """Raised when a send is attempted before the handshake assigned an id."""

    def __str__(self) -> str:
        return "connection identity not assigned yet; wait for the handshake to complete"


@dataclass(frozen=True, slots=True)
class AttachmentReadError(Exception):
    """Raised when an attachment file cannot be read from disk."""

    path: str
    reason: str

    def __str__(self) -> str:
        return f"cannot read attachment {self.path!r}: {self.reason}"


__all__ = ["AttachmentReadError", "IdentityPendingError", "PayloadTooLargeError"]
