"""Attachment value object.

The wire form is `{name, mimeType, sizeBytes, data}` where `data` is the file
content in base64. Inbound attachments are parsed permissively: any missing or
mistyped field falls back to a default so a malformed peer can never break
rendering.
"""

from __future__ import annotations

import base64
import binascii
import mimetypes
from typing import Any
from dataclasses import dataclass

from chat_relay.config.presence import DEFAULT_ATTACHMENT_MIME, DEFAULT_ATTACHMENT_NAME

KEY_NAME = "name"
KEY_MIME_TYPE = "mimeType"
KEY_SIZE_BYTES = "sizeBytes"
KEY_DATA = "data"

_BYTES_PER_KB = 1024


def estimate_b64_decoded_bytes(s: str) -> int:
    """Estimate decoded byte length of a base64 string without decoding it."""
    s = (s or "").strip()
    if not s:
        return 0

    padding = 0
    if s.endswith("=="):
        padding = 2
    elif s.endswith("="):
        padding = 1

    # base64 expands 3 bytes -> 4 chars
    return max(0, (len(s) * 3) // 4 - padding)


def _str_field(payload: dict[str, Any], key: str, default: str) -> str:
    value = payload.get(key)
    if isinstance(value, str) and value.strip():
        return value
    return default


def _int_field(payload: dict[str, Any], key: str) -> int:
    value = payload.get(key)
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return max(0, int(value))
    return 0


@dataclass(frozen=True, slots=True)
class Attachment:
    name: str
    mime_type: str
    size_bytes: int
    data: str

    @classmethod
    def from_bytes(cls, name: str, content: bytes, *, mime_type: str | None = None) -> Attachment:
        guessed, _encoding = mimetypes.guess_type(name)
        return cls(
            name=name or DEFAULT_ATTACHMENT_NAME,
            mime_type=mime_type or guessed or DEFAULT_ATTACHMENT_MIME,
            size_bytes=len(content),
            data=base64.b64encode(content).decode("ascii"),
        )

    @classmethod
    def from_payload(cls, payload: Any) -> Attachment:
        if not isinstance(payload, dict):
            payload = {}
        data = payload.get(KEY_DATA)
        return cls(
            name=_str_field(payload, KEY_NAME, DEFAULT_ATTACHMENT_NAME),
            mime_type=_str_field(payload, KEY_MIME_TYPE, DEFAULT_ATTACHMENT_MIME),
            size_bytes=_int_field(payload, KEY_SIZE_BYTES),
            data=data if isinstance(data, str) else "",
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            KEY_NAME: self.name,
            KEY_MIME_TYPE: self.mime_type,
            KEY_SIZE_BYTES: self.size_bytes,
            KEY_DATA: self.data,
        }

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == "application/pdf"

    def decode(self) -> bytes:
        """Return the raw content; malformed base64 decodes to empty bytes."""
        try:
            return base64.b64decode(self.data, validate=True)
        except (binascii.Error, ValueError):
            return b""

    def describe(self) -> str:
        if self.is_image:
            return f"[image] {self.name}"
        if self.is_pdf:
            return f"[pdf] {self.name}"
        size = self.size_bytes or estimate_b64_decoded_bytes(self.data)
        return f"{self.name} ({round(size / _BYTES_PER_KB)} KB)"


__all__ = ["Attachment", "estimate_b64_decoded_bytes"]
