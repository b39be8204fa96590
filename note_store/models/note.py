"""Research note record keyed by the page URL it annotates."""

from __future__ import annotations

import base64
import binascii
from typing import ClassVar
from urllib.parse import urlsplit, urlunsplit

from pydantic import Field

from .record import Record


def normalize_url(url: str) -> str:
    """Strip surrounding whitespace and lower-case the scheme and host.

    Strings ``urlsplit`` rejects (e.g. an unterminated IPv6 host) are only stripped.
    """
    value = url.strip()
    if not value:
        return ""
    try:
        parts = urlsplit(value)
    except ValueError:
        return value
    return urlunsplit(
        (parts.scheme.lower(), parts.netloc.lower(), parts.path, parts.query, parts.fragment)
    )


def encode_url(url: str) -> str:
    """Return the unpadded URL-safe base64 key for ``url`` ("" for a blank URL)."""
    normalized = normalize_url(url)
    if not normalized:
        return ""
    return base64.urlsafe_b64encode(normalized.encode("utf-8")).decode("ascii").rstrip("=")


def decode_key(key: str) -> str:
    """Invert :func:`encode_url`; raises ``ValueError`` for malformed keys."""
    padded = key + "=" * (-len(key) % 4)
    try:
        return base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError) as exc:
        raise ValueError(f"Malformed note key: {key!r}") from exc


class Note(Record):
    collection_name: ClassVar[str] = "notes"

    url: str
    title: str = ""
    notes: str = ""
    tags: tuple[str, ...] = Field(default_factory=tuple)
    category: str = ""
    status: str = ""
    priority: int = 0

    def record_id(self) -> str:
        return encode_url(self.url)


__all__ = ["Note", "decode_key", "encode_url", "normalize_url"]
