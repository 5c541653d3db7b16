"""Frozen dataclasses for the Gmail downloader domain model."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class OAuthClientConfig:
    """OAuth client registration loaded from a client-secret document."""

    client_id: str
    client_secret: str
    scopes: tuple[str, ...]
    auth_uri: str
    token_uri: str
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)


@dataclass(frozen=True)
class MessageStub:
    """Lightweight message reference from the Gmail search API."""

    message_id: str
    thread_id: str


@dataclass(frozen=True)
class AttachmentPart:
    """A message part that carries a filename.

    Large attachments are referenced by ``attachment_id`` and fetched
    separately; small ones may arrive inline in ``data``.
    """

    filename: str
    attachment_id: str = ""
    data: str | None = None
    mime_type: str = ""
    size: int = 0


@dataclass(frozen=True)
class EmailMessage:
    """A fetched message reduced to what the downloader needs."""

    message_id: str
    thread_id: str = ""
    subject: str = ""
    internal_date: int = 0
    attachments: tuple[AttachmentPart, ...] = field(default_factory=tuple)

    @property
    def delivered_at(self) -> int:
        """Delivery time in whole seconds since the epoch."""
        return self.internal_date // 1000


@dataclass(frozen=True)
class Attachment:
    """Decoded attachment payload ready to be written."""

    filename: str
    data: bytes
    internal_date: int = 0

    @property
    def mtime(self) -> int:
        return self.internal_date // 1000


@dataclass(frozen=True)
class DownloadSummary:
    """Totals reported at the end of a download run."""

    messages: int
    attachments: int


@dataclass
class DownloadProgress:
    """Mutable progress tracker for status reporting."""

    messages: int = 0
    attachments: int = 0
    pages: int = 0
    last_file: str = ""
