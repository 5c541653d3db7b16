"""Gmail message parser: header lookup, MIME tree walking, base64url decoding."""

from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Iterator
from typing import Any

from gmail_downloader.core.exceptions import ApiError, DecodeError
from gmail_downloader.core.models import AttachmentPart, EmailMessage

logger = logging.getLogger(__name__)


class GmailParser:
    """Parses raw Gmail API message dicts into EmailMessage objects."""

    def parse(self, raw_message: dict[str, Any]) -> EmailMessage:
        """Parse a raw Gmail API message dict (format=full).

        Raises:
            ApiError: If the response lacks a message id or has a malformed
                internal date.
        """
        try:
            message_id = raw_message["id"]
            payload = raw_message.get("payload", {})
            return EmailMessage(
                message_id=message_id,
                thread_id=raw_message.get("threadId", ""),
                subject=self._extract_subject(payload),
                internal_date=int(raw_message.get("internalDate", 0)),
                attachments=tuple(self._walk_parts(payload)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ApiError(
                f"Unexpected message structure for {raw_message.get('id', '?')}: {e}"
            ) from e

    @staticmethod
    def _extract_subject(payload: dict[str, Any]) -> str:
        for header in payload.get("headers", []):
            if header.get("name") == "Subject":
                return header.get("value", "")
        return ""

    def _walk_parts(self, part: dict[str, Any]) -> Iterator[AttachmentPart]:
        """Yield every part with a filename, depth-first in message order."""
        for sub_part in part.get("parts", []):
            filename = sub_part.get("filename", "")
            if filename:
                body = sub_part.get("body", {})
                yield AttachmentPart(
                    filename=filename,
                    attachment_id=body.get("attachmentId", ""),
                    data=body.get("data"),
                    mime_type=sub_part.get("mimeType", ""),
                    size=int(body.get("size", 0)),
                )
            else:
                yield from self._walk_parts(sub_part)

    @staticmethod
    def decode_data(data: str) -> bytes:
        """Decode base64url attachment data (RFC 4648 §5).

        Raises:
            DecodeError: If the data contains characters outside the URL-safe
                alphabet or has an impossible length.
        """
        padded = data + "=" * (4 - len(data) % 4) if len(data) % 4 else data
        try:
            return base64.b64decode(padded, altchars=b"-_", validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"Error decoding attachment: {e}") from e
