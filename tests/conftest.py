"""Shared fixtures for Gmail Downloader tests."""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any

import pytest

from gmail_downloader.config.settings import GmailDownloaderSettings
from gmail_downloader.core.credentials import parse_client_config
from gmail_downloader.core.models import OAuthClientConfig

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def encode_data(data: bytes) -> str:
    """Encode bytes the way the Gmail API returns attachment data."""
    return base64.urlsafe_b64encode(data).decode("ascii")


def make_raw_message(
    message_id: str,
    subject: str = "",
    internal_date: int = 0,
    attachments: list[tuple[str, str]] | None = None,
) -> dict[str, Any]:
    """Build a format=full message with one part per (filename, attachment id)."""
    parts: list[dict[str, Any]] = [
        {"partId": "0", "mimeType": "text/plain", "filename": "", "body": {"size": 0}}
    ]
    for index, (filename, attachment_id) in enumerate(attachments or [], start=1):
        parts.append(
            {
                "partId": str(index),
                "mimeType": "application/octet-stream",
                "filename": filename,
                "body": {"attachmentId": attachment_id, "size": 1},
            }
        )
    return {
        "id": message_id,
        "threadId": f"thread_{message_id}",
        "internalDate": str(internal_date),
        "payload": {
            "mimeType": "multipart/mixed",
            "headers": [{"name": "Subject", "value": subject}],
            "parts": parts,
        },
    }


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def client_secret_bytes() -> bytes:
    """Raw client-secret document as downloaded from the Cloud Console."""
    return (FIXTURES_DIR / "client_secret.json").read_bytes()


@pytest.fixture
def oauth_config(client_secret_bytes: bytes) -> OAuthClientConfig:
    """Parsed OAuth client config for the read-only Gmail scope."""
    return parse_client_config(
        client_secret_bytes, ("https://www.googleapis.com/auth/gmail.readonly",)
    )


@pytest.fixture
def multipart_mixed_raw() -> dict[str, Any]:
    """Raw Gmail API response for a multipart/mixed email with two attachments."""
    return json.loads((FIXTURES_DIR / "multipart_mixed.json").read_text())


@pytest.fixture
def nested_forward_raw() -> dict[str, Any]:
    """Raw Gmail API response with a nested attachment and an inline one."""
    return json.loads((FIXTURES_DIR / "nested_forward.json").read_text())


@pytest.fixture
def tmp_output_dir(tmp_path: Path) -> Path:
    """Temporary output directory for tests."""
    output = tmp_path / "output"
    output.mkdir()
    return output


@pytest.fixture
def settings(tmp_path: Path, tmp_output_dir: Path) -> GmailDownloaderSettings:
    """Settings isolated from the environment and the real cache directory."""
    return GmailDownloaderSettings(
        _env_file=None,
        credentials_path=FIXTURES_DIR / "client_secret.json",
        output_dir=tmp_output_dir,
        token_cache_dir=tmp_path / "cache",
        browser_commands=(),
    )


@pytest.fixture
def message_factory() -> Any:
    """Factory building raw format=full messages, see make_raw_message."""
    return make_raw_message


@pytest.fixture
def encode() -> Any:
    """Base64url encoder matching Gmail attachment payloads."""
    return encode_data
