"""Client credential loading from a file or from bytes embedded at build time."""

from __future__ import annotations

import importlib
import importlib.util
import json
import logging
from pathlib import Path
from typing import Any

from gmail_downloader.config.settings import GmailDownloaderSettings
from gmail_downloader.core.exceptions import ConfigurationError
from gmail_downloader.core.models import OAuthClientConfig

logger = logging.getLogger(__name__)

# Set by the optional EMBEDDED_MODULE, generated with scripts/bin2py.py --init-only.
EMBEDDED_CREDENTIALS: bytes | None = None

EMBEDDED_MODULE = "gmail_downloader._embedded_credentials"


def embedded_credentials() -> bytes | None:
    """Return credentials compiled into the package, or None if there are none."""
    if EMBEDDED_CREDENTIALS is None and importlib.util.find_spec(EMBEDDED_MODULE) is not None:
        importlib.import_module(EMBEDDED_MODULE)
    return EMBEDDED_CREDENTIALS


def read_credentials(settings: GmailDownloaderSettings) -> bytes:
    """Return the raw client-secret document, preferring embedded credentials.

    Raises:
        ConfigurationError: If no credentials are embedded and the file
            is not set or cannot be read.
    """
    embedded = embedded_credentials()
    if embedded is not None:
        logger.debug("Using embedded client credentials")
        return embedded

    if settings.credentials_path is None:
        raise ConfigurationError(
            "No credentials file given. Download one from "
            "https://console.developers.google.com/ and pass --credentials-file."
        )
    try:
        return Path(settings.credentials_path).read_bytes()
    except OSError as e:
        raise ConfigurationError(f"Unable to read credentials file: {e}") from e


def parse_client_config(
    document: bytes, scopes: tuple[str, ...] | list[str]
) -> OAuthClientConfig:
    """Parse a Google client-secret JSON document.

    Args:
        document: Raw JSON bytes as downloaded from the Google Cloud Console.
        scopes: OAuth scopes the application will request.

    Raises:
        ConfigurationError: If the document is not JSON or lacks the
            ``installed``/``web`` client section.
    """
    try:
        data: Any = json.loads(document)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Unable to parse credentials file to config: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError("Unable to parse credentials file to config: not an object")

    client_type = next((key for key in ("installed", "web") if key in data), None)
    if client_type is None:
        raise ConfigurationError(
            "Unable to parse credentials file to config: "
            "expected an 'installed' or 'web' client section"
        )

    info = data[client_type]
    try:
        return OAuthClientConfig(
            client_id=info["client_id"],
            client_secret=info.get("client_secret", ""),
            scopes=tuple(scopes),
            auth_uri=info["auth_uri"],
            token_uri=info["token_uri"],
            raw=data,
        )
    except (KeyError, TypeError) as e:
        raise ConfigurationError(f"Credentials file is missing field {e}") from e


def load_client_config(settings: GmailDownloaderSettings) -> OAuthClientConfig:
    """Load and parse client credentials for this run."""
    return parse_client_config(read_credentials(settings), settings.scopes)
