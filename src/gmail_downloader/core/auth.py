"""OAuth 2.0 authorization with optional token caching for the Gmail API."""

from __future__ import annotations

import json
import logging
import os
import secrets
import subprocess
import sys
import threading
from collections.abc import Iterable, Sequence
from pathlib import Path
from urllib.parse import quote_plus

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import Resource, build

from gmail_downloader.config.settings import GmailDownloaderSettings
from gmail_downloader.core.callback_server import AuthorizationCallbackServer
from gmail_downloader.core.exceptions import AuthenticationError
from gmail_downloader.core.models import OAuthClientConfig

logger = logging.getLogger(__name__)

_FNV32_OFFSET = 0x811C9DC5
_FNV32_PRIME = 0x01000193


def fnv1a_32(*chunks: bytes) -> int:
    """32-bit FNV-1a hash over the concatenation of ``chunks``."""
    value = _FNV32_OFFSET
    for chunk in chunks:
        for byte in chunk:
            value ^= byte
            value = (value * _FNV32_PRIME) & 0xFFFFFFFF
    return value


def user_cache_dir() -> Path:
    """Return the OS-appropriate per-user cache directory."""
    home = Path.home()
    if sys.platform == "darwin":
        return home / "Library" / "Caches"
    if sys.platform.startswith(("linux", "freebsd")):
        xdg = os.environ.get("XDG_CACHE_HOME")
        return Path(xdg) if xdg else home / ".cache"
    if sys.platform == "win32":
        local = os.environ.get("LOCALAPPDATA")
        if local:
            return Path(local)
    logger.warning("No known user cache directory on %s, using current directory", sys.platform)
    return Path(".")


def token_cache_path(config: OAuthClientConfig, settings: GmailDownloaderSettings) -> Path:
    """Deterministic cache file for a (client id, client secret, scopes) triple."""
    digest = fnv1a_32(
        config.client_id.encode("utf-8"),
        config.client_secret.encode("utf-8"),
        " ".join(sorted(config.scopes)).encode("utf-8"),
    )
    filename = quote_plus(f"{settings.prog_name}-tok{digest}")
    cache_dir = settings.token_cache_dir or user_cache_dir()
    return Path(cache_dir) / filename


def load_cached_token(token_path: Path, scopes: Sequence[str]) -> Credentials:
    """Load a token previously written by :func:`save_token`.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not a serialized token.
    """
    info = json.loads(token_path.read_text(encoding="utf-8"))
    if not isinstance(info, dict):
        raise ValueError(f"Token cache {token_path} does not hold a token object")
    return Credentials.from_authorized_user_info(info, list(scopes))


def save_token(creds: Credentials, token_path: Path) -> bool:
    """Persist a token to the cache file. Failures are logged, not raised."""
    try:
        token_path.parent.mkdir(parents=True, exist_ok=True)
        token_path.write_text(creds.to_json(), encoding="utf-8")
    except OSError as e:
        logger.warning("Warning: failed to cache oauth token: %s", e)
        return False
    logger.info("Saved oauth token for later use in file: %s", token_path)
    return True


def open_url(url: str, commands: Iterable[str]) -> bool:
    """Try each browser launcher in turn. Returns True if one succeeded."""
    for command in commands:
        try:
            subprocess.run(
                [command, url],
                check=True,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
            return True
        except (OSError, subprocess.CalledProcessError):
            continue
    logger.warning("Error opening URL in browser.")
    return False


def _open_url_in_background(url: str, commands: Iterable[str]) -> None:
    threading.Thread(
        target=open_url, args=(url, tuple(commands)), name="open-browser", daemon=True
    ).start()


def token_from_web(config: OAuthClientConfig, settings: GmailDownloaderSettings) -> Credentials:
    """Run the interactive authorization code flow through a local callback server.

    Blocks until the browser redirects back with a code.

    Raises:
        AuthenticationError: If the provider returns an error or the code
            exchange fails.
    """
    state = secrets.token_urlsafe(16)

    with AuthorizationCallbackServer(state) as server:
        flow = Flow.from_client_config(
            dict(config.raw),
            scopes=list(config.scopes),
            state=state,
            redirect_uri=server.redirect_uri,
        )
        auth_url, _ = flow.authorization_url(access_type="offline", prompt="consent")

        _open_url_in_background(auth_url, settings.browser_commands)
        logger.info("Authorize this app at: %s", auth_url)
        code = server.wait_for_code()
        logger.info("Authorized")

    try:
        flow.fetch_token(code=code)
    except Exception as e:
        raise AuthenticationError(f"Token exchange error: {e}") from e
    return flow.credentials


def _refresh(creds: Credentials) -> Credentials | None:
    try:
        creds.refresh(Request())
    except GoogleAuthError as e:
        logger.warning("Token refresh failed, re-authenticating: %s", e)
        return None
    return creds


def obtain_credentials(
    config: OAuthClientConfig, settings: GmailDownloaderSettings
) -> Credentials:
    """Return usable credentials from the cache or the interactive flow.

    The cache is consulted and written only when ``settings.cache_token``
    is set.

    Args:
        config: Parsed OAuth client configuration.
        settings: Run configuration.

    Returns:
        Google OAuth2 credentials for the configured scopes.

    Raises:
        AuthenticationError: If the interactive flow fails.
    """
    token_path = token_cache_path(config, settings)
    creds: Credentials | None = None

    if settings.cache_token and token_path.exists():
        try:
            creds = load_cached_token(token_path, config.scopes)
        except (OSError, ValueError) as e:
            logger.warning("Failed to load cached token: %s", e)
            creds = None

    if creds is not None and creds.expired and creds.refresh_token:
        creds = _refresh(creds)
        if creds is not None:
            save_token(creds, token_path)

    if creds is not None:
        if settings.debug:
            logger.info("Using cached token %r from %s", creds.to_json(), token_path)
        else:
            logger.info("Using cached token from %s", token_path)
        return creds

    creds = token_from_web(config, settings)
    if settings.cache_token:
        save_token(creds, token_path)
    return creds


def build_gmail_service(creds: Credentials) -> Resource:
    """Build a Gmail API service resource.

    Args:
        creds: Valid Google OAuth2 credentials.

    Returns:
        Gmail API service resource.
    """
    return build("gmail", "v1", credentials=creds, cache_discovery=False)
