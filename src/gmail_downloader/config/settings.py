"""Configuration via pydantic-settings with .env support."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

GMAIL_READONLY_SCOPE = "https://www.googleapis.com/auth/gmail.readonly"


class GmailDownloaderSettings(BaseSettings):
    """Run configuration, built once at startup and shared read-only by every component.

    Values come from ``GDOWNLOAD_*`` environment variables or a ``.env`` file;
    the CLI passes its flags as init arguments, which take precedence.
    """

    model_config = SettingsConfigDict(
        env_prefix="GDOWNLOAD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # OAuth credentials; ignored when credentials are embedded in the package
    credentials_path: Path | None = None

    # Output
    output_dir: Path = Path(".")

    # Token cache
    cache_token: bool = False
    token_cache_dir: Path | None = None
    prog_name: str = "gdownload"

    # Gmail API settings
    scopes: tuple[str, ...] = (GMAIL_READONLY_SCOPE,)
    user_id: str = "me"

    # Browser launchers tried in order during authorization
    browser_commands: tuple[str, ...] = ("xdg-open", "google-chrome", "open")

    # Logging
    debug: bool = False
    log_level: str = "INFO"
