"""CLI entry point: download the attachments of all messages matching a Gmail query."""

from __future__ import annotations

import argparse
import http.client
import logging
import os
import sys
from pathlib import Path
from typing import Any

import httplib2

from gmail_downloader.config.settings import GmailDownloaderSettings
from gmail_downloader.core.credentials import embedded_credentials
from gmail_downloader.core.exceptions import GmailDownloaderError
from gmail_downloader.pipeline.downloader import AttachmentDownloader


def setup_logging(level: str) -> None:
    """Configure logging with timestamp and module info."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def enable_http_debug() -> None:
    """Print HTTP traffic of the Gmail API and OAuth token calls."""
    httplib2.debuglevel = 1
    http.client.HTTPConnection.debuglevel = 1
    logging.getLogger("googleapiclient.discovery").setLevel(logging.DEBUG)


def build_parser(with_credentials_file: bool) -> argparse.ArgumentParser:
    """Build the argument parser.

    Args:
        with_credentials_file: Offer --credentials-file; only meaningful when
            no credentials are embedded in the package.
    """
    parser = argparse.ArgumentParser(
        prog=os.path.basename(sys.argv[0]) or "gdownload",
        description="Download all attachments of the Gmail messages matching a search query",
    )
    parser.add_argument("query", help='Gmail search query, e.g. "has:attachment from:alice"')
    parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=None,
        dest="output_dir",
        help="Output directory (default: current directory)",
    )
    parser.add_argument(
        "--cache-token",
        "--cachetoken",
        action="store_true",
        dest="cache_token",
        help="Cache the OAuth 2.0 token for later invocations of the program",
    )
    parser.add_argument("--debug", action="store_true", help="Show HTTP traffic")
    if with_credentials_file:
        parser.add_argument(
            "--credentials-file",
            type=Path,
            default=None,
            dest="credentials_file",
            help="Credentials file from https://console.developers.google.com/",
        )
    return parser


def settings_from_args(args: argparse.Namespace) -> GmailDownloaderSettings:
    """Build the run configuration; flags override environment values."""
    overrides: dict[str, Any] = {}
    if args.output_dir is not None:
        overrides["output_dir"] = args.output_dir
    if args.cache_token:
        overrides["cache_token"] = True
    if args.debug:
        overrides["debug"] = True
        overrides["log_level"] = "DEBUG"
    if getattr(args, "credentials_file", None) is not None:
        overrides["credentials_path"] = args.credentials_file
    return GmailDownloaderSettings(**overrides)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser(with_credentials_file=embedded_credentials() is None)
    args = parser.parse_args(argv)

    settings = settings_from_args(args)
    setup_logging(settings.log_level)
    if settings.debug:
        enable_http_debug()

    downloader = AttachmentDownloader(settings=settings)

    try:
        summary = downloader.download(args.query, settings.output_dir)
        print(f"\n{summary.messages} messages, {summary.attachments} attachments")
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)
    except GmailDownloaderError as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
