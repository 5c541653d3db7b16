"""Pipeline orchestrator: search → fetch message → fetch attachment → decode → write."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from gmail_downloader.config.settings import GmailDownloaderSettings
from gmail_downloader.core.auth import build_gmail_service, obtain_credentials
from gmail_downloader.core.credentials import load_client_config
from gmail_downloader.core.gmail_client import GmailClient
from gmail_downloader.core.models import (
    Attachment,
    AttachmentPart,
    DownloadProgress,
    DownloadSummary,
    EmailMessage,
)
from gmail_downloader.core.parser import GmailParser
from gmail_downloader.storage.writer import AttachmentWriter

logger = logging.getLogger(__name__)


class AttachmentDownloader:
    """Downloads every attachment of the messages matching a search query.

    There is no partial success: the first API, decode or I/O error
    propagates and ends the run.
    """

    def __init__(
        self,
        settings: GmailDownloaderSettings | None = None,
        client: GmailClient | None = None,
        on_progress: Callable[[DownloadProgress], None] | None = None,
    ) -> None:
        self._settings = settings or GmailDownloaderSettings()
        self._client = client
        self._on_progress = on_progress
        self._parser = GmailParser()
        self._progress = DownloadProgress()

    @property
    def progress(self) -> DownloadProgress:
        return self._progress

    def _ensure_client(self) -> GmailClient:
        """Authorize and build the API client on first use."""
        if self._client is None:
            config = load_client_config(self._settings)
            creds = obtain_credentials(config, self._settings)
            service = build_gmail_service(creds)
            self._client = GmailClient(service, user_id=self._settings.user_id)
        return self._client

    def download(self, query: str, output_dir: Path | None = None) -> DownloadSummary:
        """Download all attachments from the messages matching ``query``.

        Args:
            query: Gmail search query, e.g. ``"has:attachment from:alice"``.
            output_dir: Target directory (defaults to settings.output_dir).

        Returns:
            DownloadSummary with message and attachment totals.

        Raises:
            GmailDownloaderError: On the first failed API call, decode or write.
        """
        client = self._ensure_client()
        writer = AttachmentWriter(output_dir or self._settings.output_dir)
        self._progress = DownloadProgress()

        for page in client.search_messages(query):
            self._progress.pages += 1
            for stub in page:
                message = self._parser.parse(client.get_message(stub.message_id))
                self._progress.messages += 1
                logger.info("Message #%d: %s", self._progress.messages, message.subject)
                self._notify()

                for n, part in enumerate(message.attachments, start=1):
                    attachment = self._fetch_attachment(client, message, part)
                    path = writer.write(attachment)
                    self._progress.attachments += 1
                    self._progress.last_file = path.name
                    logger.info(
                        "Message #%d attachment #%d: %s", self._progress.messages, n, path.name
                    )
                    self._notify()

        logger.info(
            "Downloaded %d attachments from %d messages",
            self._progress.attachments,
            self._progress.messages,
        )
        return DownloadSummary(
            messages=self._progress.messages, attachments=self._progress.attachments
        )

    def _fetch_attachment(
        self, client: GmailClient, message: EmailMessage, part: AttachmentPart
    ) -> Attachment:
        """Fetch (or take inline) and decode the body of an attachment part."""
        if part.attachment_id:
            data = client.get_attachment(message.message_id, part.attachment_id)
        else:
            data = part.data or ""
        return Attachment(
            filename=part.filename,
            data=self._parser.decode_data(data),
            internal_date=message.internal_date,
        )

    def _notify(self) -> None:
        """Send progress update to callback if registered."""
        if self._on_progress:
            self._on_progress(self._progress)
