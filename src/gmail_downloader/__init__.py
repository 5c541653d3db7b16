"""Gmail Downloader - Save the attachments of Gmail search results to a directory."""

from gmail_downloader.core.models import (
    Attachment,
    AttachmentPart,
    DownloadProgress,
    DownloadSummary,
    EmailMessage,
    MessageStub,
    OAuthClientConfig,
)
from gmail_downloader.pipeline.downloader import AttachmentDownloader

__all__ = [
    "Attachment",
    "AttachmentDownloader",
    "AttachmentPart",
    "DownloadProgress",
    "DownloadSummary",
    "EmailMessage",
    "MessageStub",
    "OAuthClientConfig",
]
