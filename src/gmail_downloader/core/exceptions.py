"""Custom exceptions for the Gmail downloader."""


class GmailDownloaderError(Exception):
    """Base exception for all Gmail downloader errors."""


class ConfigurationError(GmailDownloaderError):
    """Client credentials are missing, unreadable or malformed."""


class AuthenticationError(GmailDownloaderError):
    """Failed to authorize against the Gmail API."""


class ApiError(GmailDownloaderError):
    """A Gmail API call failed."""


class DecodeError(GmailDownloaderError):
    """Attachment data is not valid base64url."""


class StorageError(GmailDownloaderError):
    """Failed to write an attachment to disk."""


class GeneratorError(GmailDownloaderError):
    """The credential embedding generator could not read or write a file."""
