"""Gmail API client for searching messages and fetching messages and attachments."""

from __future__ import annotations

import logging
from collections.abc import Generator
from typing import Any

from googleapiclient.discovery import Resource

from gmail_downloader.core.exceptions import ApiError
from gmail_downloader.core.models import MessageStub

logger = logging.getLogger(__name__)


class GmailClient:
    """Thin wrapper around the Gmail API. Every failed call raises :class:`ApiError`."""

    def __init__(self, service: Resource, user_id: str = "me") -> None:
        self._service = service
        self._user_id = user_id

    def _execute(self, request: Any, context: str) -> Any:
        """Execute a single API request once.

        Args:
            request: A googleapiclient HttpRequest object.
            context: Description for error messages (e.g. "retrieve messages").

        Raises:
            ApiError: On any API or transport error.
        """
        try:
            return request.execute(num_retries=0)
        except Exception as e:
            raise ApiError(f"Unable to {context}: {e}") from e

    def search_messages(
        self, query: str, max_results_per_page: int | None = None
    ) -> Generator[list[MessageStub], None, None]:
        """Paginate through messages matching a Gmail search query.

        Consumers control the pace of pagination; a page is requested only
        after the previous one has been consumed.

        Args:
            query: Gmail search query (same syntax as the search box).
            max_results_per_page: Page size, or None for the API default.

        Yields:
            Lists of MessageStub objects, one list per API page.
        """
        page_token: str | None = None

        while True:
            kwargs: dict[str, Any] = {"userId": self._user_id, "q": query}
            if max_results_per_page:
                kwargs["maxResults"] = max_results_per_page
            if page_token:
                kwargs["pageToken"] = page_token

            request = self._service.users().messages().list(**kwargs)
            response = self._execute(request, "retrieve messages")

            stubs = [
                MessageStub(message_id=msg["id"], thread_id=msg.get("threadId", ""))
                for msg in response.get("messages", [])
            ]
            logger.debug("Found %d messages (page)", len(stubs))
            yield stubs

            page_token = response.get("nextPageToken")
            if not page_token:
                return

    def get_message(self, message_id: str) -> dict[str, Any]:
        """Fetch a full message including its MIME part tree."""
        request = (
            self._service.users()
            .messages()
            .get(userId=self._user_id, id=message_id, format="full")
        )
        return self._execute(request, f"retrieve message {message_id}")

    def get_attachment(self, message_id: str, attachment_id: str) -> str:
        """Fetch an attachment body.

        Returns:
            The base64url-encoded attachment data.
        """
        request = (
            self._service.users()
            .messages()
            .attachments()
            .get(userId=self._user_id, messageId=message_id, id=attachment_id)
        )
        response = self._execute(request, f"retrieve attachment with id {attachment_id}")
        return response.get("data", "")
