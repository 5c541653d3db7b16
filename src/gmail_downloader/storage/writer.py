"""Attachment file writer with collision-free naming and message timestamps."""

from __future__ import annotations

import logging
import os
import re
import time
from pathlib import Path

from gmail_downloader.core.exceptions import StorageError
from gmail_downloader.core.models import Attachment
from gmail_downloader.storage.filenames import unique_name

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "attachment"


class AttachmentWriter:
    """Write attachments into a single output directory, never overwriting a file."""

    def __init__(self, output_dir: Path) -> None:
        self._output_dir = output_dir
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create output directory {output_dir}: {e}") from e

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def write(self, attachment: Attachment) -> Path:
        """Write an attachment and stamp it with the message delivery time.

        The file's mtime is the message internal date in whole seconds;
        its atime is the time of writing.

        Returns:
            Path to the written file.

        Raises:
            StorageError: If the file cannot be created, written or stamped.
        """
        name = unique_name(self._output_dir, self._safe_filename(attachment.filename))
        filepath = self._output_dir / name

        try:
            with filepath.open("xb") as fh:
                fh.write(attachment.data)
        except OSError as e:
            raise StorageError(f"Unable to write to file {filepath}: {e}") from e

        try:
            os.utime(filepath, (time.time(), attachment.mtime))
        except OSError as e:
            raise StorageError(f"Cannot change timestamps of file {filepath}: {e}") from e

        logger.debug("Wrote attachment: %s (%d bytes)", filepath, len(attachment.data))
        return filepath

    @staticmethod
    def _safe_filename(filename: str) -> str:
        """Drop directory components so a name cannot escape the output directory."""
        name = re.split(r"[\\/]", filename.replace("\x00", ""))[-1]
        if name.strip() in ("", ".", ".."):
            return DEFAULT_FILENAME
        return name
