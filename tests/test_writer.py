"""Tests for AttachmentWriter — writes decoded attachments to disk."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from gmail_downloader.core.exceptions import StorageError
from gmail_downloader.core.models import Attachment
from gmail_downloader.storage.writer import AttachmentWriter


@pytest.fixture
def sample_attachment() -> Attachment:
    """A small attachment delivered at 2024-01-15 10:30:00.789 UTC."""
    return Attachment(filename="report.pdf", data=b"%PDF-1.4 test", internal_date=1705314600789)


class TestWrite:
    """write() creates the file with the right name, content and mtime."""

    def test_creates_file_with_content(
        self, tmp_output_dir: Path, sample_attachment: Attachment
    ) -> None:
        path = AttachmentWriter(tmp_output_dir).write(sample_attachment)

        assert path == tmp_output_dir / "report.pdf"
        assert path.read_bytes() == b"%PDF-1.4 test"

    def test_mtime_is_message_date_truncated_to_seconds(
        self, tmp_output_dir: Path, sample_attachment: Attachment
    ) -> None:
        path = AttachmentWriter(tmp_output_dir).write(sample_attachment)

        assert os.stat(path).st_mtime == 1705314600

    def test_existing_file_is_not_overwritten(
        self, tmp_output_dir: Path, sample_attachment: Attachment
    ) -> None:
        (tmp_output_dir / "report.pdf").write_bytes(b"original")

        path = AttachmentWriter(tmp_output_dir).write(sample_attachment)

        assert path.name == "report(1).pdf"
        assert (tmp_output_dir / "report.pdf").read_bytes() == b"original"

    def test_same_name_twice_gets_counter(
        self, tmp_output_dir: Path, sample_attachment: Attachment
    ) -> None:
        writer = AttachmentWriter(tmp_output_dir)
        first = writer.write(sample_attachment)
        second = writer.write(sample_attachment)

        assert first.name == "report.pdf"
        assert second.name == "report(1).pdf"

    def test_empty_attachment(self, tmp_output_dir: Path) -> None:
        path = AttachmentWriter(tmp_output_dir).write(Attachment(filename="empty.txt", data=b""))

        assert path.read_bytes() == b""


class TestFilenameSafety:
    """Attachment names cannot place files outside the output directory."""

    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("../../etc/passwd", "passwd"),
            ("..\\evil.bat", "evil.bat"),
            ("/abs/path/file.txt", "file.txt"),
            ("..", "attachment"),
            ("dir/", "attachment"),
            ("   ", "attachment"),
        ],
    )
    def test_directory_components_dropped(
        self, tmp_output_dir: Path, filename: str, expected: str
    ) -> None:
        path = AttachmentWriter(tmp_output_dir).write(Attachment(filename=filename, data=b"x"))

        assert path.parent == tmp_output_dir
        assert path.name == expected

    def test_surrounding_whitespace_is_kept(self, tmp_output_dir: Path) -> None:
        path = AttachmentWriter(tmp_output_dir).write(Attachment(filename=" a.pdf ", data=b"x"))

        assert path.name == " a.pdf "


class TestErrors:
    """I/O failures surface as StorageError."""

    def test_write_failure_raises_storage_error(
        self, tmp_output_dir: Path, sample_attachment: Attachment
    ) -> None:
        writer = AttachmentWriter(tmp_output_dir)
        with patch("pathlib.Path.open", side_effect=PermissionError("denied")):
            with pytest.raises(StorageError, match="Unable to write to file"):
                writer.write(sample_attachment)

    def test_utime_failure_raises_storage_error(
        self, tmp_output_dir: Path, sample_attachment: Attachment
    ) -> None:
        writer = AttachmentWriter(tmp_output_dir)
        with patch("gmail_downloader.storage.writer.os.utime", side_effect=OSError("ro fs")):
            with pytest.raises(StorageError, match="Cannot change timestamps"):
                writer.write(sample_attachment)

    def test_output_dir_is_a_file(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")

        with pytest.raises(StorageError, match="Cannot create output directory"):
            AttachmentWriter(blocker / "sub")


class TestWriterCreatesDirectory:
    """AttachmentWriter constructor creates the output directory if needed."""

    def test_creates_nested_directory(self, tmp_path: Path) -> None:
        nested = tmp_path / "deep" / "nested" / "output"
        AttachmentWriter(nested)

        assert nested.is_dir()
