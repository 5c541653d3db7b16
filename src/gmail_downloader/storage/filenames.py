"""Collision-free file naming with a parenthesised counter: foo.txt, foo(1).txt, ..."""

from __future__ import annotations

import re
from pathlib import Path

# stem, optional "(N)" counter, optional final ".ext"
_NAME_PATTERN = re.compile(r"^(.*?)(?:\(([0-9]+)\))?(\.[^.]*)?$", re.DOTALL)


def split_name(filename: str) -> tuple[str, int, str]:
    """Split a filename into (stem, counter, extension).

    The counter is the integer in parentheses right before the extension
    (or at the very end when there is none), 0 when absent.

    >>> split_name("report(3).pdf")
    ('report', 3, '.pdf')
    >>> split_name("archive.tar.gz")
    ('archive.tar', 0, '.gz')
    """
    match = _NAME_PATTERN.match(filename)
    if match is None:  # pragma: no cover - the pattern matches any string
        raise ValueError(f"Cannot split file name {filename!r}")
    stem, counter, extension = match.groups()
    return stem, int(counter) if counter else 0, extension or ""


def unique_name(directory: Path, desired: str) -> str:
    """Return a name that does not exist in ``directory``.

    ``desired`` is returned unchanged when free. Otherwise the counter is
    bumped (``foo.txt`` → ``foo(1).txt`` → ``foo(2).txt``) until a free
    name is found. The check reflects the directory at call time only.
    """
    candidate = desired
    while (directory / candidate).exists():
        stem, counter, extension = split_name(candidate)
        candidate = f"{stem}({counter + 1}){extension}"
    return candidate
