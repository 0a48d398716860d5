from __future__ import annotations

import hashlib
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Iterator

from .errors import PageRangeError


def content_digest(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def normalize_extension(value: str | Path | None) -> str:
    """Lower-case extension without the leading dot ("" when there is none)."""
    if value is None:
        return ""
    if isinstance(value, Path):
        value = value.suffix
    return value.lower().lstrip(".")


def atomic_write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile("wb", delete=False, dir=path.parent) as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
    os.replace(tmp.name, path)


def iter_files(paths: Iterable[Path]) -> Iterator[Path]:
    """Yield files as given, expanding directories to their files in sorted order.

    Paths that do not exist are yielded unchanged so the caller can report them.
    """
    for path in paths:
        if path.is_dir():
            for file_path in sorted(path.rglob("*")):
                if file_path.is_file():
                    yield file_path
        else:
            yield path


def _parse_page_number(text: str) -> int:
    try:
        number = int(text.strip())
    except ValueError as exc:
        raise PageRangeError(f"Invalid page index: {text!r}") from exc
    if number < 1:
        raise PageRangeError("Page index must be >= 1")
    return number


def parse_pages(pages: str) -> tuple[int, ...] | None:
    """Parse a 1-indexed page selection such as ``"1-3,5"`` into sorted 0-indexed pages.

    Blank entries and duplicates are dropped. Returns ``None`` when nothing was
    selected.
    """
    selected: set[int] = set()
    for part in pages.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start_text, sep, end_text = part.partition("-")
            if not start_text.strip() or not sep or "-" in end_text:
                raise PageRangeError(f"Invalid page range: {part!r}")
            start = _parse_page_number(start_text)
            end = _parse_page_number(end_text)
            if end <= start:
                raise PageRangeError("Page range must start >= 1 and end > start")
            selected.update(range(start - 1, end))
        else:
            selected.add(_parse_page_number(part) - 1)
    if not selected:
        return None
    return tuple(sorted(selected))


__all__ = [
    "content_digest",
    "normalize_extension",
    "atomic_write_bytes",
    "iter_files",
    "parse_pages",
]
