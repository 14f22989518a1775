"""Utility helpers for working with files."""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

HASH_PREFIX = "sha256:"
PDF_SUFFIX = ".pdf"
TAGS_SUFFIX = ".tags"


@dataclass(slots=True)
class ScanResult:
    """Documents and tag sidecars found below a collection root."""

    pdfs: List[Path] = field(default_factory=list)
    tags: List[Path] = field(default_factory=list)


def _raise_scan_error(exc: OSError) -> None:
    raise exc


def scan_directory(root: Path) -> ScanResult:
    """Recursively collect ``.pdf`` and ``.tags`` files below ``root``.

    Suffixes are matched case-insensitively. Any unreadable directory aborts
    the scan with the underlying ``OSError``.
    """
    root = Path(root)
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")

    result = ScanResult()
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise_scan_error):
        for name in filenames:
            path = Path(dirpath) / name
            if not path.is_file():
                continue
            suffix = path.suffix.lower()
            if suffix == PDF_SUFFIX:
                result.pdfs.append(path)
            elif suffix == TAGS_SUFFIX:
                result.tags.append(path)
    result.pdfs.sort()
    result.tags.sort()
    return result


def compute_sha256(path: Path) -> str:
    """Compute the prefixed SHA256 digest of a file."""
    sha = hashlib.sha256()
    with Path(path).open("rb") as handle:
        for chunk in iter(lambda: handle.read(1 << 20), b""):
            sha.update(chunk)
    return HASH_PREFIX + sha.hexdigest()


def read_tags_file(path: Path) -> List[str]:
    """Return the non-empty, trimmed lines of a ``.tags`` sidecar."""
    content = Path(path).read_text(encoding="utf-8", errors="replace")
    return [line.strip() for line in content.splitlines() if line.strip()]


def document_key_for_tags(tags_path: Path) -> Path:
    """Resolved path of the PDF a sidecar belongs to (``foo.tags`` -> ``foo.pdf``)."""
    return Path(tags_path).with_suffix(PDF_SUFFIX).resolve()


def relative_posix(path: Path, root: Path) -> str:
    return Path(path).relative_to(root).as_posix()
