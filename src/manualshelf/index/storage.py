"""Reading and writing ``index.json``."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from manualshelf.models import IndexDocument

INDEX_FILENAME = "index.json"


class IndexLoadError(RuntimeError):
    """Raised when an index file is missing or not a valid index document."""


def utc_timestamp(value: float | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    moment = datetime.now(timezone.utc) if value is None else datetime.fromtimestamp(value, timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def dumps_index(document: IndexDocument) -> str:
    return json.dumps(document.to_dict(), indent=2, ensure_ascii=False)


def loads_index(text: str) -> IndexDocument:
    try:
        data = json.loads(text)
        return IndexDocument.from_dict(data)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
        raise IndexLoadError(f"Invalid index document: {exc}") from exc


def write_index(document: IndexDocument, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps_index(document), encoding="utf-8")


def read_index(path: Path) -> IndexDocument:
    path = Path(path)
    if not path.exists():
        raise IndexLoadError(f"Index not found at {path}")
    return loads_index(path.read_text(encoding="utf-8"))
