"""Text helpers."""

from __future__ import annotations

from typing import Iterable


def normalize_whitespace(lines: Iterable[str]) -> str:
    """Collapse whitespace and join lines."""
    return "\n".join(line.strip() for line in lines if line.strip())


def excerpt(text: str, *, max_chars: int = 4000) -> str:
    """Leading slice of ``text`` used as language-model context."""
    if not text:
        return ""
    return text[:max_chars]
