"""Hidden page ranges for the paginated viewer.

A manual can carry ``!hide-page-range=1-18,37-`` to keep pages out of the
viewer without touching the PDF. Tokens are ``N``, ``A-B`` or ``A-`` (through
the last page), 1-indexed and comma separated. Malformed or out-of-range
tokens are skipped one by one.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Set

from manualshelf.index.tags import directives

LOGGER = logging.getLogger(__name__)

HIDE_PAGE_RANGE = "hide-page-range"


def _parse_bound(text: str) -> Optional[int]:
    text = text.strip()
    if not (text.isascii() and text.isdigit()):
        return None
    return int(text)


def parse_range_spec(spec: str, total_pages: int) -> Set[int]:
    """Pages named by a single range specification, clamped to ``total_pages``."""
    hidden: Set[int] = set()
    if total_pages <= 0:
        return hidden

    for token in spec.split(","):
        token = token.strip()
        if not token:
            continue
        start_text, sep, end_text = token.partition("-")
        start = _parse_bound(start_text)
        if start is None or start < 1 or start > total_pages:
            LOGGER.debug("Ignoring page range token %r", token)
            continue
        if not sep:
            hidden.add(start)
            continue
        if end_text.strip():
            end = _parse_bound(end_text)
            if end is None or end < start:
                LOGGER.debug("Ignoring page range token %r", token)
                continue
        else:
            end = total_pages
        hidden.update(range(start, min(end, total_pages) + 1))
    return hidden


def parse_hidden_ranges(tags: Iterable[str], total_pages: int) -> List[int]:
    """Sorted union of all pages hidden by ``!hide-page-range`` directives."""
    hidden: Set[int] = set()
    for directive in directives(tags, HIDE_PAGE_RANGE):
        if directive.payload:
            hidden |= parse_range_spec(directive.payload, total_pages)
    return sorted(hidden)


def visible_pages(total_pages: int, hidden: Iterable[int]) -> List[int]:
    """Pages ``1..total_pages`` not listed in ``hidden``."""
    excluded = set(hidden)
    return [page for page in range(1, max(total_pages, 0) + 1) if page not in excluded]


def resolve_page(requested: Optional[int], visible: List[int]) -> Optional[int]:
    """Nearest visible page at or after ``requested``.

    Falls back to the last visible page before it, and to the first visible
    page when nothing was requested.
    """
    if not visible:
        return None
    if requested is None:
        return visible[0]
    for page in visible:
        if page >= requested:
            return page
    return visible[-1]
