"""Search and tag filtering over a loaded index."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set

from manualshelf.index.tags import display_tags, tag_matches
from manualshelf.models import ManualRecord


@dataclass(slots=True)
class ManualFilter:
    """Selected tag values per section plus a free-text query."""

    selected: Dict[str, Set[str]] = field(default_factory=dict)
    query: str = ""

    @classmethod
    def from_params(cls, tags: Iterable[str] = (), query: str | None = None) -> "ManualFilter":
        """Build a filter from ``section:value`` strings."""
        selected: Dict[str, Set[str]] = {}
        for item in tags:
            key, sep, value = item.partition(":")
            if not sep or not key:
                continue
            selected.setdefault(key, set()).add(value)
        return cls(selected=selected, query=(query or "").strip())

    def matches(self, manual: ManualRecord) -> bool:
        for key, values in self.selected.items():
            if values and not any(tag_matches(manual.tags, key, value) for value in values):
                return False
        if self.query:
            haystack = " ".join(
                [manual.filename, manual.title or "", *display_tags(manual.tags)]
            ).lower()
            if self.query.lower() not in haystack:
                return False
        return True


def filter_manuals(manuals: Iterable[ManualRecord], manual_filter: ManualFilter) -> List[ManualRecord]:
    return [manual for manual in manuals if manual_filter.matches(manual)]
