"""Extraction cache keyed by relative document path.

An entry is only trusted while its stored hash matches the current content
hash of the file; anything else sends the document back to the extractor.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Protocol

from manualshelf.models import CacheEntry, ExtractedMetadata

LOGGER = logging.getLogger(__name__)

CACHE_FILENAME = "llm-cache.json"


class Extractor(Protocol):
    def extract(self, text: str) -> ExtractedMetadata: ...


@dataclass(slots=True)
class ExtractionCache:
    entries: Dict[str, CacheEntry] = field(default_factory=dict)
    dirty: bool = False

    def __len__(self) -> int:
        return len(self.entries)

    def lookup(self, rel_path: str, content_hash: str) -> ExtractedMetadata | None:
        entry = self.entries.get(rel_path)
        if entry is not None and entry.hash == content_hash:
            return entry.metadata
        return None

    def store(self, rel_path: str, content_hash: str, metadata: ExtractedMetadata) -> None:
        self.entries[rel_path] = CacheEntry(hash=content_hash, metadata=metadata)
        self.dirty = True

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        return {key: entry.to_dict() for key, entry in self.entries.items()}


def load_cache(path: Path) -> ExtractionCache:
    """Load the cache file, falling back to an empty cache on any parse problem."""
    path = Path(path)
    if not path.exists():
        return ExtractionCache()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        LOGGER.warning("Failed to parse %s, starting with empty cache: %s", path, exc)
        return ExtractionCache()

    if not isinstance(data, dict):
        LOGGER.warning("Unexpected structure in %s, starting with empty cache", path)
        return ExtractionCache()

    cache = ExtractionCache()
    for key, raw in data.items():
        entry = CacheEntry.from_dict(raw)
        if entry is None:
            LOGGER.warning("Dropping malformed cache entry for %s", key)
            continue
        cache.entries[key] = entry
    return cache


def save_cache(cache: ExtractionCache, path: Path) -> bool:
    """Write the cache if anything changed. Returns whether a write happened."""
    if not cache.dirty:
        return False
    Path(path).write_text(json.dumps(cache.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    cache.dirty = False
    LOGGER.info("[CACHE] %s updated", Path(path).name)
    return True


@dataclass(slots=True)
class Reconciled:
    metadata: ExtractedMetadata
    cache_hit: bool


def reconcile(
    cache: ExtractionCache,
    rel_path: str,
    content_hash: str,
    text: str,
    extractor: Extractor,
) -> tuple[ExtractionCache, Reconciled]:
    """Reuse cached metadata for an unchanged file or extract it afresh.

    Failed extractions come back as empty metadata and are cached like any
    other result.
    """
    cached = cache.lookup(rel_path, content_hash)
    if cached is not None:
        LOGGER.info("[CACHE] Using cached metadata for %s", rel_path)
        return cache, Reconciled(metadata=cached, cache_hit=True)

    metadata = extractor.extract(text)
    cache.store(rel_path, content_hash, metadata)
    LOGGER.info("[CACHE] Updated metadata for %s", rel_path)
    return cache, Reconciled(metadata=metadata, cache_hit=False)
