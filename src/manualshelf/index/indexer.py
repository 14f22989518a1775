"""Index building pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from manualshelf.index.cache import CACHE_FILENAME, Extractor, load_cache, reconcile, save_cache
from manualshelf.index.storage import utc_timestamp, write_index
from manualshelf.index.tags import auto_tags, merge_tags
from manualshelf.ingestion.pdf_loader import load_pdf
from manualshelf.models import IndexDocument, ManualRecord
from manualshelf.utils.files import (
    compute_sha256,
    document_key_for_tags,
    read_tags_file,
    relative_posix,
    scan_directory,
)

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class IndexStats:
    documents: int = 0
    cache_hits: int = 0
    extracted: int = 0
    tag_files: int = 0
    cache_written: bool = False
    processed_files: List[str] = field(default_factory=list)

    def record(self, rel_path: str, *, cache_hit: bool, has_tags: bool) -> None:
        self.documents += 1
        if cache_hit:
            self.cache_hits += 1
        else:
            self.extracted += 1
        if has_tags:
            self.tag_files += 1
        self.processed_files.append(rel_path)


def build_tag_map(tag_files: List[Path]) -> Dict[Path, List[str]]:
    """Map the resolved path of each sidecar's PDF to its tag lines."""
    return {document_key_for_tags(path): read_tags_file(path) for path in tag_files}


class Indexer:
    """Walks a collection root and produces its :class:`IndexDocument`."""

    def __init__(self, extractor: Extractor, *, cache_path: Path | None = None) -> None:
        self.extractor = extractor
        self.cache_path = cache_path

    def build(self, root: Path) -> tuple[IndexDocument, IndexStats]:
        """Index every PDF below ``root`` and persist the extraction cache.

        Nothing is written when scanning or hashing fails.
        """
        root = Path(root)
        cache_path = self.cache_path or root / CACHE_FILENAME
        scan = scan_directory(root)
        tag_map = build_tag_map(scan.tags)
        cache = load_cache(cache_path)
        stats = IndexStats()
        manuals: List[ManualRecord] = []

        for pdf_path in scan.pdfs:
            stat = pdf_path.stat()
            content_hash = compute_sha256(pdf_path)
            rel_path = relative_posix(pdf_path, root)
            content = load_pdf(pdf_path)

            cache, result = reconcile(cache, rel_path, content_hash, content.text, self.extractor)
            metadata = result.metadata
            LOGGER.info("[INDEX] Processed: %s", pdf_path)
            LOGGER.info(
                "[INDEX] Extracted: brand=%r, model=%r, device=%r, manualType=%r",
                metadata.brand,
                metadata.model,
                metadata.device,
                metadata.manualType,
            )

            user_tags = tag_map.get(pdf_path.resolve())
            manuals.append(
                ManualRecord(
                    path=rel_path,
                    filename=pdf_path.name,
                    content_hash=content_hash,
                    tags=merge_tags(auto_tags(metadata), user_tags or []),
                    page_count=content.page_count,
                    title=content.title or None,
                    last_modified=utc_timestamp(stat.st_mtime),
                )
            )
            stats.record(rel_path, cache_hit=result.cache_hit, has_tags=user_tags is not None)

        stats.cache_written = save_cache(cache, cache_path)
        return IndexDocument(generated_at=utc_timestamp(), manuals=manuals), stats

    def run(self, root: Path, output: Path) -> IndexStats:
        document, stats = self.build(root)
        write_index(document, output)
        LOGGER.info("Index built at %s", output)
        return stats
