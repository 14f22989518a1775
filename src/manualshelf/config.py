"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from manualshelf.extraction.llm import DEFAULT_LLM_MODEL
from manualshelf.index.cache import CACHE_FILENAME
from manualshelf.index.storage import INDEX_FILENAME

DEFAULT_ROOT = Path("pdf")


@dataclass(slots=True)
class AppConfig:
    root: Path = DEFAULT_ROOT
    index_path: Path | None = None
    llm_model: str = DEFAULT_LLM_MODEL

    def resolve_root(self, base_dir: Path | None = None) -> Path:
        root = Path(self.root)
        if root.is_absolute() or base_dir is None:
            return root
        return base_dir / root

    def resolve_index_path(self, base_dir: Path | None = None) -> Path:
        if self.index_path is None:
            return self.resolve_root(base_dir) / INDEX_FILENAME
        if Path(self.index_path).is_absolute() or base_dir is None:
            return Path(self.index_path)
        return base_dir / self.index_path

    def resolve_cache_path(self, base_dir: Path | None = None) -> Path:
        return self.resolve_root(base_dir) / CACHE_FILENAME
