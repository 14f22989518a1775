"""Core ManualShelf data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, field_validator

METADATA_FIELDS = ("brand", "model", "device", "manualType")


class ExtractedMetadata(BaseModel):
    """Structured fields describing a manual.

    Every field is a string; anything else found in parsed JSON is normalised
    to the empty string.
    """

    brand: str = ""
    model: str = ""
    device: str = ""
    manualType: str = ""

    @field_validator("brand", "model", "device", "manualType", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if isinstance(value, str):
            return value
        return ""

    @classmethod
    def from_mapping(cls, data: Any) -> "ExtractedMetadata":
        if not isinstance(data, dict):
            return cls()
        return cls(**{name: data.get(name) for name in METADATA_FIELDS})

    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in METADATA_FIELDS)


@dataclass(slots=True)
class CacheEntry:
    """Extraction result remembered for one relative path."""

    hash: str
    metadata: ExtractedMetadata

    def to_dict(self) -> Dict[str, str]:
        return {"hash": self.hash, **self.metadata.model_dump()}

    @classmethod
    def from_dict(cls, data: Any) -> Optional["CacheEntry"]:
        if not isinstance(data, dict) or not isinstance(data.get("hash"), str):
            return None
        return cls(hash=data["hash"], metadata=ExtractedMetadata.from_mapping(data))


@dataclass(slots=True)
class ManualRecord:
    """One indexed PDF."""

    path: str
    filename: str
    content_hash: str
    tags: List[str]
    page_count: int
    last_modified: str
    title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "path": self.path,
            "filename": self.filename,
            "contentHash": self.content_hash,
            "tags": list(self.tags),
            "pageCount": self.page_count,
        }
        if self.title is not None:
            data["title"] = self.title
        data["lastModified"] = self.last_modified
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ManualRecord":
        return cls(
            path=data["path"],
            filename=data["filename"],
            content_hash=data["contentHash"],
            tags=list(data.get("tags") or []),
            page_count=int(data.get("pageCount") or 0),
            last_modified=data["lastModified"],
            title=data.get("title"),
        )


@dataclass(slots=True)
class IndexDocument:
    """The whole collection as written to ``index.json``."""

    generated_at: str
    manuals: List[ManualRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generatedAt": self.generated_at,
            "manuals": [manual.to_dict() for manual in self.manuals],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IndexDocument":
        return cls(
            generated_at=data["generatedAt"],
            manuals=[ManualRecord.from_dict(item) for item in data.get("manuals") or []],
        )

    def find(self, path: str) -> Optional[ManualRecord]:
        for manual in self.manuals:
            if manual.path == path:
                return manual
        return None
