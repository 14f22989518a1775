"""FastAPI application backing the ManualShelf library viewer."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, List
from urllib.parse import urlencode

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, Response
from pydantic import BaseModel

from manualshelf.config import AppConfig
from manualshelf.index.pages import parse_hidden_ranges, resolve_page, visible_pages
from manualshelf.index.search import ManualFilter, filter_manuals
from manualshelf.index.storage import IndexLoadError, dumps_index, read_index
from manualshelf.index.tags import display_tags, group_tags, reserved_value
from manualshelf.ingestion.pdf_loader import render_page_png
from manualshelf.models import IndexDocument, ManualRecord
from manualshelf.web.frontend import router as frontend_router

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="ManualShelf", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)
app.include_router(frontend_router)
app.state.config = AppConfig()


class TagSectionOut(BaseModel):
    key: str
    values: List[str]


class ManualOut(BaseModel):
    path: str
    filename: str
    contentHash: str
    title: str | None = None
    brand: str = ""
    model: str = ""
    device: str = ""
    manualType: str = ""
    tags: List[str]
    pageCount: int
    lastModified: str


class PagesOut(BaseModel):
    path: str
    pageCount: int
    hidden: List[int]
    visible: List[int]
    initialPage: int | None = None


class ShareOut(BaseModel):
    url: str
    path: str
    page: int | None = None


def configure(config: AppConfig) -> None:
    app.state.config = config


def _config() -> AppConfig:
    return app.state.config


def _root() -> Path:
    return _config().resolve_root(Path.cwd())


def _load_index() -> IndexDocument:
    index_path = _config().resolve_index_path(Path.cwd())
    try:
        return read_index(index_path)
    except IndexLoadError as exc:
        status = 404 if not index_path.exists() else 500
        LOGGER.error("Failed to load index: %s", exc)
        raise HTTPException(status_code=status, detail=str(exc)) from exc


def _find_manual(document: IndexDocument, path: str) -> ManualRecord:
    manual = document.find(path)
    if manual is None:
        raise HTTPException(status_code=404, detail=f"Manual not found: {path}")
    return manual


def _manual_out(manual: ManualRecord) -> ManualOut:
    return ManualOut(
        path=manual.path,
        filename=manual.filename,
        contentHash=manual.content_hash,
        title=manual.title,
        brand=reserved_value(manual.tags, "brand"),
        model=reserved_value(manual.tags, "model"),
        device=reserved_value(manual.tags, "device"),
        manualType=reserved_value(manual.tags, "manualType"),
        tags=display_tags(manual.tags),
        pageCount=manual.page_count,
        lastModified=manual.last_modified,
    )


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.get("/index.json")
async def get_index() -> Response:
    document = _load_index()
    return Response(content=dumps_index(document), media_type="application/json")


@app.get("/api/sections")
async def list_sections() -> dict[str, List[TagSectionOut]]:
    document = _load_index()
    sections = group_tags(manual.tags for manual in document.manuals)
    return {"sections": [TagSectionOut(key=s.key, values=s.values) for s in sections]}


@app.get("/api/manuals")
async def list_manuals(
    q: str | None = None,
    tag: List[str] = Query(default=[]),
) -> dict[str, Any]:
    """Manuals matching the query and every selected tag section."""
    document = _load_index()
    manual_filter = ManualFilter.from_params(tag, q)
    manuals = filter_manuals(document.manuals, manual_filter)
    return {
        "generatedAt": document.generated_at,
        "total": len(document.manuals),
        "manuals": [_manual_out(manual) for manual in manuals],
    }


@app.get("/api/manuals/pages")
async def manual_pages(path: str, page: int | None = None) -> PagesOut:
    document = _load_index()
    manual = _find_manual(document, path)
    hidden = parse_hidden_ranges(manual.tags, manual.page_count)
    visible = visible_pages(manual.page_count, hidden)
    return PagesOut(
        path=manual.path,
        pageCount=manual.page_count,
        hidden=hidden,
        visible=visible,
        initialPage=resolve_page(page, visible),
    )


@app.get("/api/share")
async def share_link(request: Request, path: str, page: int | None = None) -> ShareOut:
    """Deep link opening ``path`` at ``page``, as encoded into a QR code."""
    document = _load_index()
    manual = _find_manual(document, path)
    params = {"pdf": manual.path}
    if page is not None:
        params["page"] = str(page)
    url = f"{str(request.base_url).rstrip('/')}/?{urlencode(params)}"
    return ShareOut(url=url, path=manual.path, page=page)


@app.get("/api/manuals/page-image")
async def page_image(
    path: str,
    page: int,
    scale: float = Query(default=1.5, gt=0, le=4),
) -> Response:
    """One visible page rendered as PNG; hidden pages are refused."""
    document = _load_index()
    manual = _find_manual(document, path)
    hidden = parse_hidden_ranges(manual.tags, manual.page_count)
    if page not in visible_pages(manual.page_count, hidden):
        raise HTTPException(status_code=404, detail=f"Page {page} is not available for {path}")

    real_path = _resolve_pdf(manual.path)
    try:
        image = await asyncio.to_thread(render_page_png, real_path, page, scale=scale)
    except Exception as exc:
        LOGGER.error("Failed to render page %s of %s: %s", page, real_path, exc)
        raise HTTPException(status_code=500, detail=f"Failed to render page {page}") from exc
    return Response(content=image, media_type="image/png")


def _resolve_pdf(file_path: str) -> Path:
    if "\0" in file_path:
        raise HTTPException(status_code=400, detail="Invalid path: contains null byte")

    root = Path(os.path.realpath(_root()))
    real_path = Path(os.path.realpath(root / file_path))
    if not str(real_path).startswith(str(root) + os.sep):
        raise HTTPException(status_code=403, detail="Access denied: path is outside the library")
    if not real_path.is_file() or real_path.suffix.lower() != ".pdf":
        raise HTTPException(status_code=404, detail=f"PDF not found: {file_path}")
    return real_path


@app.get("/pdf/{file_path:path}")
async def get_pdf(file_path: str) -> FileResponse:
    real_path = _resolve_pdf(file_path)
    return FileResponse(
        real_path,
        media_type="application/pdf",
        filename=real_path.name,
        content_disposition_type="inline",
    )
