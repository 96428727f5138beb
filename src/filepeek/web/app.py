"""FastAPI application exposing the preview pipeline."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, TypeVar

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from pydantic import BaseModel

from filepeek import __version__
from filepeek.config import AppConfig
from filepeek.errors import (
    ConfigError,
    InvalidRange,
    NotADirectory,
    NotAFile,
    NotFound,
    PreviewError,
    PreviewIOError,
    SandboxViolation,
    TooLarge,
)
from filepeek.preview.highlight import highlight_code, resolve_language
from filepeek.preview.service import PreviewService
from filepeek.render.markdown import render

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

app = FastAPI(title="filepeek", version=__version__)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

_STATUS_BY_ERROR = (
    (SandboxViolation, 403),
    (NotFound, 404),
    (NotAFile, 400),
    (NotADirectory, 400),
    (InvalidRange, 400),
    (TooLarge, 413),
    (PreviewIOError, 500),
)


class RenderPayload(BaseModel):
    text: str = ""


class HighlightPayload(BaseModel):
    content: str
    extension: str | None = None
    filename: str | None = None


def _current_config() -> AppConfig:
    config = getattr(app.state, "config", None)
    if config is None:
        config = AppConfig.from_env()
    return config


def _service() -> PreviewService:
    try:
        return PreviewService(_current_config())
    except ConfigError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        raise HTTPException(
            status_code=500, detail={"error": "server misconfigured", "code": "CONFIG_ERROR"}
        ) from exc


def _http_error(exc: PreviewError) -> HTTPException:
    status = next((code for kind, code in _STATUS_BY_ERROR if isinstance(exc, kind)), 400)
    return HTTPException(status_code=status, detail=exc.to_dict())


async def _run(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run blocking filesystem work off the event loop, honouring the read timeout."""
    timeout = _current_config().read_timeout
    try:
        job = asyncio.to_thread(func, *args, **kwargs)
        if timeout:
            return await asyncio.wait_for(job, timeout=timeout)
        return await job
    except asyncio.TimeoutError as exc:
        LOGGER.error("Read timed out after %ss", timeout)
        raise HTTPException(
            status_code=504, detail={"error": "read timed out", "code": "TIMEOUT"}
        ) from exc
    except PreviewError as exc:
        raise _http_error(exc) from exc


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.get("/healthz")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/api/files")
async def list_files(path: str = "") -> List[Dict[str, Any]]:
    """Direct children of a directory, directories first."""
    service = _service()
    entries = await _run(service.list_dir, path)
    return [entry.to_dict() for entry in entries]


@app.get("/api/search")
async def search_files(path: str = "", q: str = "", recursive: bool = False) -> List[Dict[str, Any]]:
    if not q.strip():
        return []
    service = _service()
    results = await _run(service.search, path, q, recursive=recursive)
    return [entry.to_dict() for entry in results]


@app.get("/api/preview")
async def preview_file(
    path: str = "",
    offset: int | None = Query(None),
    limit: int | None = Query(None),
) -> Dict[str, Any]:
    """One chunk of a file's text; replay ``nextOffset`` to continue."""
    service = _service()
    chunk = await _run(service.get_chunk, path, offset, limit)
    return chunk.to_dict()


@app.get("/api/classify")
async def classify_name(name: str) -> Dict[str, Any]:
    return PreviewService.classify(name).to_dict()


@app.post("/api/render")
async def render_markdown(payload: RenderPayload) -> Dict[str, str]:
    document = render(payload.text)
    return {
        "html": document.html,
        "frontMatterHtml": document.front_matter_html,
        "bodyHtml": document.body_html,
    }


@app.get("/api/markdown")
async def render_markdown_file(path: str) -> Dict[str, str]:
    service = _service()
    document = await _run(service.render_file, path)
    return {
        "path": path,
        "html": document.html,
        "frontMatterHtml": document.front_matter_html,
        "bodyHtml": document.body_html,
    }


@app.get("/api/highlight/language")
async def highlight_language(extension: str = "", filename: str | None = None) -> Dict[str, str | None]:
    """Grammar for an extension; ``null`` tells the client to auto-detect."""
    return {"language": resolve_language(extension, filename)}


@app.post("/api/highlight")
async def highlight_snippet(payload: HighlightPayload) -> Dict[str, str | None]:
    html, language = await _run(highlight_code, payload.content, payload.extension, payload.filename)
    return {"html": html, "language": language}


@app.get("/api/highlight/file")
async def highlight_file(path: str) -> Dict[str, str | None]:
    service = _service()
    highlighted = await _run(service.highlight_file, path)
    return {"path": highlighted.path, "html": highlighted.html, "language": highlighted.language}


@app.get("/api/image")
async def serve_image(path: str) -> FileResponse:
    service = _service()
    resolved = await _run(service.resolve_file, path)
    return FileResponse(resolved.path)


@app.get("/api/download")
async def download_file(path: str) -> FileResponse:
    service = _service()
    resolved = await _run(service.resolve_file, path)
    return FileResponse(resolved.path, filename=resolved.path.name)
