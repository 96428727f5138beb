"""High-level preview API composing the sandbox, classifier, reader and renderers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from filepeek.config import AppConfig
from filepeek.errors import NotAFile, NotFound
from filepeek.models import Classification, FileEntry, PreviewChunk, RenderedDocument, ResolvedPath
from filepeek.preview.classifier import classify
from filepeek.preview.highlight import highlight_code
from filepeek.preview.reader import read_chunk
from filepeek.render.markdown import render
from filepeek.utils.files import DEFAULT_MAX_RESULTS, list_entries, search_entries
from filepeek.utils.paths import resolve_path

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class HighlightedFile:
    path: str
    html: str
    language: str | None


class PreviewService:
    """Entry point for every read-only operation on the sandboxed root."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.root = config.resolve_root()

    def resolve(self, request_path: str | None) -> ResolvedPath:
        return resolve_path(self.root, request_path)

    def resolve_file(self, request_path: str | None) -> ResolvedPath:
        """Resolve and require an existing regular file."""
        resolved = self.resolve(request_path)
        if not resolved.path.exists():
            raise NotFound("file not found")
        if resolved.path.is_dir():
            raise NotAFile()
        return resolved

    def list_dir(self, request_path: str | None) -> List[FileEntry]:
        return list_entries(self.resolve(request_path))

    def search(
        self,
        request_path: str | None,
        query: str,
        *,
        recursive: bool = False,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> List[FileEntry]:
        if not query.strip():
            return []
        return search_entries(
            self.resolve(request_path), query, recursive=recursive, max_results=max_results
        )

    def get_chunk(
        self, request_path: str | None, offset: int | None = None, limit: int | None = None
    ) -> PreviewChunk:
        resolved = self.resolve(request_path)
        return read_chunk(
            resolved.path,
            offset,
            limit,
            preview_max=self.config.preview_max,
            chunk_size=self.config.chunk_size,
            display_path=resolved.display,
        )

    @staticmethod
    def classify(name: str) -> Classification:
        return classify(name)

    def render_file(self, request_path: str | None) -> RenderedDocument:
        """Read a whole markdown file and render it."""
        chunk = self.get_chunk(request_path)
        return render(chunk.content)

    def highlight_file(self, request_path: str | None) -> HighlightedFile:
        """Read a whole source file and highlight it."""
        chunk = self.get_chunk(request_path)
        classification = classify(chunk.name)
        html, language = highlight_code(
            chunk.content, extension=classification.extension, filename=chunk.name
        )
        return HighlightedFile(path=chunk.path, html=html, language=language)

