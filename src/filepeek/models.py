"""Core filepeek data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Literal, Union

Category = Literal["image", "markdown", "code", "text", "binary"]
EntryType = Literal["file", "dir"]
FrontMatter = Dict[str, Union[str, List[str]]]


def format_timestamp(moment: datetime) -> str:
    """RFC 3339 UTC timestamp, second precision."""
    return moment.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def timestamp_from_mtime(mtime: float) -> datetime:
    return datetime.fromtimestamp(mtime, tz=timezone.utc)


@dataclass(slots=True, frozen=True)
class ResolvedPath:
    """A request path that passed the sandbox check."""

    path: Path
    relative: str

    @property
    def display(self) -> str:
        """Client-facing path, always rooted at ``/``."""
        return "/" + self.relative if self.relative else "/"


@dataclass(slots=True)
class FileEntry:
    """Snapshot of a directory child taken at listing time."""

    name: str
    path: str
    type: EntryType
    size: int
    modified: datetime
    extension: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "path": self.path,
            "type": self.type,
            "size": self.size,
            "modified": format_timestamp(self.modified),
        }
        if self.extension is not None:
            payload["extension"] = self.extension
        return payload


@dataclass(slots=True)
class PreviewChunk:
    """One window of a file's decoded text content."""

    path: str
    name: str
    content: str
    offset: int
    limit: int
    size: int
    next_offset: int
    modified: datetime

    @property
    def has_more(self) -> bool:
        return self.next_offset < self.size

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "name": self.name,
            "content": self.content,
            "size": self.size,
            "modified": format_timestamp(self.modified),
            "offset": self.offset,
            "limit": self.limit,
            "hasMore": self.has_more,
            "nextOffset": self.next_offset,
        }


@dataclass(slots=True)
class Classification:
    category: Category
    extension: str
    language: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "extension": self.extension, "language": self.language}


@dataclass(slots=True, frozen=True)
class RenderedDocument:
    """Sanitized HTML fragments of a rendered markdown document."""

    front_matter_html: str = ""
    body_html: str = ""

    @property
    def html(self) -> str:
        return self.front_matter_html + self.body_html
