"""Utility helpers for listing and searching directories."""

from __future__ import annotations

import logging
import os
import posixpath
from pathlib import Path
from typing import Iterable, Iterator, List

from filepeek.errors import NotADirectory, NotFound, PreviewError, PreviewIOError
from filepeek.models import FileEntry, ResolvedPath, timestamp_from_mtime
from filepeek.preview.classifier import file_extension

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 100


def _entry_from_dir_entry(item: os.DirEntry, parent: str) -> FileEntry | None:
    try:
        info = item.stat(follow_symlinks=False)
    except OSError:
        return None
    is_dir = item.is_dir(follow_symlinks=False)
    return FileEntry(
        name=item.name,
        path=posixpath.join("/", parent, item.name),
        type="dir" if is_dir else "file",
        size=0 if is_dir else info.st_size,
        modified=timestamp_from_mtime(info.st_mtime),
        extension=None if is_dir else file_extension(item.name),
    )


def sort_entries(entries: Iterable[FileEntry]) -> List[FileEntry]:
    """Directories first, then case-insensitive name order."""
    return sorted(entries, key=lambda entry: (entry.type != "dir", entry.name.lower()))


def _scandir(path: Path) -> List[os.DirEntry]:
    try:
        with os.scandir(path) as iterator:
            return list(iterator)
    except FileNotFoundError as exc:
        raise NotFound("directory not found") from exc
    except NotADirectoryError as exc:
        raise NotADirectory() from exc
    except OSError as exc:
        LOGGER.error("Unable to read directory %s: %s", path, exc)
        raise PreviewIOError("failed to read directory") from exc


def list_entries(resolved: ResolvedPath) -> List[FileEntry]:
    """Direct children of a sandboxed directory; symlinks are skipped."""
    entries = []
    for item in _scandir(resolved.path):
        if item.is_symlink():
            continue
        entry = _entry_from_dir_entry(item, resolved.relative)
        if entry is not None:
            entries.append(entry)
    return sort_entries(entries)


def _walk(items: List[os.DirEntry], relative: str) -> Iterator[FileEntry]:
    """Yield entries depth-first, without following symlinks."""
    for item in sorted(items, key=lambda child: child.name):
        if item.is_symlink():
            continue
        entry = _entry_from_dir_entry(item, relative)
        if entry is None:
            continue
        yield entry
        if entry.type == "dir":
            try:
                children = _scandir(Path(item.path))
            except PreviewError as exc:
                LOGGER.debug("Skipping unreadable directory %s: %s", item.path, exc)
                continue
            yield from _walk(children, posixpath.join(relative, item.name))


def search_entries(
    resolved: ResolvedPath,
    query: str,
    *,
    recursive: bool = False,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> List[FileEntry]:
    """Entries whose name contains ``query``, case-insensitively."""
    needle = query.strip().lower()
    if not needle:
        return []

    if recursive:
        candidates: Iterable[FileEntry] = _walk(_scandir(resolved.path), resolved.relative)
    else:
        candidates = list_entries(resolved)

    results: List[FileEntry] = []
    for entry in candidates:
        if needle in entry.name.lower():
            results.append(entry)
            if len(results) >= max_results:
                break
    return sort_entries(results)
