"""Byte-offset chunked reads of file contents.

Offsets and limits are counted in bytes of the file on disk. A window that
would end in the middle of a UTF-8 sequence is shortened to the preceding
character boundary (unless that would leave it empty), so concatenating the
decoded chunks of a sequential read reproduces the decoded file.
"""

from __future__ import annotations

import logging
import os
import stat as stat_module
from pathlib import Path

from filepeek.config import DEFAULT_CHUNK_SIZE, DEFAULT_PREVIEW_MAX
from filepeek.errors import InvalidRange, NotAFile, NotFound, PreviewIOError, TooLarge
from filepeek.models import PreviewChunk, timestamp_from_mtime

LOGGER = logging.getLogger(__name__)


def _utf8_sequence_length(lead: int) -> int:
    if lead < 0x80:
        return 1
    if lead >> 5 == 0b110:
        return 2
    if lead >> 4 == 0b1110:
        return 3
    if lead >> 3 == 0b11110:
        return 4
    return 1


def trim_to_boundary(data: bytes) -> bytes:
    """Drop a trailing incomplete UTF-8 sequence, if any."""
    # A sequence is at most 4 bytes, so only the last 3 can be a partial one.
    for back in range(1, min(4, len(data)) + 1):
        byte = data[-back]
        if byte & 0xC0 != 0x80:
            if _utf8_sequence_length(byte) > back and len(data) > back:
                return data[:-back]
            return data
    return data


def _stat(path: Path) -> os.stat_result:
    try:
        return path.stat()
    except FileNotFoundError as exc:
        raise NotFound("file not found") from exc
    except NotADirectoryError as exc:
        raise NotFound("file not found") from exc
    except OSError as exc:
        LOGGER.error("Unable to stat %s: %s", path, exc)
        raise PreviewIOError("failed to stat file") from exc


def read_chunk(
    path: Path,
    offset: int | None = None,
    limit: int | None = None,
    *,
    preview_max: int = DEFAULT_PREVIEW_MAX,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    display_path: str | None = None,
) -> PreviewChunk:
    """Read one window of ``path`` as text.

    With neither ``offset`` nor ``limit`` the whole file is returned in a
    single chunk. An unspecified (``None`` or ``0``) limit on a file larger
    than ``preview_max`` raises ``TooLarge``; otherwise paged reads default to
    ``chunk_size`` and explicit limits are capped at ``preview_max``.

    ``path`` must already have passed the sandbox check.
    """
    if (offset is not None and offset < 0) or (limit is not None and limit < 0):
        raise InvalidRange("offset/limit must be >= 0")

    info = _stat(path)
    if stat_module.S_ISDIR(info.st_mode):
        raise NotAFile()
    size = info.st_size

    explicit_limit = bool(limit)
    if not explicit_limit and size > preview_max:
        raise TooLarge(size, preview_max)

    if offset is None and not explicit_limit:
        start = 0
        window = size
    else:
        start = min(offset or 0, size)
        window = min(limit, preview_max) if explicit_limit else chunk_size

    window = min(window, size - start)
    try:
        with path.open("rb") as handle:
            handle.seek(start)
            data = handle.read(window)
    except FileNotFoundError as exc:
        raise NotFound("file not found") from exc
    except IsADirectoryError as exc:
        raise NotAFile() from exc
    except OSError as exc:
        LOGGER.error("Failed to read %s: %s", path, exc)
        raise PreviewIOError("failed to read file") from exc

    if start + len(data) < size:
        data = trim_to_boundary(data)

    LOGGER.debug("Read %d bytes of %s at offset %d (size %d)", len(data), path, start, size)
    return PreviewChunk(
        path=display_path if display_path is not None else str(path),
        name=path.name,
        content=data.decode("utf-8", errors="replace"),
        offset=start,
        limit=window,
        size=size,
        next_offset=start + len(data),
        modified=timestamp_from_mtime(info.st_mtime),
    )
