"""Sandboxed resolution of client-supplied paths."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from filepeek.errors import SandboxViolation
from filepeek.models import ResolvedPath

LOGGER = logging.getLogger(__name__)


def _is_within(root: str, candidate: str) -> bool:
    # Separator suffix prevents /srv/data matching /srv/data2.
    prefix = root if root.endswith(os.sep) else root + os.sep
    return candidate == root or candidate.startswith(prefix)


def _reject(request_path: str | None, reason: str) -> SandboxViolation:
    LOGGER.warning("Sandbox violation (%s) for request path %r", reason, request_path)
    return SandboxViolation()


def resolve_path(root: Path | str, request_path: str | None) -> ResolvedPath:
    """Resolve ``request_path`` against ``root`` or raise ``SandboxViolation``.

    The request path is always interpreted relative to ``root``; a leading
    ``/`` addresses the root itself, so ``""`` and ``"/"`` both resolve to it.
    The joined path is first normalized lexically and checked against the
    root, then canonicalized (symlinks followed) and checked again, so a
    link pointing outside the root is rejected as well.

    The raised error never carries the resolved absolute path.
    """
    raw = (request_path or "").strip()
    if "\0" in raw:
        raise _reject(request_path, "null byte")

    root_str = os.path.normpath(os.path.abspath(str(root)))
    relative = raw.lstrip("/")

    lexical = os.path.normpath(os.path.join(root_str, relative)) if relative else root_str
    if not _is_within(root_str, lexical):
        raise _reject(request_path, "traversal")

    real_root = os.path.realpath(root_str)
    real_path = os.path.realpath(lexical)
    if not _is_within(real_root, real_path):
        raise _reject(request_path, "symlink escape")

    rel = os.path.relpath(lexical, root_str)
    if rel == os.curdir:
        rel = ""
    return ResolvedPath(path=Path(real_path), relative=Path(rel).as_posix() if rel else "")
