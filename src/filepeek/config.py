"""Application configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from filepeek.errors import ConfigError

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_PREVIEW_MAX = 1024 * 1024
DEFAULT_CHUNK_SIZE = 64 * 1024

ENV_PREFIX = "FILEPEEK_"

_SIZE_SUFFIXES = (
    ("KB", 1024),
    ("K", 1024),
    ("MB", 1024 * 1024),
    ("M", 1024 * 1024),
    ("GB", 1024 * 1024 * 1024),
    ("G", 1024 * 1024 * 1024),
)


def parse_bytes(value: str | int) -> int:
    """Parse a size such as ``1024``, ``512KB`` or ``1.5M`` into bytes."""
    if isinstance(value, int):
        if value < 0:
            raise ConfigError("size must be >= 0")
        return value

    text = value.strip().upper()
    if not text:
        raise ConfigError("empty size")

    multiplier = 1
    for suffix, factor in _SIZE_SUFFIXES:
        if text.endswith(suffix):
            multiplier = factor
            text = text[: -len(suffix)].strip()
            break

    if not text:
        raise ConfigError(f"invalid size: {value!r}")
    try:
        parsed = float(text)
    except ValueError as exc:
        raise ConfigError(f"invalid size: {value!r}") from exc
    if parsed < 0:
        raise ConfigError("size must be >= 0")
    return int(parsed * multiplier)


def normalize_base_path(base_path: str) -> str:
    """Return ``""`` for the site root, else ``/prefix`` without a trailing slash."""
    base_path = base_path.strip()
    if base_path in ("", "/"):
        return ""
    if not base_path.startswith("/"):
        base_path = "/" + base_path
    return base_path.rstrip("/")


@dataclass(slots=True)
class AppConfig:
    root: Path = Path(".")
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    preview_max: int = DEFAULT_PREVIEW_MAX
    chunk_size: int = DEFAULT_CHUNK_SIZE
    base_path: str = ""
    read_timeout: float | None = None

    def __post_init__(self) -> None:
        self.root = Path(self.root)
        if self.preview_max <= 0:
            self.preview_max = DEFAULT_PREVIEW_MAX
        if self.chunk_size <= 0:
            self.chunk_size = DEFAULT_CHUNK_SIZE
        self.base_path = normalize_base_path(self.base_path)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Build a config from ``FILEPEEK_*`` environment variables."""
        env = os.environ if environ is None else environ
        values = {
            name: env[ENV_PREFIX + name.upper()]
            for name in ("root", "host", "port", "preview_max", "chunk_size", "base_path", "read_timeout")
            if ENV_PREFIX + name.upper() in env
        }

        kwargs: dict = {}
        if "root" in values:
            kwargs["root"] = Path(values["root"])
        if "host" in values:
            kwargs["host"] = values["host"]
        if "port" in values:
            try:
                kwargs["port"] = int(values["port"])
            except ValueError as exc:
                raise ConfigError(f"invalid port: {values['port']!r}") from exc
        if "preview_max" in values:
            kwargs["preview_max"] = parse_bytes(values["preview_max"])
        if "chunk_size" in values:
            kwargs["chunk_size"] = parse_bytes(values["chunk_size"])
        if "base_path" in values:
            kwargs["base_path"] = values["base_path"]
        if values.get("read_timeout"):
            try:
                kwargs["read_timeout"] = float(values["read_timeout"]) or None
            except ValueError as exc:
                raise ConfigError(f"invalid read timeout: {values['read_timeout']!r}") from exc
        return cls(**kwargs)

    def resolve_root(self) -> Path:
        """Return the canonical root directory, validating it exists."""
        absolute = Path(os.path.abspath(self.root))
        if absolute.is_symlink():
            raise ConfigError("root path cannot be a symlink")
        if not absolute.exists():
            raise ConfigError(f"root not accessible: {absolute}")
        if not absolute.is_dir():
            raise ConfigError("root path must be a directory")
        return Path(os.path.realpath(absolute))

    @property
    def addr(self) -> str:
        return f"{self.host}:{self.port}"
