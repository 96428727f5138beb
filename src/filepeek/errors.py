"""Errors raised by the preview pipeline.

Every error is scoped to a single request. The ``code`` attribute is the
machine-readable identifier sent to clients alongside the message.
"""

from __future__ import annotations

from typing import Any, Dict


class PreviewError(Exception):
    """Base class for request-scoped preview failures."""

    code = "PREVIEW_ERROR"

    def to_dict(self) -> Dict[str, Any]:
        return {"error": str(self), "code": self.code}


class SandboxViolation(PreviewError):
    """A request path resolved outside the configured root."""

    code = "ACCESS_DENIED"

    def __init__(self, message: str = "access denied") -> None:
        super().__init__(message)


class NotFound(PreviewError):
    code = "NOT_FOUND"


class NotAFile(PreviewError):
    code = "NOT_A_FILE"

    def __init__(self, message: str = "path is a directory") -> None:
        super().__init__(message)


class NotADirectory(PreviewError):
    code = "NOT_A_DIRECTORY"

    def __init__(self, message: str = "path is not a directory") -> None:
        super().__init__(message)


class InvalidRange(PreviewError):
    code = "INVALID_RANGE"


class TooLarge(PreviewError):
    """File exceeds the preview ceiling and no explicit limit was given."""

    code = "TOO_LARGE"

    def __init__(self, size: int, max_size: int) -> None:
        super().__init__(f"file is {size} bytes, preview limit is {max_size} bytes")
        self.size = size
        self.max_size = max_size

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["size"] = self.size
        payload["max"] = self.max_size
        return payload


class PreviewIOError(PreviewError):
    code = "READ_FAILED"


class ConfigError(ValueError):
    """Invalid application configuration."""
