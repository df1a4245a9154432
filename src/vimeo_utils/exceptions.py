"""Vimeo API exceptions."""

from __future__ import annotations


class VimeoError(Exception):
    """Base exception for Vimeo client errors."""


class VimeoRequestError(VimeoError):
    """Raised (or returned) when a request cannot be built."""


class VimeoUploadError(VimeoError):
    """Raised when an upload cannot be initiated."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)
