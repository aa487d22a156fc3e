"""Categorised failures raised by the conversion pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    BAD_INPUT = "bad_input"
    NOT_FOUND = "not_found"
    TOO_LARGE = "too_large"
    UPSTREAM_TIMEOUT = "upstream_timeout"
    INTERNAL = "internal"


class ConversionError(Exception):
    """Base class for every failure the pipeline reports to its caller.

    Subclasses pin a ``category`` and a default ``message``; the boundary layer
    only ever looks at those two attributes.
    """

    category: ErrorCategory = ErrorCategory.INTERNAL
    message: str = "Internal error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


class InvalidSource(ConversionError):
    """Raised when a remote URL cannot be decoded or is not an absolute http(s) URL."""

    category = ErrorCategory.BAD_INPUT
    message = "Invalid URL"


class InvalidDimensions(ConversionError):
    """Raised when a requested width or height exceeds the configured maximum."""

    category = ErrorCategory.BAD_INPUT
    message = "Requested dimensions exceed the allowed maximum"


class SourceTooLarge(ConversionError):
    """Raised when a remote response declares more bytes than the download budget."""

    category = ErrorCategory.TOO_LARGE
    message = "Requested image is too large"


class SourceUnreadable(ConversionError):
    """Raised when a local image is missing, unreadable or outside the images root."""

    category = ErrorCategory.NOT_FOUND
    message = "The requested image doesn't exist"


class SourceUndecodable(ConversionError):
    """Raised when obtained bytes are not a decodable raster image."""

    category = ErrorCategory.BAD_INPUT
    message = "The requested image was invalid"


class UpstreamTimeout(ConversionError):
    category = ErrorCategory.UPSTREAM_TIMEOUT
    message = "Request to remote server timed out"


class UpstreamTransportError(ConversionError):
    """Raised on network or HTTP status failures while fetching remote bytes.

    ``cause`` is kept for logging only; it is never shown to the client.
    """

    category = ErrorCategory.INTERNAL
    message = "Internal error"

    def __init__(self, cause: Optional[BaseException] = None) -> None:
        super().__init__()
        self.cause = cause
