"""
Error taxonomy for the enhancement pipeline.

- ValidationError: rejected before any network call (HTTP 400)
- TransportError: backend unreachable / malformed reply (degrade to offline)
- UpstreamError: backend or completion API refused the call (no retry)

Length drift is never an exception; it travels as EnhanceResult.warning.
"""

from __future__ import annotations
from typing import Optional


class EnhanceError(Exception):
    status: int = 500

    def __init__(self, message: str, *, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status


class ValidationError(EnhanceError):
    status = 400


class InputTooLongError(ValidationError):
    pass


class ResponseTooLongError(EnhanceError):
    """Generated text overshot the allowed margin; carries the text for inspection."""
    status = 400

    def __init__(self, message: str, *, content: str = "", word_count: int = 0):
        super().__init__(message)
        self.content = content
        self.word_count = word_count


class TransportError(EnhanceError):
    status = 502


class BackendUnavailableError(TransportError):
    status = 503


class UpstreamError(EnhanceError):
    pass
