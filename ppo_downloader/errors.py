"""
Exceptions raised by PPO Downloader.
"""

from __future__ import annotations


class PPOError(Exception):
    """Base exception for PPO data portal errors."""

    pass


class ValidationError(PPOError, ValueError):
    """Raised when query filters are missing or invalid."""

    pass


class TransportError(PPOError):
    """
    Raised when the request fails or the server answers with an unexpected status.

    Attributes:
        status_code: HTTP status code, or None for connection-level failures
        detail: Diagnostic text returned by the server, if any
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        detail: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class DecodeError(PPOError):
    """Raised when a successful response cannot be decompressed or parsed."""

    pass
