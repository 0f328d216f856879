"""
Everything search client exceptions.
"""

from __future__ import annotations

from typing import Optional


class EverythingError(RuntimeError):
    """Base class for search client errors."""


class EverythingConnectionError(EverythingError):
    """Raised when the Everything HTTP server cannot be reached."""


class EverythingAPIError(EverythingError):
    """Raised when the Everything HTTP server answers with an error status."""

    def __init__(
        self,
        detail: str,
        *,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(detail)


class EverythingAuthError(EverythingAPIError):
    """HTTP 401 from the Everything server."""
