"""Error taxonomy for the discovery engine."""

from __future__ import annotations

from typing import Optional


class DiscoveryError(Exception):
    """Base class for all discovery errors."""


class SourceUnavailableError(DiscoveryError):
    """A registry could not serve the request (network, rate limit, bad payload)."""

    def __init__(self, source: str, reason: str, status_code: Optional[int] = None):
        self.source = source
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"{source} unavailable: {reason}")


class NotFoundError(DiscoveryError):
    """The requested record does not exist or its id is malformed."""

    def __init__(self, content_id: str, detail: Optional[str] = None):
        self.content_id = content_id
        self.detail = detail
        message = f"Content '{content_id}' not found"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InvalidQueryError(DiscoveryError):
    """The caller passed filters that can never be sent to a registry."""
