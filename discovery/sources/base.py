"""Abstract registry adapter and shared HTTP plumbing."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from discovery.core.config import settings
from discovery.core.errors import NotFoundError, SourceUnavailableError
from discovery.core.logging import get_logger
from discovery.schemas.query import SourceQuery, VersionFilters

log = get_logger("sources.base")

T = TypeVar("T")


@dataclass
class SearchPage:
    """One registry's page of native search items plus its reported total."""

    items: List[Any] = field(default_factory=list)
    total: int = 0


class BaseSource(ABC):
    """Abstract base class for content registries.

    Adapters only translate requests and parse responses; they never look at
    another registry's data.
    """

    name: str
    base_url: str

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._client = client

    @abstractmethod
    async def search(self, query: SourceQuery) -> SearchPage:
        """Run one page of a search in this registry's request format."""

    @abstractmethod
    async def fetch_detail(self, native_id: str) -> BaseModel:
        """Fetch one project in the registry's native schema."""

    @abstractmethod
    async def fetch_versions(self, native_id: str, filters: VersionFilters) -> List[BaseModel]:
        """Fetch the project's downloadable versions, filtered server-side where possible."""

    @abstractmethod
    async def fetch_game_versions(self) -> List[str]:
        """Release game versions known to the registry, newest first."""

    @abstractmethod
    def is_valid_id(self, native_id: str) -> bool:
        """Whether ``native_id`` is syntactically valid for this registry."""

    def default_headers(self) -> Dict[str, str]:
        return {"Accept": "application/json", "User-Agent": settings.USER_AGENT}

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET ``path`` and decode JSON, mapping every failure onto the error taxonomy."""
        url = f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
        params = {k: v for k, v in (params or {}).items() if v is not None}
        try:
            if self._client is not None:
                resp = await self._client.get(url, params=params, headers=self.default_headers())
            else:
                async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
                    resp = await client.get(url, params=params, headers=self.default_headers())
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status == 404:
                raise NotFoundError(path, f"{self.name} returned 404") from exc
            reason = "rate limited" if status == 429 else f"HTTP {status}"
            raise SourceUnavailableError(self.name, reason, status_code=status) from exc
        except httpx.HTTPError as exc:
            raise SourceUnavailableError(self.name, f"{type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            raise SourceUnavailableError(self.name, f"invalid JSON: {exc}") from exc

    def _parse(self, model: Type[T], payload: Any) -> T:
        """Validate a payload against a native schema; schema drift is an outage."""
        try:
            return TypeAdapter(model).validate_python(payload)
        except ValidationError as exc:
            log.error(f"Malformed {self.name} response: {exc.error_count()} validation errors")
            raise SourceUnavailableError(self.name, "malformed response") from exc

    @staticmethod
    def _envelope(payload: Any) -> Any:
        """Unwrap ``{"data": ...}`` responses; anything else fails validation later."""
        if isinstance(payload, dict):
            return payload.get("data")
        return None
