"""Loader-version lookups delegated to the host application."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import ValidationError

from discovery.core.errors import SourceUnavailableError
from discovery.core.logging import get_logger
from discovery.schemas.unified import LoaderVersion

log = get_logger("loader_service")

# (loader_type, mc_version) -> [{"version": ..., "stable": ..., "loader": ...}]
LoaderVersionResolver = Callable[[str, str], Awaitable[List[Dict[str, Any]]]]


class LoaderVersionService:
    """Wraps the host resolver and validates what it returns.

    A missing resolver yields no versions. A failing resolver raises
    ``SourceUnavailableError`` so callers can fall back to cached data.
    """

    def __init__(self, resolver: Optional[LoaderVersionResolver] = None):
        self.resolver = resolver

    async def get_versions(self, loader_type: str, mc_version: str) -> List[LoaderVersion]:
        loader_type = (loader_type or "").strip().lower()
        mc_version = (mc_version or "").strip()
        if loader_type in ("", "none") or not mc_version:
            return []
        if self.resolver is None:
            log.warning("No loader version resolver configured")
            return []

        try:
            raw = await self.resolver(loader_type, mc_version)
        except Exception as exc:  # noqa: BLE001
            raise SourceUnavailableError("loader-resolver", f"{loader_type} {mc_version}: {exc}") from exc

        versions: List[LoaderVersion] = []
        for entry in raw or []:
            try:
                versions.append(LoaderVersion.model_validate({"loader": loader_type, **entry}))
            except (ValidationError, TypeError) as exc:
                log.warning(f"Skipping malformed {loader_type} version entry {entry!r}: {exc}")
        log.info(f"Resolved {len(versions)} {loader_type} versions for {mc_version}")
        return versions
