"""Curated registry (CurseForge) adapter."""

from __future__ import annotations

import asyncio
import re
from typing import Any, Dict, List, Optional

import httpx

from discovery.core.config import settings
from discovery.core.errors import DiscoveryError, SourceUnavailableError
from discovery.core.logging import get_logger
from discovery.schemas.query import SourceQuery, VersionFilters
from discovery.schemas.raw import (
    CurseForgeFile,
    CurseForgeGameVersionGroup,
    CurseForgeMod,
    CurseForgeSearchResponse,
)
from discovery.schemas.unified import game_version_key
from discovery.services import vocabulary
from .base import BaseSource, SearchPage

log = get_logger("sources.curseforge")

# The search endpoint refuses index + pageSize beyond this window
MAX_RESULT_WINDOW = 10_000

_RELEASE_VERSION = re.compile(r"^\d+\.\d+(\.\d+)?$")


class CurseForgeSource(BaseSource):
    """Searches and resolves projects on CurseForge (numeric ids, API-key gated)."""

    name = "curseforge"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        game_id: Optional[int] = None,
    ):
        super().__init__(client)
        self.api_key = api_key if api_key is not None else settings.CURSEFORGE_API_KEY
        self.base_url = base_url or settings.CURSEFORGE_BASE_URL
        self.game_id = game_id or settings.CURSEFORGE_GAME_ID

    def default_headers(self) -> Dict[str, str]:
        headers = super().default_headers()
        headers["x-api-key"] = self.api_key or ""
        return headers

    def is_valid_id(self, native_id: str) -> bool:
        return bool(native_id) and native_id.isascii() and native_id.isdigit()

    def _require_key(self) -> None:
        if not self.api_key:
            raise SourceUnavailableError(self.name, "CURSEFORGE_API_KEY is not configured")

    def build_search_params(self, query: SourceQuery) -> Dict[str, Any]:
        category_id = vocabulary.category_to_curseforge(query.category)
        limit = min(query.limit, max(MAX_RESULT_WINDOW - query.offset, 0))
        return {
            "gameId": self.game_id,
            "classId": vocabulary.project_type_to_curseforge(query.project_type),
            "searchFilter": query.text or None,
            "gameVersion": query.game_version,
            "modLoaderType": vocabulary.loader_to_curseforge(query.loader),
            "categoryId": category_id if category_id != vocabulary.CURSEFORGE_CATEGORY_ALL else None,
            "sortField": vocabulary.sort_to_curseforge(query.sort_by),
            "sortOrder": vocabulary.sort_order_to_curseforge(query.sort_by),
            "pageSize": limit,
            "index": query.offset,
        }

    async def search(self, query: SourceQuery) -> SearchPage:
        self._require_key()
        params = self.build_search_params(query)
        if params["pageSize"] <= 0:
            # Past the result window: ask for one row only to learn the total
            count_only = dict(params, index=0, pageSize=1)
            data = self._parse(CurseForgeSearchResponse, await self._get_json("/mods/search", count_only))
            log.info(f"Offset {query.offset} is past the {MAX_RESULT_WINDOW} result window")
            return SearchPage(items=[], total=data.pagination.total_count)

        data = self._parse(CurseForgeSearchResponse, await self._get_json("/mods/search", params))
        log.info(
            f"Fetched {len(data.data)} of {data.pagination.total_count} mods from CurseForge "
            f"(index={params['index']}, pageSize={params['pageSize']})"
        )
        return SearchPage(items=data.data, total=data.pagination.total_count)

    async def fetch_detail(self, native_id: str) -> CurseForgeMod:
        self._require_key()
        payload, description = await asyncio.gather(
            self._get_json(f"/mods/{native_id}"),
            self._fetch_description(native_id),
        )
        mod = self._parse(CurseForgeMod, self._envelope(payload))
        return mod.model_copy(update={"description": description})

    async def _fetch_description(self, native_id: str) -> Optional[str]:
        """HTML body; None when unavailable so the summary stands in."""
        try:
            payload = await self._get_json(f"/mods/{native_id}/description")
        except DiscoveryError as exc:
            log.warning(f"CurseForge description unavailable for {native_id}: {exc}")
            return None
        body = self._envelope(payload)
        return body if isinstance(body, str) and body.strip() else None

    async def fetch_versions(self, native_id: str, filters: VersionFilters) -> List[CurseForgeFile]:
        self._require_key()
        params = {
            "gameVersion": filters.game_version,
            "modLoaderType": vocabulary.loader_to_curseforge(filters.loader),
        }
        payload = await self._get_json(f"/mods/{native_id}/files", params)
        files = self._parse(List[CurseForgeFile], self._envelope(payload))
        log.info(f"Fetched {len(files)} files for CurseForge mod {native_id}")
        return files

    async def fetch_game_versions(self) -> List[str]:
        self._require_key()
        payload = await self._get_json(f"/games/{self.game_id}/versions")
        groups = self._parse(List[CurseForgeGameVersionGroup], self._envelope(payload))
        versions = {v for group in groups for v in group.versions if _RELEASE_VERSION.match(v)}
        return sorted(versions, key=game_version_key, reverse=True)
