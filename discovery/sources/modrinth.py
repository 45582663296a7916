"""Community registry (Modrinth) adapter."""

from __future__ import annotations

import asyncio
import json
import re
from typing import Any, Dict, List, Optional

import httpx

from discovery.core.config import settings
from discovery.core.errors import DiscoveryError
from discovery.core.logging import get_logger
from discovery.schemas.query import SourceQuery, VersionFilters
from discovery.schemas.raw import (
    ModrinthGameVersionTag,
    ModrinthProject,
    ModrinthSearchResponse,
    ModrinthTeamMember,
    ModrinthVersion,
)
from discovery.services import vocabulary
from .base import BaseSource, SearchPage

log = get_logger("sources.modrinth")

# Base62 project ids and slugs
_PROJECT_ID = re.compile(r"^[A-Za-z0-9_.\-]{1,64}$")


def build_facets(
    project_type: str,
    category: Optional[str] = None,
    game_version: Optional[str] = None,
    loader: Optional[str] = None,
) -> List[List[str]]:
    """Facet groups are AND-ed together; the entries inside one group are OR-ed."""
    facets: List[List[str]] = [[f"project_type:{project_type}"]]
    category_tag = vocabulary.category_to_modrinth(category)
    if category_tag:
        facets.append([f"categories:{category_tag}"])
    if game_version:
        facets.append([f"versions:{game_version}"])
    loader_tag = vocabulary.loader_to_modrinth(loader)
    if loader_tag:
        facets.append([f"categories:{loader_tag}"])
    return facets


class ModrinthSource(BaseSource):
    """Searches and resolves projects on Modrinth (string tags, facet filters, no key)."""

    name = "modrinth"

    def __init__(self, client: Optional[httpx.AsyncClient] = None, base_url: Optional[str] = None):
        super().__init__(client)
        self.base_url = base_url or settings.MODRINTH_BASE_URL

    def is_valid_id(self, native_id: str) -> bool:
        return bool(native_id and _PROJECT_ID.match(native_id))

    def build_search_params(self, query: SourceQuery) -> Dict[str, Any]:
        facets = build_facets(query.project_type, query.category, query.game_version, query.loader)
        return {
            "query": query.text or None,
            "facets": json.dumps(facets),
            "index": vocabulary.sort_to_modrinth(query.sort_by),
            "offset": query.offset,
            "limit": query.limit,
        }

    async def search(self, query: SourceQuery) -> SearchPage:
        params = self.build_search_params(query)
        data = self._parse(ModrinthSearchResponse, await self._get_json("/search", params))
        log.info(
            f"Fetched {len(data.hits)} of {data.total_hits} projects from Modrinth "
            f"(offset={params['offset']}, limit={params['limit']})"
        )
        return SearchPage(items=data.hits, total=data.total_hits)

    async def fetch_detail(self, native_id: str) -> ModrinthProject:
        payload, members = await asyncio.gather(
            self._get_json(f"/project/{native_id}"),
            self._fetch_members(native_id),
        )
        project = self._parse(ModrinthProject, payload)
        return project.model_copy(update={"members": members})

    async def _fetch_members(self, native_id: str) -> List[ModrinthTeamMember]:
        """Team members in display order; empty when the team lookup fails."""
        try:
            payload = await self._get_json(f"/project/{native_id}/members")
            members = self._parse(List[ModrinthTeamMember], payload)
        except DiscoveryError as exc:
            log.warning(f"Modrinth members unavailable for {native_id}: {exc}")
            return []
        return sorted(members, key=lambda m: m.ordering)

    async def fetch_versions(self, native_id: str, filters: VersionFilters) -> List[ModrinthVersion]:
        loader = vocabulary.loader_to_modrinth(filters.loader)
        params = {
            "loaders": json.dumps([loader]) if loader else None,
            "game_versions": json.dumps([filters.game_version]) if filters.game_version else None,
        }
        payload = await self._get_json(f"/project/{native_id}/version", params)
        versions = self._parse(List[ModrinthVersion], payload)
        log.info(f"Fetched {len(versions)} versions for Modrinth project {native_id}")
        return versions

    async def fetch_game_versions(self) -> List[str]:
        payload = await self._get_json("/tag/game_version")
        tags = self._parse(List[ModrinthGameVersionTag], payload)
        # The tag endpoint already lists newest first
        return [t.version for t in tags if t.version_type == "release"]
