"""Federated discovery over the curated and community registries."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import httpx
from pydantic import ValidationError

from discovery.core.cache import QueryCache
from discovery.core.config import settings
from discovery.core.errors import DiscoveryError, InvalidQueryError, NotFoundError, SourceUnavailableError
from discovery.core.logging import get_logger
from discovery.schemas.query import Query, QueryResult, SourceQuery, VersionFilters
from discovery.schemas.unified import (
    LoaderVersion,
    UnifiedContentDetail,
    UnifiedVersion,
    game_version_key,
    parse_unified_id,
)
from discovery.services import normalizer, vocabulary
from discovery.services.loader_service import LoaderVersionResolver, LoaderVersionService
from discovery.services.pagination import merge_results, split_page
from discovery.sources.base import BaseSource
from discovery.sources.curseforge import CurseForgeSource
from discovery.sources.modrinth import ModrinthSource
from discovery.sources.runner import SourceRunner

log = get_logger("discovery_service")

MAX_PAGE_SIZE = 100


class DiscoveryService:
    """Entry point for the presentation layer.

    Responsibilities:
    - Validate abstract queries before anything reaches a registry
    - Split a page across the active registries and fetch them concurrently
    - Normalize and merge the answers, absorbing single-registry outages
    - Resolve details and versions against the registry named by the id prefix
    - Memoize everything through the query cache

    Usage:
        async with DiscoveryService() as service:
            result = await service.search(Query(query="storage", sort_by="downloads"))
            detail = await service.get_detail(result.items[0].id)
    """

    def __init__(
        self,
        sources: Optional[List[BaseSource]] = None,
        cache: Optional[QueryCache] = None,
        loader_resolver: Optional[LoaderVersionResolver] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._owned_client: Optional[httpx.AsyncClient] = None
        if sources is None:
            if client is None:
                client = self._owned_client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
            sources = [ModrinthSource(client)]
            if settings.curseforge_enabled:
                sources.insert(0, CurseForgeSource(client))
            else:
                log.warning("CURSEFORGE_API_KEY is not set; searching Modrinth only")
        self.sources: Dict[str, BaseSource] = {s.name: s for s in sources}
        self.cache = cache if cache is not None else QueryCache()
        self.loaders = LoaderVersionService(loader_resolver)

    async def __aenter__(self) -> "DiscoveryService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owned_client is not None:
            await self._owned_client.aclose()
            self._owned_client = None

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------
    async def search(self, query: Union[Query, Mapping[str, Any]]) -> QueryResult:
        """Run one federated page; served from cache while fresh."""
        query = self._coerce_query(query)
        self._validate_query(query)
        return await self.cache.get_or_fetch(
            query.cache_key(),
            lambda: self._search_uncached(query),
            ttl=self._search_ttl,
        )

    async def _search_uncached(self, query: Query) -> QueryResult:
        active = [name for name in query.active_sources if name in self.sources]
        plan = split_page(query.page, query.page_size, active)
        sub_queries = {
            name: SourceQuery(
                text=query.query,
                game_version=query.game_version,
                loader=query.loader,
                category=query.category,
                project_type=query.project_type,
                sort_by=query.sort_by,
                offset=sub.offset,
                limit=sub.limit,
            )
            for name, sub in plan.items()
        }
        layout = {name: (sub.offset, sub.limit) for name, sub in plan.items()}
        log.info(f"Searching {query.cache_key()} | plan={layout}")

        runner = SourceRunner([self.sources[name] for name in plan])
        fan_out = await runner.search(sub_queries)

        pages: Dict[str, list] = {}
        totals: Dict[str, int] = {}
        for name in plan:
            page = fan_out.value_or(name, None)
            if page is None:
                continue
            pages[name] = normalizer.normalize_search_items(name, page.items, query.project_type)
            totals[name] = page.total

        result = merge_results(query, pages, totals, fan_out.failed_sources, rerank=len(active) > 1)
        if result.degraded:
            log.warning(f"Search degraded | failed={result.failed_sources} total={result.total}")
        log.info(f"Search finished | items={len(result.items)} total={result.total} has_more={result.has_more}")
        return result

    @staticmethod
    def _search_ttl(result: QueryResult) -> int:
        if result.degraded:
            return settings.DEGRADED_CACHE_TTL_SECONDS
        return settings.SEARCH_CACHE_TTL_SECONDS

    @staticmethod
    def _coerce_query(query: Union[Query, Mapping[str, Any]]) -> Query:
        if isinstance(query, Query):
            return query
        try:
            return Query.model_validate(dict(query))
        except ValidationError as exc:
            raise InvalidQueryError(f"Invalid query: {exc}") from exc

    def _validate_query(self, query: Query) -> None:
        if query.page < 1:
            raise InvalidQueryError(f"page must be >= 1, got {query.page}")
        if not 1 <= query.page_size <= MAX_PAGE_SIZE:
            raise InvalidQueryError(f"page_size must be between 1 and {MAX_PAGE_SIZE}, got {query.page_size}")
        if query.loader is not None and not vocabulary.is_known_loader(query.loader):
            raise InvalidQueryError(f"Unknown loader '{query.loader}'; expected one of {vocabulary.LOADERS}")
        if query.source != "all" and query.source not in self.sources:
            raise InvalidQueryError(f"Source '{query.source}' is not configured")

    # -------------------------------------------------------------------------
    # Detail & versions
    # -------------------------------------------------------------------------
    async def get_detail(self, unified_id: str) -> UnifiedContentDetail:
        """Full project page from the registry named by the id prefix only."""
        source, native_id = self._resolve(unified_id)
        adapter = self.sources[source]

        async def _fetch() -> UnifiedContentDetail:
            try:
                record = await adapter.fetch_detail(native_id)
            except NotFoundError as exc:
                raise NotFoundError(unified_id, f"{source} has no record {native_id}") from exc
            return normalizer.normalize_detail(source, record)

        return await self.cache.get_or_fetch(
            ("detail", source, native_id),
            _fetch,
            ttl=settings.DETAIL_CACHE_TTL_SECONDS,
        )

    async def get_versions(
        self,
        unified_id: str,
        filters: Union[VersionFilters, Mapping[str, Any], None] = None,
    ) -> List[UnifiedVersion]:
        """Downloadable versions, filtered server-side.

        Curated files carry no loader data, so their ``loaders`` is empty and
        the loader filter cannot be verified client-side.
        """
        source, native_id = self._resolve(unified_id)
        filters = self._coerce_filters(filters)
        adapter = self.sources[source]

        async def _fetch() -> List[UnifiedVersion]:
            try:
                records = await adapter.fetch_versions(native_id, filters)
            except NotFoundError as exc:
                raise NotFoundError(unified_id, f"{source} has no record {native_id}") from exc
            return normalizer.normalize_versions(source, records)

        return await self.cache.get_or_fetch(
            ("versions", source, native_id, filters.game_version, filters.loader),
            _fetch,
            ttl=settings.VERSIONS_CACHE_TTL_SECONDS,
        )

    def _resolve(self, unified_id: str) -> Tuple[str, str]:
        source, native_id = parse_unified_id(unified_id)
        adapter = self.sources.get(source)
        if adapter is None:
            raise NotFoundError(unified_id, f"source '{source}' is not configured")
        if not adapter.is_valid_id(native_id):
            raise NotFoundError(unified_id, f"'{native_id}' is not a valid {source} id")
        return source, native_id

    @staticmethod
    def _coerce_filters(filters: Union[VersionFilters, Mapping[str, Any], None]) -> VersionFilters:
        if filters is None:
            filters = VersionFilters()
        elif not isinstance(filters, VersionFilters):
            try:
                filters = VersionFilters.model_validate(dict(filters))
            except ValidationError as exc:
                raise InvalidQueryError(f"Invalid version filters: {exc}") from exc
        if filters.loader is not None and not vocabulary.is_known_loader(filters.loader):
            raise InvalidQueryError(f"Unknown loader '{filters.loader}'; expected one of {vocabulary.LOADERS}")
        return filters

    # -------------------------------------------------------------------------
    # Reference data
    # -------------------------------------------------------------------------
    async def get_game_versions(self) -> List[str]:
        """Union of release game versions from every healthy registry, newest first."""

        async def _fetch() -> List[str]:
            fan_out = await SourceRunner(list(self.sources.values())).gather(
                lambda source: source.fetch_game_versions()
            )
            if len(fan_out.failed_sources) == len(self.sources):
                raise SourceUnavailableError("all", "no registry returned game versions")
            versions = set()
            for name in self.sources:
                versions.update(fan_out.value_or(name, []))
            return sorted(versions, key=game_version_key, reverse=True)

        return await self.cache.get_or_fetch(
            ("game_versions",),
            _fetch,
            ttl=settings.GAME_VERSIONS_CACHE_TTL_SECONDS,
        )

    @staticmethod
    def get_categories() -> List[str]:
        return list(vocabulary.CATEGORIES)

    @staticmethod
    def get_loaders() -> List[str]:
        return list(vocabulary.LOADERS)

    async def get_loader_versions(self, loader_type: str, mc_version: str) -> List[LoaderVersion]:
        """Loader builds for a game version via the host resolver; [] on failure."""
        key = ("loader_versions", (loader_type or "").strip().lower(), (mc_version or "").strip())
        try:
            return await self.cache.get_or_fetch(
                key,
                lambda: self.loaders.get_versions(loader_type, mc_version),
                ttl=settings.LOADER_VERSIONS_CACHE_TTL_SECONDS,
            )
        except DiscoveryError as exc:
            log.error(f"Loader versions unavailable: {exc}")
            return []

    # -------------------------------------------------------------------------
    # Cache control
    # -------------------------------------------------------------------------
    def invalidate_cache(self, kind: Optional[str] = None) -> None:
        """Drop cached entries of one kind ("search", "detail", ...) or everything."""
        if kind is None:
            self.cache.clear()
            log.info("Query cache cleared")
            return
        dropped = self.cache.invalidate_prefix(kind)
        log.info(f"Invalidated {dropped} cached '{kind}' entries")
