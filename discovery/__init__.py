"""Federated content discovery across the CurseForge and Modrinth registries."""

from discovery.core.errors import DiscoveryError, InvalidQueryError, NotFoundError, SourceUnavailableError
from discovery.schemas.query import Query, QueryResult, VersionFilters
from discovery.schemas.unified import UnifiedContentDetail, UnifiedContentSummary, UnifiedVersion
from discovery.services.discovery_service import DiscoveryService

__all__ = [
    "DiscoveryService",
    "Query",
    "QueryResult",
    "VersionFilters",
    "UnifiedContentSummary",
    "UnifiedContentDetail",
    "UnifiedVersion",
    "DiscoveryError",
    "InvalidQueryError",
    "NotFoundError",
    "SourceUnavailableError",
]
