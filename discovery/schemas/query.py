"""Query inputs and federated search results."""

from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from discovery.schemas.unified import ProjectType, UnifiedContentSummary

SourceScope = Literal["all", "curseforge", "modrinth"]
SortKey = Literal["popularity", "updated", "downloads", "name"]


def _clean_tag(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip().lower()
    return value or None


class Query(BaseModel):
    """Abstract search request, independent of any registry."""

    model_config = ConfigDict(frozen=True)

    query: str = ""
    game_version: Optional[str] = None
    loader: Optional[str] = None
    category: Optional[str] = None
    source: SourceScope = "all"
    sort_by: SortKey = "popularity"
    project_type: ProjectType = "mod"
    page: int = 1
    page_size: int = 20

    @field_validator("query", mode="before")
    @classmethod
    def _strip_text(cls, value: Optional[str]) -> str:
        return (value or "").strip()

    @field_validator("game_version", mode="before")
    @classmethod
    def _strip_version(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("loader", "category", mode="before")
    @classmethod
    def _lower_tags(cls, value: Optional[str]) -> Optional[str]:
        return _clean_tag(value)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def active_sources(self) -> List[str]:
        if self.source == "all":
            return ["curseforge", "modrinth"]
        return [self.source]

    def cache_key(self) -> Tuple:
        """Canonical tuple covering every field, page and sort included."""
        return (
            "search",
            self.query,
            self.game_version,
            self.loader,
            self.category,
            self.source,
            self.sort_by,
            self.project_type,
            self.page,
            self.page_size,
        )


class VersionFilters(BaseModel):
    model_config = ConfigDict(frozen=True)

    game_version: Optional[str] = None
    loader: Optional[str] = None

    @field_validator("loader", mode="before")
    @classmethod
    def _lower_loader(cls, value: Optional[str]) -> Optional[str]:
        return _clean_tag(value)


class SourceQuery(BaseModel):
    """One registry's share of a federated query, still in unified vocabulary."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    game_version: Optional[str] = None
    loader: Optional[str] = None
    category: Optional[str] = None
    project_type: ProjectType = "mod"
    sort_by: SortKey = "popularity"
    offset: int = 0
    limit: int = 20


class QueryResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: List[UnifiedContentSummary] = Field(default_factory=list)
    total: int = 0
    has_more: bool = False
    failed_sources: List[str] = Field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.failed_sources)
