"""Unified content model shared by both registries."""

from datetime import datetime
from typing import Iterable, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from discovery.core.errors import NotFoundError

ContentSource = Literal["curseforge", "modrinth"]
ProjectType = Literal["mod", "modpack", "resourcepack", "shader"]
ReleaseType = Literal["release", "beta", "alpha"]

SOURCE_PREFIXES = {"curseforge": "cf", "modrinth": "mr"}
PREFIX_SOURCES = {prefix: source for source, prefix in SOURCE_PREFIXES.items()}


def make_unified_id(source: str, native_id: object) -> str:
    return f"{SOURCE_PREFIXES[source]}-{native_id}"


def parse_unified_id(unified_id: str) -> Tuple[str, str]:
    """Split ``cf-123`` into ``("curseforge", "123")``."""
    prefix, sep, native_id = (unified_id or "").partition("-")
    source = PREFIX_SOURCES.get(prefix)
    if not sep or source is None or not native_id:
        raise NotFoundError(unified_id, "unknown source prefix")
    return source, native_id


def dedupe(values: Iterable[str]) -> List[str]:
    """Drop empty strings and repeats, keeping first-seen order."""
    seen = set()
    result = []
    for value in values:
        value = (value or "").strip()
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


class UnifiedContentSummary(BaseModel):
    """One search-result row, independent of the registry it came from."""

    model_config = ConfigDict(frozen=True)

    id: str
    source: ContentSource
    project_type: ProjectType = "mod"
    name: str
    slug: str
    short_description: str = ""
    icon_url: Optional[str] = None
    downloads: int = Field(default=0, ge=0)
    followers: Optional[int] = Field(default=None, ge=0)
    authors: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    game_versions: List[str] = Field(default_factory=list)
    loaders: List[str] = Field(default_factory=list)
    date_updated: datetime
    website_url: str = ""

    @field_validator("categories", "game_versions", "loaders")
    @classmethod
    def _dedupe(cls, values: List[str]) -> List[str]:
        return dedupe(values)

    @field_validator("authors")
    @classmethod
    def _drop_blank_authors(cls, values: List[str]) -> List[str]:
        return [a.strip() for a in values if a and a.strip()]

    @model_validator(mode="after")
    def _check_prefix(self):
        if not self.id.startswith(f"{SOURCE_PREFIXES[self.source]}-"):
            raise ValueError(f"id {self.id!r} does not carry the {self.source} prefix")
        return self

    @property
    def native_id(self) -> str:
        return parse_unified_id(self.id)[1]


class Screenshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    thumbnail_url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None


class License(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    url: Optional[str] = None


class UnifiedContentDetail(UnifiedContentSummary):
    """Full project page. ``body`` is HTML for curseforge, markdown for modrinth."""

    body: str = ""
    date_created: Optional[datetime] = None
    license: Optional[License] = None
    screenshots: List[Screenshot] = Field(default_factory=list)


class UnifiedVersion(BaseModel):
    """A downloadable release of a project; file fields describe the primary file."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    version_number: str
    game_versions: List[str] = Field(default_factory=list)
    loaders: List[str] = Field(default_factory=list)
    release_type: ReleaseType = "release"
    date_published: datetime
    downloads: int = Field(default=0, ge=0)
    file_url: Optional[str] = None
    file_name: str
    file_size: int = Field(default=0, ge=0)
    changelog: Optional[str] = None

    @field_validator("game_versions", "loaders")
    @classmethod
    def _dedupe(cls, values: List[str]) -> List[str]:
        return dedupe(values)


class LoaderVersion(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: str
    stable: bool = False
    loader: str


def game_version_key(version: str) -> Tuple[int, ...]:
    """Numeric sort key for release versions such as ``1.20.1``."""
    return tuple(int(part) if part.isdigit() else -1 for part in version.split("."))
