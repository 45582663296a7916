"""Native registry schemas, parsed as-is from each registry's JSON."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# -----------------------------------------------------------------------------
# Curated registry (CurseForge): camelCase payloads, numeric taxonomy
# -----------------------------------------------------------------------------


class CurseForgeSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class CurseForgeLinks(CurseForgeSchema):
    website_url: Optional[str] = None
    wiki_url: Optional[str] = None
    issues_url: Optional[str] = None
    source_url: Optional[str] = None


class CurseForgeCategory(CurseForgeSchema):
    id: int
    name: str = ""
    slug: str = ""
    class_id: Optional[int] = None


class CurseForgeAuthor(CurseForgeSchema):
    id: int = 0
    name: str = ""
    url: Optional[str] = None


class CurseForgeAsset(CurseForgeSchema):
    """Logo or screenshot."""

    id: int = 0
    title: Optional[str] = None
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    url: Optional[str] = None


class CurseForgeFileIndex(CurseForgeSchema):
    game_version: str = ""
    file_id: int = 0
    filename: str = ""
    release_type: int = 1
    mod_loader: Optional[int] = None


class CurseForgeFile(CurseForgeSchema):
    id: int
    mod_id: int = 0
    display_name: str = ""
    file_name: str = ""
    release_type: int = 1
    file_date: datetime
    file_length: int = 0
    download_count: int = 0
    download_url: Optional[str] = None
    game_versions: List[str] = Field(default_factory=list)


class CurseForgeMod(CurseForgeSchema):
    id: int
    name: str
    slug: str = ""
    links: CurseForgeLinks = Field(default_factory=CurseForgeLinks)
    summary: str = ""
    download_count: int = 0
    thumbs_up_count: Optional[int] = None
    class_id: Optional[int] = None
    categories: List[CurseForgeCategory] = Field(default_factory=list)
    authors: List[CurseForgeAuthor] = Field(default_factory=list)
    logo: Optional[CurseForgeAsset] = None
    screenshots: List[CurseForgeAsset] = Field(default_factory=list)
    latest_files_indexes: List[CurseForgeFileIndex] = Field(default_factory=list)
    date_created: Optional[datetime] = None
    date_modified: datetime
    # Filled from /mods/{id}/description on detail lookups only
    description: Optional[str] = None


class CurseForgePagination(CurseForgeSchema):
    index: int = 0
    page_size: int = 0
    result_count: int = 0
    total_count: int = 0


class CurseForgeSearchResponse(CurseForgeSchema):
    data: List[CurseForgeMod]
    pagination: CurseForgePagination = Field(default_factory=CurseForgePagination)


class CurseForgeGameVersionGroup(CurseForgeSchema):
    type: int = 0
    versions: List[str] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Community registry (Modrinth): snake_case payloads, string tags
# -----------------------------------------------------------------------------


class ModrinthSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ModrinthSearchHit(ModrinthSchema):
    project_id: str
    slug: str = ""
    title: str = ""
    description: str = ""
    project_type: str = "mod"
    categories: List[str] = Field(default_factory=list)
    display_categories: List[str] = Field(default_factory=list)
    downloads: int = 0
    follows: Optional[int] = None
    icon_url: Optional[str] = None
    author: str = ""
    versions: List[str] = Field(default_factory=list)
    date_created: Optional[datetime] = None
    date_modified: datetime
    license: str = ""
    gallery: List[str] = Field(default_factory=list)


class ModrinthSearchResponse(ModrinthSchema):
    hits: List[ModrinthSearchHit]
    offset: int = 0
    limit: int = 0
    total_hits: int = 0


class ModrinthLicense(ModrinthSchema):
    id: str = ""
    name: str = ""
    url: Optional[str] = None


class ModrinthGalleryImage(ModrinthSchema):
    url: str
    featured: bool = False
    title: Optional[str] = None
    description: Optional[str] = None


class ModrinthUser(ModrinthSchema):
    username: str = ""
    name: Optional[str] = None


class ModrinthTeamMember(ModrinthSchema):
    user: ModrinthUser
    role: str = ""
    ordering: int = 0


class ModrinthProject(ModrinthSchema):
    id: str
    slug: str = ""
    title: str = ""
    description: str = ""
    body: str = ""
    project_type: str = "mod"
    categories: List[str] = Field(default_factory=list)
    additional_categories: List[str] = Field(default_factory=list)
    downloads: int = 0
    followers: Optional[int] = None
    icon_url: Optional[str] = None
    team: str = ""
    published: datetime
    updated: datetime
    game_versions: List[str] = Field(default_factory=list)
    loaders: List[str] = Field(default_factory=list)
    license: Optional[ModrinthLicense] = None
    gallery: List[ModrinthGalleryImage] = Field(default_factory=list)
    # Filled from /project/{id}/members on detail lookups only
    members: List[ModrinthTeamMember] = Field(default_factory=list)


class ModrinthVersionFile(ModrinthSchema):
    url: str
    filename: str = ""
    primary: bool = False
    size: int = 0


class ModrinthVersion(ModrinthSchema):
    id: str
    project_id: str = ""
    name: str = ""
    version_number: str = ""
    changelog: Optional[str] = None
    game_versions: List[str] = Field(default_factory=list)
    version_type: str = "release"
    loaders: List[str] = Field(default_factory=list)
    date_published: datetime
    downloads: int = 0
    files: List[ModrinthVersionFile] = Field(default_factory=list)


class ModrinthGameVersionTag(ModrinthSchema):
    version: str
    version_type: str = "release"
    date: Optional[datetime] = None
    major: bool = False
