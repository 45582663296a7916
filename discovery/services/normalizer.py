"""Normalization of native registry records into the unified content model."""

from __future__ import annotations

import re
from typing import Any, List, Optional

from pydantic import ValidationError

from discovery.core.errors import SourceUnavailableError
from discovery.core.logging import get_logger
from discovery.schemas.raw import (
    CurseForgeFile,
    CurseForgeMod,
    ModrinthProject,
    ModrinthSearchHit,
    ModrinthVersion,
)
from discovery.schemas.unified import (
    License,
    Screenshot,
    UnifiedContentDetail,
    UnifiedContentSummary,
    UnifiedVersion,
    make_unified_id,
)
from discovery.services import vocabulary

log = get_logger("normalizer")

CURSEFORGE_SITE = "https://www.curseforge.com/minecraft"
MODRINTH_SITE = "https://modrinth.com"

# Path segment per project type on the curated registry's website
CURSEFORGE_SITE_SECTIONS = {
    "mod": "mc-mods",
    "modpack": "modpacks",
    "resourcepack": "texture-packs",
    "shader": "shaders",
}

# File game-version lists also carry loader and environment labels ("Forge", "Client")
_GAME_VERSION = re.compile(r"^\d")


def _count(value: Optional[int]) -> Optional[int]:
    return None if value is None else max(value, 0)


# -----------------------------------------------------------------------------
# Curated registry
# -----------------------------------------------------------------------------


def _curseforge_common(mod: CurseForgeMod, project_type: Optional[str]) -> dict:
    ptype = project_type or vocabulary.project_type_from_curseforge(mod.class_id)
    website = mod.links.website_url or f"{CURSEFORGE_SITE}/{CURSEFORGE_SITE_SECTIONS[ptype]}/{mod.slug}"
    return {
        "id": make_unified_id("curseforge", mod.id),
        "source": "curseforge",
        "project_type": ptype,
        "name": mod.name,
        "slug": mod.slug,
        "short_description": mod.summary,
        "downloads": max(mod.download_count, 0),
        "followers": _count(mod.thumbs_up_count),
        "authors": [a.name for a in mod.authors],
        "categories": [vocabulary.category_from_curseforge(c.id, c.slug) for c in mod.categories],
        "game_versions": [f.game_version for f in mod.latest_files_indexes if _GAME_VERSION.match(f.game_version)],
        "loaders": [vocabulary.loader_from_curseforge(f.mod_loader) for f in mod.latest_files_indexes],
        "date_updated": mod.date_modified,
        "website_url": website,
    }


def _without_none(fields: dict) -> dict:
    for key in ("categories", "loaders", "game_versions"):
        fields[key] = [v for v in fields[key] if v]
    return fields


def summary_from_curseforge(mod: CurseForgeMod, project_type: Optional[str] = None) -> UnifiedContentSummary:
    fields = _without_none(_curseforge_common(mod, project_type))
    fields["icon_url"] = mod.logo.thumbnail_url if mod.logo else None
    return UnifiedContentSummary(**fields)


def detail_from_curseforge(mod: CurseForgeMod, project_type: Optional[str] = None) -> UnifiedContentDetail:
    fields = _without_none(_curseforge_common(mod, project_type))
    return UnifiedContentDetail(
        **fields,
        icon_url=mod.logo.url if mod.logo else None,
        # HTML from /description, or the plain summary when that call failed
        body=mod.description or mod.summary,
        date_created=mod.date_created,
        screenshots=[
            Screenshot(url=s.url, thumbnail_url=s.thumbnail_url, title=s.title, description=s.description)
            for s in mod.screenshots
            if s.url
        ],
    )


def version_from_curseforge(file: CurseForgeFile) -> UnifiedVersion:
    # A curated "version" is a single file, so it is always the primary file.
    # Files carry no loader data here; loaders stays empty.
    return UnifiedVersion(
        id=make_unified_id("curseforge", file.id),
        name=file.display_name or file.file_name,
        version_number=file.file_name,
        game_versions=[v for v in file.game_versions if _GAME_VERSION.match(v)],
        loaders=[],
        release_type=vocabulary.release_type_from_curseforge(file.release_type),
        date_published=file.file_date,
        downloads=max(file.download_count, 0),
        file_url=file.download_url,
        file_name=file.file_name,
        file_size=max(file.file_length, 0),
    )


# -----------------------------------------------------------------------------
# Community registry
# -----------------------------------------------------------------------------


def summary_from_modrinth(hit: ModrinthSearchHit) -> UnifiedContentSummary:
    ptype = vocabulary.project_type_from_modrinth(hit.project_type)
    tags = hit.display_categories or hit.categories
    return UnifiedContentSummary(
        id=make_unified_id("modrinth", hit.project_id),
        source="modrinth",
        project_type=ptype,
        name=hit.title,
        slug=hit.slug,
        short_description=hit.description,
        icon_url=hit.icon_url or None,
        downloads=max(hit.downloads, 0),
        followers=_count(hit.follows),
        authors=[hit.author],
        categories=[c for c in map(vocabulary.category_from_modrinth, tags) if c],
        game_versions=hit.versions,
        loaders=[loader for loader in map(vocabulary.loader_from_modrinth, hit.categories) if loader],
        date_updated=hit.date_modified,
        website_url=f"{MODRINTH_SITE}/{ptype}/{hit.slug}",
    )


def detail_from_modrinth(project: ModrinthProject) -> UnifiedContentDetail:
    ptype = vocabulary.project_type_from_modrinth(project.project_type)
    license_ = None
    if project.license and (project.license.name or project.license.id):
        license_ = License(name=project.license.name or project.license.id, url=project.license.url)

    return UnifiedContentDetail(
        id=make_unified_id("modrinth", project.id),
        source="modrinth",
        project_type=ptype,
        name=project.title,
        slug=project.slug,
        short_description=project.description,
        icon_url=project.icon_url or None,
        downloads=max(project.downloads, 0),
        followers=_count(project.followers),
        authors=[m.user.name or m.user.username for m in project.members],
        categories=[
            c
            for c in map(vocabulary.category_from_modrinth, project.categories + project.additional_categories)
            if c
        ],
        game_versions=project.game_versions,
        loaders=[loader for loader in map(vocabulary.loader_from_modrinth, project.loaders) if loader],
        date_updated=project.updated,
        website_url=f"{MODRINTH_SITE}/{ptype}/{project.slug}",
        body=project.body,
        date_created=project.published,
        license=license_,
        # Modrinth serves no separate thumbnails
        screenshots=[
            Screenshot(url=g.url, thumbnail_url=g.url, title=g.title, description=g.description)
            for g in project.gallery
        ],
    )


def version_from_modrinth(version: ModrinthVersion) -> Optional[UnifiedVersion]:
    if not version.files:
        log.warning(f"Skipping Modrinth version {version.id} without files")
        return None
    primary = next((f for f in version.files if f.primary), version.files[0])
    return UnifiedVersion(
        id=make_unified_id("modrinth", version.id),
        name=version.name or version.version_number,
        version_number=version.version_number,
        game_versions=version.game_versions,
        loaders=[loader for loader in map(vocabulary.loader_from_modrinth, version.loaders) if loader],
        release_type=vocabulary.release_type_from_modrinth(version.version_type),
        date_published=version.date_published,
        downloads=max(version.downloads, 0),
        file_url=primary.url,
        file_name=primary.filename,
        file_size=max(primary.size, 0),
        changelog=version.changelog or None,
    )


# -----------------------------------------------------------------------------
# Dispatch by source
# -----------------------------------------------------------------------------


def normalize_search_items(source: str, items: List[Any], project_type: Optional[str] = None) -> List[UnifiedContentSummary]:
    """Normalize one page; records that violate the unified model are dropped and logged."""
    normalized: List[UnifiedContentSummary] = []
    for item in items:
        try:
            if source == "curseforge":
                normalized.append(summary_from_curseforge(item, project_type))
            elif source == "modrinth":
                normalized.append(summary_from_modrinth(item))
            else:
                raise ValueError(f"Unsupported source: {source}")
        except ValidationError as exc:
            log.warning(f"Skipping malformed {source} item: {exc.error_count()} validation errors")
    return normalized


def normalize_detail(source: str, record: Any) -> UnifiedContentDetail:
    """A record that violates the unified model is treated like a malformed response."""
    if source == "curseforge":
        convert = detail_from_curseforge
    elif source == "modrinth":
        convert = detail_from_modrinth
    else:
        raise ValueError(f"Unsupported source: {source}")
    try:
        return convert(record)
    except ValidationError as exc:
        log.error(f"Malformed {source} detail record: {exc.error_count()} validation errors")
        raise SourceUnavailableError(source, "malformed response") from exc


def normalize_versions(source: str, records: List[Any]) -> List[UnifiedVersion]:
    """Normalize a version list; malformed versions are dropped like malformed search items."""
    if source == "curseforge":
        convert = version_from_curseforge
    elif source == "modrinth":
        convert = version_from_modrinth
    else:
        raise ValueError(f"Unsupported source: {source}")
    versions: List[UnifiedVersion] = []
    for record in records:
        try:
            version = convert(record)
        except ValidationError as exc:
            log.warning(f"Skipping malformed {source} version: {exc.error_count()} validation errors")
            continue
        if version is not None:
            versions.append(version)
    return versions
