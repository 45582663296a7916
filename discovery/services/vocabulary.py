"""Translation tables between the unified vocabulary and each registry's encoding.

Every function here is total: values outside a forward table map to the
documented fallback ("unspecified" / All / release) instead of raising.
Registry-native codes never leave this module and the adapters.
"""

from __future__ import annotations

from typing import Dict, List, Optional

# Unified loader names, in display order
LOADERS: List[str] = ["forge", "fabric", "quilt", "neoforge"]

# CurseForge ModLoaderType enum
CURSEFORGE_LOADER_IDS: Dict[str, int] = {
    "forge": 1,
    "fabric": 4,
    "quilt": 5,
    "neoforge": 6,
}
CURSEFORGE_LOADER_NAMES: Dict[int, str] = {v: k for k, v in CURSEFORGE_LOADER_IDS.items()}

CURSEFORGE_CATEGORY_ALL = 0

# Unified category tag -> CurseForge category id. Several tags share an id
# where the curated taxonomy is coarser (optimization and library -> Library).
CURSEFORGE_CATEGORY_IDS: Dict[str, int] = {
    "all": CURSEFORGE_CATEGORY_ALL,
    "worldgen": 406,
    "technology": 412,
    "magic": 419,
    "storage": 420,
    "utility": 5191,
    "adventure": 422,
    "decoration": 424,  # Cosmetic
    "library": 421,
    "optimization": 421,
    "mobs": 411,
    "food": 436,
    "transportation": 414,  # Player Transport
    "equipment": 434,  # Armor, Tools, and Weapons
}

# Reverse direction; first unified tag listed for an id wins
CURSEFORGE_CATEGORY_TAGS: Dict[int, str] = {}
for _tag, _cid in CURSEFORGE_CATEGORY_IDS.items():
    if _cid != CURSEFORGE_CATEGORY_ALL:
        CURSEFORGE_CATEGORY_TAGS.setdefault(_cid, _tag)

# Modrinth's own category tags, which are also the unified category vocabulary
CATEGORIES: List[str] = [
    "adventure",
    "cursed",
    "decoration",
    "economy",
    "equipment",
    "food",
    "game-mechanics",
    "library",
    "magic",
    "management",
    "minigame",
    "mobs",
    "optimization",
    "social",
    "storage",
    "technology",
    "transportation",
    "utility",
    "worldgen",
]

# CurseForge /mods/search sortField enum
CURSEFORGE_SORT_FIELDS: Dict[str, int] = {
    "popularity": 2,
    "updated": 3,
    "name": 4,
    "downloads": 6,
}
CURSEFORGE_DEFAULT_SORT_FIELD = 2

# Modrinth search index names
MODRINTH_SORT_INDEXES: Dict[str, str] = {
    "popularity": "downloads",
    "updated": "updated",
    "downloads": "downloads",
    "name": "relevance",  # no alphabetical index upstream
}
MODRINTH_DEFAULT_INDEX = "relevance"

CURSEFORGE_RELEASE_TYPES: Dict[int, str] = {1: "release", 2: "beta", 3: "alpha"}
RELEASE_TYPES = ("release", "beta", "alpha")

# CurseForge classId per unified project type
CURSEFORGE_CLASS_IDS: Dict[str, int] = {
    "mod": 6,
    "modpack": 4471,
    "resourcepack": 12,
    "shader": 6552,
}
CURSEFORGE_CLASS_TYPES: Dict[int, str] = {v: k for k, v in CURSEFORGE_CLASS_IDS.items()}
PROJECT_TYPES = tuple(CURSEFORGE_CLASS_IDS)


# -----------------------------------------------------------------------------
# Loaders
# -----------------------------------------------------------------------------


def is_known_loader(name: Optional[str]) -> bool:
    return bool(name) and name.strip().lower() in CURSEFORGE_LOADER_IDS


def loader_to_curseforge(name: Optional[str]) -> Optional[int]:
    """Unknown or empty -> None, meaning no loader filter is sent."""
    if not name:
        return None
    return CURSEFORGE_LOADER_IDS.get(name.strip().lower())


def loader_from_curseforge(loader_id: Optional[int]) -> Optional[str]:
    """Unknown ids (Any, Cauldron, LiteLoader, ...) -> None."""
    if loader_id is None:
        return None
    return CURSEFORGE_LOADER_NAMES.get(loader_id)


def loader_to_modrinth(name: Optional[str]) -> Optional[str]:
    if not is_known_loader(name):
        return None
    return name.strip().lower()


def loader_from_modrinth(tag: Optional[str]) -> Optional[str]:
    """Modrinth mixes loaders into its tag list; anything else -> None."""
    if not is_known_loader(tag):
        return None
    return tag.strip().lower()


# -----------------------------------------------------------------------------
# Categories
# -----------------------------------------------------------------------------


def category_to_curseforge(name: Optional[str]) -> int:
    """Unknown or empty -> All (0), which the adapter sends as no filter."""
    if not name:
        return CURSEFORGE_CATEGORY_ALL
    return CURSEFORGE_CATEGORY_IDS.get(name.strip().lower(), CURSEFORGE_CATEGORY_ALL)


def category_from_curseforge(category_id: int, slug: str = "") -> Optional[str]:
    """Mapped ids use the unified tag; unmapped ids fall back to the registry slug."""
    tag = CURSEFORGE_CATEGORY_TAGS.get(category_id)
    if tag:
        return tag
    slug = (slug or "").strip().lower()
    return slug or None


def category_to_modrinth(name: Optional[str]) -> Optional[str]:
    """Tags pass through; 'all' and empty mean no category facet."""
    if not name:
        return None
    tag = name.strip().lower()
    if not tag or tag == "all":
        return None
    return tag


def category_from_modrinth(tag: Optional[str]) -> Optional[str]:
    """Loader tags are not categories and map to None."""
    if not tag or is_known_loader(tag):
        return None
    return tag.strip().lower() or None


# -----------------------------------------------------------------------------
# Sorting
# -----------------------------------------------------------------------------


def sort_to_curseforge(sort_by: Optional[str]) -> int:
    return CURSEFORGE_SORT_FIELDS.get(sort_by or "", CURSEFORGE_DEFAULT_SORT_FIELD)


def sort_order_to_curseforge(sort_by: Optional[str]) -> str:
    return "asc" if sort_by == "name" else "desc"


def sort_to_modrinth(sort_by: Optional[str]) -> str:
    return MODRINTH_SORT_INDEXES.get(sort_by or "", MODRINTH_DEFAULT_INDEX)


# -----------------------------------------------------------------------------
# Release channels and project types
# -----------------------------------------------------------------------------


def release_type_from_curseforge(code: Optional[int]) -> str:
    return CURSEFORGE_RELEASE_TYPES.get(code, "release")


def release_type_from_modrinth(value: Optional[str]) -> str:
    value = (value or "").strip().lower()
    return value if value in RELEASE_TYPES else "release"


def project_type_to_curseforge(project_type: Optional[str]) -> int:
    return CURSEFORGE_CLASS_IDS.get(project_type or "", CURSEFORGE_CLASS_IDS["mod"])


def project_type_from_curseforge(class_id: Optional[int], default: str = "mod") -> str:
    return CURSEFORGE_CLASS_TYPES.get(class_id, default)


def project_type_from_modrinth(value: Optional[str], default: str = "mod") -> str:
    value = (value or "").strip().lower()
    return value if value in PROJECT_TYPES else default
