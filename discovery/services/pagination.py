"""Per-source page splitting and deterministic merging of federated results.

With two active sources a page of size ``s`` is split evenly: curseforge takes
``q = floor(s/2)`` rows and modrinth ``q = ceil(s/2)``, each starting at
``(p-1)*q`` in its own result list. Every source advances by exactly its own
quota per page, so sequential pages never repeat a row (for even ``s`` both
offsets equal ``(p-1)*s/2``). The interleaving is only an approximation of a
global ranking. An exhausted source does not hand its unused quota to the
other one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from discovery.schemas.query import Query, QueryResult
from discovery.schemas.unified import UnifiedContentSummary

# Fixed order used for quota assignment and tie-breaking
SOURCE_ORDER = ("curseforge", "modrinth")


@dataclass(frozen=True)
class SubPage:
    offset: int
    limit: int


def split_page(page: int, page_size: int, sources: Sequence[str]) -> Dict[str, SubPage]:
    """Compute each active source's ``(offset, limit)`` for a 1-based page.

    Sources whose quota comes out as zero (page size 1 across two sources)
    are left out and must not be queried; the remaining source then pages
    through its list one full page at a time.
    """
    active = [s for s in SOURCE_ORDER if s in sources]
    if len(active) > 1:
        quotas = {
            "curseforge": page_size // 2,
            "modrinth": page_size - page_size // 2,
        }
    else:
        quotas = {s: page_size for s in active}
    return {
        s: SubPage(offset=(page - 1) * quotas[s], limit=quotas[s])
        for s in active
        if quotas[s] > 0
    }


def _tie_break(item: UnifiedContentSummary) -> Tuple[int, str]:
    return SOURCE_ORDER.index(item.source), item.native_id


def _timestamp(item: UnifiedContentSummary) -> float:
    value: datetime = item.date_updated
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def sort_items(items: List[UnifiedContentSummary], sort_by: str) -> List[UnifiedContentSummary]:
    """Total order per sort key; ties fall back to source then native id."""
    if sort_by == "updated":
        key = lambda i: (-_timestamp(i), *_tie_break(i))  # noqa: E731
    elif sort_by == "name":
        key = lambda i: (i.name.casefold(), i.name, *_tie_break(i))  # noqa: E731
    else:
        # downloads, and popularity which has no comparable cross-source score
        key = lambda i: (-i.downloads, *_tie_break(i))  # noqa: E731
    return sorted(items, key=key)


def merge_results(
    query: Query,
    pages: Dict[str, List[UnifiedContentSummary]],
    totals: Dict[str, int],
    failed_sources: Sequence[str] = (),
    rerank: Optional[bool] = None,
) -> QueryResult:
    """Combine normalized pages into one ``QueryResult``.

    ``pages`` and ``totals`` hold only the sources that answered; failed
    sources contribute nothing to either. ``rerank`` defaults to re-sorting
    only when the query spans more than one source; a single source is
    already ranked server-side by the same key.
    """
    combined: List[UnifiedContentSummary] = []
    for source in SOURCE_ORDER:
        combined.extend(pages.get(source, []))

    if rerank is None:
        rerank = len(query.active_sources) > 1
    if rerank:
        combined = sort_items(combined, query.sort_by)

    total = sum(max(t, 0) for t in totals.values())
    return QueryResult(
        items=combined[: query.page_size],
        total=total,
        has_more=query.offset + query.page_size < total,
        failed_sources=list(failed_sources),
    )
