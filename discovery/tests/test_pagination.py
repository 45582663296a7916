"""Query splitting and result merging tests"""

from datetime import datetime, timedelta, timezone

import pytest

from discovery.schemas.query import Query
from discovery.schemas.unified import UnifiedContentSummary
from discovery.services.pagination import SubPage, merge_results, sort_items, split_page

BASE_DATE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def item(source: str, native_id: str, downloads: int = 0, name: str = "x", days: int = 0) -> UnifiedContentSummary:
    prefix = "cf" if source == "curseforge" else "mr"
    return UnifiedContentSummary(
        id=f"{prefix}-{native_id}",
        source=source,
        name=name,
        slug=native_id,
        downloads=downloads,
        date_updated=BASE_DATE + timedelta(days=days),
    )


class TestSplitPage:
    """Per-source offset/limit arithmetic"""

    def test_single_source_gets_full_page(self):
        assert split_page(3, 20, ["modrinth"]) == {"modrinth": SubPage(offset=40, limit=20)}
        assert split_page(1, 20, ["curseforge"]) == {"curseforge": SubPage(offset=0, limit=20)}

    @pytest.mark.parametrize(
        "page,size,cf_page,mr_page",
        [
            (1, 20, (0, 10), (0, 10)),
            (2, 20, (10, 10), (10, 10)),
            (1, 15, (0, 7), (0, 8)),
            (3, 15, (14, 7), (16, 8)),
            (2, 7, (3, 3), (4, 4)),
        ],
    )
    def test_two_sources_split_evenly(self, page, size, cf_page, mr_page):
        plan = split_page(page, size, ["modrinth", "curseforge"])
        assert plan["curseforge"] == SubPage(*cf_page)
        assert plan["modrinth"] == SubPage(*mr_page)

    def test_zero_quota_source_is_not_queried(self):
        assert split_page(1, 1, ["curseforge", "modrinth"]) == {"modrinth": SubPage(offset=0, limit=1)}
        assert split_page(2, 1, ["curseforge", "modrinth"]) == {"modrinth": SubPage(offset=1, limit=1)}

    @pytest.mark.parametrize("size", [1, 2, 3, 5, 7, 20])
    def test_consecutive_pages_tile_each_source(self, size):
        covered = {"curseforge": [], "modrinth": []}
        for page in range(1, 6):
            for source, sub in split_page(page, size, ["curseforge", "modrinth"]).items():
                covered[source].extend(range(sub.offset, sub.offset + sub.limit))
        for rows in covered.values():
            assert rows == list(range(len(rows)))

    def test_no_sources(self):
        assert split_page(1, 20, []) == {}


class TestSortItems:
    """Total order used when re-ranking a merged page"""

    def test_downloads_descending_with_deterministic_ties(self):
        items = [
            item("modrinth", "b", downloads=5),
            item("curseforge", "2", downloads=5),
            item("modrinth", "a", downloads=9),
            item("curseforge", "1", downloads=5),
        ]
        ordered = [i.id for i in sort_items(items, "downloads")]
        assert ordered == ["mr-a", "cf-1", "cf-2", "mr-b"]

    def test_popularity_falls_back_to_downloads(self):
        items = [item("curseforge", "1", downloads=1), item("modrinth", "a", downloads=2)]
        assert [i.id for i in sort_items(items, "popularity")] == ["mr-a", "cf-1"]

    def test_updated_descending(self):
        items = [item("curseforge", "1", days=1), item("modrinth", "a", days=3), item("modrinth", "b", days=2)]
        assert [i.id for i in sort_items(items, "updated")] == ["mr-a", "mr-b", "cf-1"]

    def test_name_ascending_case_insensitive(self):
        items = [item("curseforge", "1", name="beta"), item("modrinth", "a", name="Alpha"), item("modrinth", "b", name="gamma")]
        assert [i.name for i in sort_items(items, "name")] == ["Alpha", "beta", "gamma"]

    def test_same_input_same_output(self):
        items = [item("modrinth", str(n), downloads=n % 3) for n in range(10)]
        assert sort_items(items, "downloads") == sort_items(list(reversed(items)), "downloads")


class TestMergeResults:
    """Combining pages, totals and has_more"""

    def test_two_source_storage_page(self):
        query = Query(query="storage", source="all", sort_by="downloads", page=1, page_size=20)
        pages = {
            "curseforge": [item("curseforge", str(n), downloads=1000 - n * 10) for n in range(10)],
            "modrinth": [item("modrinth", f"m{n}", downloads=995 - n * 10) for n in range(10)],
        }
        result = merge_results(query, pages, {"curseforge": 120, "modrinth": 340})

        assert result.total == 460
        assert len(result.items) == 20
        assert result.has_more is True
        downloads = [i.downloads for i in result.items]
        assert downloads == sorted(downloads, reverse=True)

    def test_truncates_to_page_size(self):
        query = Query(source="all", sort_by="downloads", page_size=3)
        pages = {"curseforge": [item("curseforge", "1", 1), item("curseforge", "2", 2)], "modrinth": [item("modrinth", "a", 3), item("modrinth", "b", 4)]}
        result = merge_results(query, pages, {"curseforge": 2, "modrinth": 2})
        assert [i.id for i in result.items] == ["mr-b", "mr-a", "cf-2"]

    def test_has_more_false_on_last_page(self):
        query = Query(source="modrinth", page=2, page_size=10)
        result = merge_results(query, {"modrinth": [item("modrinth", "a")]}, {"modrinth": 11})
        assert result.has_more is False
        assert result.total == 11

    def test_single_source_keeps_native_order(self):
        query = Query(source="modrinth", sort_by="downloads")
        ranked = [item("modrinth", "a", downloads=1), item("modrinth", "b", downloads=5)]
        result = merge_results(query, {"modrinth": ranked}, {"modrinth": 2})
        assert [i.id for i in result.items] == ["mr-a", "mr-b"]

    def test_failed_source_contributes_nothing(self):
        query = Query(source="all")
        result = merge_results(query, {"modrinth": [item("modrinth", "a")]}, {"modrinth": 340}, ["curseforge"])
        assert result.total == 340
        assert result.failed_sources == ["curseforge"]
        assert result.degraded
