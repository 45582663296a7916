"""Vocabulary mapping tests"""

import pytest

from discovery.services import vocabulary


class TestLoaderMapping:
    """Loader names <-> registry encodings"""

    @pytest.mark.parametrize(
        "name,expected",
        [("forge", 1), ("fabric", 4), ("quilt", 5), ("neoforge", 6), ("Fabric", 4)],
    )
    def test_loader_to_curseforge(self, name, expected):
        assert vocabulary.loader_to_curseforge(name) == expected

    @pytest.mark.parametrize("name", [None, "", "rift", "liteloader"])
    def test_unknown_loader_is_unspecified(self, name):
        assert vocabulary.loader_to_curseforge(name) is None
        assert vocabulary.loader_to_modrinth(name) is None

    def test_curseforge_ids_round_trip(self):
        for name in vocabulary.LOADERS:
            assert vocabulary.loader_from_curseforge(vocabulary.loader_to_curseforge(name)) == name

    @pytest.mark.parametrize("loader_id", [None, 0, 2, 3, 42])
    def test_unknown_curseforge_loader_id(self, loader_id):
        assert vocabulary.loader_from_curseforge(loader_id) is None

    def test_modrinth_loader_is_identity(self):
        assert vocabulary.loader_to_modrinth("NeoForge") == "neoforge"
        assert vocabulary.loader_from_modrinth("quilt") == "quilt"
        assert vocabulary.loader_from_modrinth("minecraft") is None
        assert vocabulary.loader_from_modrinth("storage") is None


class TestCategoryMapping:
    """Category tags <-> registry encodings"""

    def test_known_categories(self):
        assert vocabulary.category_to_curseforge("storage") == 420
        assert vocabulary.category_to_curseforge("Technology") == 412
        assert vocabulary.category_to_curseforge("decoration") == 424

    @pytest.mark.parametrize("name", [None, "", "all", "cursed", "not-a-category"])
    def test_unknown_category_falls_back_to_all(self, name):
        assert vocabulary.category_to_curseforge(name) == vocabulary.CURSEFORGE_CATEGORY_ALL

    def test_curseforge_category_back_to_tag(self):
        assert vocabulary.category_from_curseforge(420, "storage") == "storage"
        assert vocabulary.category_from_curseforge(421, "library-api") == "library"

    def test_unmapped_curseforge_category_uses_slug(self):
        assert vocabulary.category_from_curseforge(9999, "Quests") == "quests"
        assert vocabulary.category_from_curseforge(9999, "") is None

    def test_modrinth_categories_pass_through(self):
        assert vocabulary.category_to_modrinth("Storage") == "storage"
        assert vocabulary.category_to_modrinth("all") is None
        assert vocabulary.category_to_modrinth(None) is None

    def test_loader_tags_are_not_categories(self):
        assert vocabulary.category_from_modrinth("fabric") is None
        assert vocabulary.category_from_modrinth("magic") == "magic"


class TestSortAndReleaseMapping:
    """Sort keys, release channels and project types"""

    @pytest.mark.parametrize(
        "sort_by,field,order,index",
        [
            ("popularity", 2, "desc", "downloads"),
            ("updated", 3, "desc", "updated"),
            ("downloads", 6, "desc", "downloads"),
            ("name", 4, "asc", "relevance"),
            ("bogus", 2, "desc", "relevance"),
            (None, 2, "desc", "relevance"),
        ],
    )
    def test_sort_keys(self, sort_by, field, order, index):
        assert vocabulary.sort_to_curseforge(sort_by) == field
        assert vocabulary.sort_order_to_curseforge(sort_by) == order
        assert vocabulary.sort_to_modrinth(sort_by) == index

    @pytest.mark.parametrize("code,expected", [(1, "release"), (2, "beta"), (3, "alpha"), (9, "release"), (None, "release")])
    def test_curseforge_release_types(self, code, expected):
        assert vocabulary.release_type_from_curseforge(code) == expected

    @pytest.mark.parametrize("value,expected", [("beta", "beta"), ("ALPHA", "alpha"), ("snapshot", "release"), (None, "release")])
    def test_modrinth_release_types(self, value, expected):
        assert vocabulary.release_type_from_modrinth(value) == expected

    def test_project_types(self):
        assert vocabulary.project_type_to_curseforge("modpack") == 4471
        assert vocabulary.project_type_to_curseforge("unknown") == 6
        assert vocabulary.project_type_from_curseforge(12) == "resourcepack"
        assert vocabulary.project_type_from_curseforge(None) == "mod"
        assert vocabulary.project_type_from_modrinth("shader") == "shader"
        assert vocabulary.project_type_from_modrinth("plugin") == "mod"
