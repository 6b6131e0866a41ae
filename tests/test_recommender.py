import asyncio

import pytest

from fin_assistant.models import SearchOptions
from fin_assistant.recommender import filter_products
from fin_assistant.utils import PRODUCT_TYPE_KEYWORDS


def ids(products):
    return [p.id for p in products]


@pytest.fixture
def jackets(make_product):
    return [
        make_product("j-1", "Harrington Jacket", "jackets", price=80, colors=("Black",)),
        make_product("j-2", "Field Jacket", "jackets", price=95, colors=("Navy",)),
        make_product("j-3", "Bomber Jacket", "jackets", price=60, colors=("Black", "Olive")),
        make_product("t-1", "Black Tee", "t-shirts", price=20, colors=("Black",)),
    ]


@pytest.fixture
def mixed_catalog(make_product):
    return [
        make_product("tr-1", "Court Trainers", "trainers", colors=("White",)),
        make_product("hat-1", "Wool Beanie", "hats"),
        make_product("bt-1", "Chelsea Boots", "boots", colors=("Black",)),
        make_product("bag-1", "Leather Tote", "bags"),
        make_product("t-1", "White Tee", "t-shirts", colors=("White",)),
        make_product("hl-1", "Block Heels", "heels"),
        make_product("bp-1", "Roll-top Backpack", "backpacks"),
        make_product("sd-1", "Slider Sandals", "sandals", colors=("White",)),
        make_product("sofa-1", "Linen Sofa", "sofas"),
        make_product("tr-2", "Runner Trainers", "trainers"),
    ]


class TestFilterProducts:

    def test_product_type_returns_whole_subcategory(self, curated_catalog):
        catalog = asyncio.run(curated_catalog.load())
        products, total = filter_products(catalog, SearchOptions(query="show me trainers"))
        assert total == 10
        assert {p.subcategory for p in products} == {"trainers"}

    def test_truncates_after_counting(self, curated_catalog):
        catalog = asyncio.run(curated_catalog.load())
        products, total = filter_products(catalog, SearchOptions(query="trainers", max_results=6))
        assert len(products) == 6
        assert total == 10
        assert ids(products) == ["tr-1", "tr-2", "tr-3", "tr-4", "tr-5", "tr-6"]

    def test_modifier_narrows_within_type(self, curated_catalog):
        catalog = asyncio.run(curated_catalog.load())
        products, total = filter_products(catalog, SearchOptions(query="nike trainers"))
        assert ids(products) == ["tr-1", "tr-2", "tr-7", "tr-10"]
        assert total == 4

    def test_color_modifier(self, jackets):
        products, _ = filter_products(jackets, SearchOptions(query="black jacket"))
        assert ids(products) == ["j-1", "j-3"]

    def test_unmatched_modifier_keeps_type_results(self, jackets):
        products, total = filter_products(jackets, SearchOptions(query="purple jacket"))
        assert ids(products) == ["j-1", "j-2", "j-3"]
        assert total == 3

    def test_unrecognized_query_returns_nothing(self, curated_catalog):
        catalog = asyncio.run(curated_catalog.load())
        assert filter_products(catalog, SearchOptions(query="xyzzy")) == ([], 0)
        assert filter_products(catalog, SearchOptions(query="something comfortable")) == ([], 0)
        assert filter_products(catalog, SearchOptions(query="a b")) == ([], 0)

    def test_modifier_only_query(self, curated_catalog):
        catalog = asyncio.run(curated_catalog.load())
        products, _ = filter_products(catalog, SearchOptions(query="velvet"))
        assert ids(products) == ["sofa-4", "sofa-6"]

    def test_type_with_no_products(self, curated_catalog):
        catalog = asyncio.run(curated_catalog.load())
        assert filter_products(catalog, SearchOptions(query="hats")) == ([], 0)

    def test_subcategory_narrows(self, curated_catalog):
        catalog = asyncio.run(curated_catalog.load())
        products, _ = filter_products(catalog, SearchOptions(subcategory="tops"))
        assert ids(products) == ["gs-9"]

    def test_subcategory_is_advisory(self, curated_catalog):
        catalog = asyncio.run(curated_catalog.load())
        products, total = filter_products(catalog, SearchOptions(subcategory="hats"))
        assert total == 30

        products, total = filter_products(catalog, SearchOptions(query="tee", subcategory="sofas"))
        assert total == 9
        assert {p.subcategory for p in products} == {"t-shirts"}

    def test_price_bounds_are_inclusive(self, curated_catalog):
        catalog = asyncio.run(curated_catalog.load())
        products, _ = filter_products(catalog, SearchOptions(query="trainers", max_price=100))
        assert ids(products) == ["tr-4", "tr-8", "tr-10"]

        products, _ = filter_products(catalog, SearchOptions(query="trainers", min_price=130))
        assert ids(products) == ["tr-7", "tr-9"]

    @pytest.mark.parametrize("query,keyword,expected", [
        ("shoes", "shoes", ["tr-1", "bt-1", "hl-1", "sd-1", "tr-2"]),
        ("any footwear?", "footwear", ["tr-1", "bt-1", "hl-1", "sd-1", "tr-2"]),
        ("white shoes", "shoes", ["tr-1", "sd-1"]),
        ("bags please", "bags", ["bag-1", "bp-1"]),
        ("backpack", "backpack", ["bp-1"]),
    ])
    def test_multi_subcategory_types(self, mixed_catalog, query, keyword, expected):
        products, total = filter_products(mixed_catalog, SearchOptions(query=query))
        assert ids(products) == expected
        assert total == len(expected)
        assert all(p.subcategory in PRODUCT_TYPE_KEYWORDS[keyword] for p in products)

    def test_zero_max_results(self, jackets):
        products, total = filter_products(jackets, SearchOptions(query="jacket", max_results=0))
        assert products == []
        assert total == 3


class TestProductSearchService:

    def test_search_result(self, search_service):
        result = asyncio.run(search_service.search(SearchOptions(query="oversized tee", max_results=6)))
        assert ids(result.products) == ["gs-1", "gs-3", "gs-6", "gs-10"]
        assert result.total_matches == 4
        assert result.from_cache is True
        assert result.search_time_ms >= 0

    def test_subcategories(self, search_service):
        assert asyncio.run(search_service.subcategories()) == ["sofas", "t-shirts", "tops", "trainers"]

    def test_catalog_stats(self, search_service):
        stats = asyncio.run(search_service.catalog_stats())
        assert stats.total_products == 30
        assert stats.subcategories == {"t-shirts": 9, "tops": 1, "trainers": 10, "sofas": 10}
        assert stats.price_range == (22, 3899)
