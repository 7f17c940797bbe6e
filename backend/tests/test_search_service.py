from __future__ import annotations

import warnings
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import SAWarning

from inventory_api.db.models import Product
from inventory_api.db.models.product import stringify_spec_value
from inventory_api.services.assembler import assemble_product
from inventory_api.services.search_query import ProductSearchQuery
from inventory_api.services.search_service import (
    build_product_pipeline,
    product_suggestions,
    search_filters,
    search_products,
)


def _skus(result):
    return [product.sku for product in result.data]


def test_text_query_matches_name_description_brand_sku_and_tags(db, make_category, make_product):
    category = make_category()
    make_product(category, name="MacBook Pro 16-inch", sku="MBP16")
    make_product(category, description="Sleeve that fits any macbook model", sku="SLEEVE")
    make_product(category, brand="MacBookery", sku="BRAND")
    make_product(category, sku="MACBOOK-CABLE")
    make_product(category, tags=["Accessories", "macbook-compatible"], sku="TAGGED")
    make_product(category, name="Unrelated Phone", sku="PHONE")

    result = search_products(db, ProductSearchQuery(q="MACBOOK", sort_by="createdAt", order="asc"))

    assert _skus(result) == ["MBP16", "SLEEVE", "BRAND", "MACBOOK-CABLE", "TAGGED"]
    assert result.pagination.total == 5


def test_like_wildcards_in_input_are_matched_literally(db, make_category, make_product):
    category = make_category()
    make_product(category, name="100% Cotton Shirt", sku="COTTON")
    make_product(category, name="Plain Shirt", sku="PLAIN")

    result = search_products(db, ProductSearchQuery(q="%"))

    assert _skus(result) == ["COTTON"]


def test_sku_filter_is_upper_cased(db, make_category, make_product):
    category = make_category()
    make_product(category, sku="MBP16-M2-512")
    make_product(category, sku="IPAD-AIR")

    result = search_products(db, ProductSearchQuery(sku="mbp16"))

    assert _skus(result) == ["MBP16-M2-512"]


def test_price_and_quantity_bounds_are_inclusive(db, make_category, make_product):
    category = make_category()
    make_product(category, price=Decimal("999.99"), quantity=10, sku="CHEAP")
    make_product(category, price=Decimal("1299.99"), quantity=20, sku="MID")
    make_product(category, price=Decimal("1500.00"), quantity=30, sku="TOP")

    by_price = search_products(
        db, ProductSearchQuery(min_price=Decimal("1000"), max_price=Decimal("1500"))
    )
    by_quantity = search_products(db, ProductSearchQuery(min_quantity=10, max_quantity=20))
    only_max = search_products(db, ProductSearchQuery(max_price=Decimal("999.99")))

    assert sorted(_skus(by_price)) == ["MID", "TOP"]
    assert sorted(_skus(by_quantity)) == ["CHEAP", "MID"]
    assert _skus(only_max) == ["CHEAP"]


def test_contradictory_range_returns_empty_page(db, make_category, make_product):
    category = make_category()
    make_product(category, price=Decimal("50.00"))

    result = search_products(
        db, ProductSearchQuery(min_price=Decimal("100"), max_price=Decimal("10"))
    )

    assert result.data == []
    assert result.pagination.total == 0
    assert result.pagination.total_pages == 0
    assert result.pagination.has_next is False


def test_tag_filter_is_any_substring_match(db, make_category, make_product):
    category = make_category()
    make_product(category, tags=["Laptop", "professional"], sku="LAPTOP")
    make_product(category, tags=["gaming"], sku="GAMING")
    make_product(category, tags=["kitchen"], sku="KITCHEN")

    result = search_products(db, ProductSearchQuery(tags=("lap", "GAM")))

    assert sorted(_skus(result)) == ["GAMING", "LAPTOP"]


def test_low_stock_filter_and_derived_flag(db, make_category, make_product):
    category = make_category()
    make_product(category, quantity=3, low_stock_threshold=5, sku="LOW")
    make_product(category, quantity=5, low_stock_threshold=5, sku="EDGE")
    make_product(category, quantity=6, low_stock_threshold=5, sku="OK")

    low = search_products(db, ProductSearchQuery(is_low_stock=True))
    not_low = search_products(db, ProductSearchQuery(is_low_stock=False))
    everything = search_products(db, ProductSearchQuery())

    assert sorted(_skus(low)) == ["EDGE", "LOW"]
    assert _skus(not_low) == ["OK"]
    flags = {product.sku: product.is_low_stock for product in everything.data}
    assert flags == {"LOW": True, "EDGE": True, "OK": False}


def test_specifications_join_the_text_or_group(db, make_category, make_product):
    category = make_category()
    make_product(category, specifications={"CPU": "M2 Pro", "RAM": 16}, sku="MAC")
    make_product(category, specifications={"CPU": "Intel i7"}, sku="PC")

    alone = search_products(db, ProductSearchQuery(specifications="m2 pro"))
    numeric = search_products(db, ProductSearchQuery(specifications="16"))
    # The text query matches nothing, yet the specification hit still qualifies.
    combined = search_products(db, ProductSearchQuery(q="nothing-matches", specifications="M2"))

    assert _skus(alone) == ["MAC"]
    assert _skus(numeric) == ["MAC"]
    assert _skus(combined) == ["MAC"]
    assert alone.data[0].specifications == {"CPU": "M2 Pro", "RAM": 16}


def test_inactive_products_are_excluded_by_default(db, make_category, make_product):
    category = make_category()
    make_product(category, sku="LIVE")
    make_product(category, sku="GONE", is_active=False)

    assert _skus(search_products(db, ProductSearchQuery())) == ["LIVE"]
    assert _skus(search_products(db, ProductSearchQuery(is_active=False))) == ["GONE"]


def test_featured_filter(db, make_category, make_product):
    category = make_category()
    make_product(category, sku="STAR", is_featured=True)
    make_product(category, sku="PLAIN")

    assert _skus(search_products(db, ProductSearchQuery(is_featured=True))) == ["STAR"]
    assert _skus(search_products(db, ProductSearchQuery(is_featured=False))) == ["PLAIN"]


def test_relevance_with_text_ranks_by_match_strength(db, make_category, make_product):
    category = make_category()
    make_product(category, name="Widget Pro", sku="PARTIAL")
    make_product(
        category,
        name="Gadget",
        description="Works alongside any widget",
        sku="DESC",
        is_featured=True,
    )
    make_product(category, name="Widget", sku="EXACT")

    result = search_products(db, ProductSearchQuery(q="widget", sort_by="relevance", order="asc"))

    assert _skus(result) == ["EXACT", "PARTIAL", "DESC"]


def test_relevance_without_text_puts_featured_first_then_newest(db, make_category, make_product):
    category = make_category()
    make_product(category, sku="OLD-FEATURED", is_featured=True)
    make_product(category, sku="OLD")
    make_product(category, sku="NEW-FEATURED", is_featured=True)
    make_product(category, sku="NEW")

    for order in ("asc", "desc"):
        result = search_products(db, ProductSearchQuery(sort_by="relevance", order=order))
        assert _skus(result) == ["NEW-FEATURED", "OLD-FEATURED", "NEW", "OLD"]


def test_field_sort_honors_order(db, make_category, make_product):
    category = make_category()
    make_product(category, price=Decimal("30.00"), sku="C")
    make_product(category, price=Decimal("10.00"), sku="A")
    make_product(category, price=Decimal("20.00"), sku="B")

    asc = search_products(db, ProductSearchQuery(sort_by="price", order="asc"))
    desc = search_products(db, ProductSearchQuery(sort_by="price", order="desc"))

    assert _skus(asc) == ["A", "B", "C"]
    assert _skus(desc) == ["C", "B", "A"]


def test_pagination_over_search_results(db, make_category, make_product):
    category = make_category()
    make_product(category, sku="FIRST")
    make_product(category, sku="SECOND")

    page_two = search_products(
        db, ProductSearchQuery(sort_by="createdAt", order="asc", page=2, limit=1)
    )

    assert _skus(page_two) == ["SECOND"]
    assert page_two.pagination.total == 2
    assert page_two.pagination.total_pages == 2
    assert page_two.pagination.has_next is False
    assert page_two.pagination.has_prev is True


def test_repeated_search_is_identical(db, make_category, make_product):
    category = make_category()
    for _ in range(5):
        make_product(category, brand="Acme")

    query = ProductSearchQuery(brand="acme", page=2, limit=2)
    first = search_products(db, query).model_dump(by_alias=True)
    second = search_products(db, query).model_dump(by_alias=True)

    assert first == second


def test_category_is_embedded_or_omitted(db, make_category, make_product):
    category = make_category("Audio")
    make_product(category, sku="WITH")
    make_product(None, sku="DANGLING")

    result = search_products(db, ProductSearchQuery(sort_by="createdAt", order="asc"))
    with_category, dangling = result.model_dump(by_alias=True)["data"]

    assert with_category["category"]["name"] == "Audio"
    assert with_category["categoryId"] == category.id
    assert "category" not in dangling
    assert dangling["categoryId"] == "missing-category"


def test_count_and_page_share_the_join():
    pipeline = build_product_pipeline(ProductSearchQuery(q="phone"))

    count_sql = str(pipeline.count_statement())
    page_sql = str(pipeline.page_statement(0, 10))

    assert "LEFT OUTER JOIN categories" in count_sql
    assert "LEFT OUTER JOIN categories" in page_sql
    assert "is_low_stock" in page_sql


def test_assembler_recomputes_low_stock():
    product = Product(
        id="p-1",
        name="Cable",
        description="A short charging cable",
        price=Decimal("5.00"),
        sku="CABLE",
        quantity=2,
        low_stock_threshold=5,
        category_id="c-1",
        images=[],
        is_active=True,
        is_featured=False,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        updated_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )

    assert assemble_product(product).is_low_stock is True
    product.quantity = 9
    assert assemble_product(product).is_low_stock is False


def test_suggestions_keep_case_variants_in_source_order(db, make_category, make_product):
    category = make_category()
    make_product(category, name="Widget")
    make_product(category, name="widget")
    make_product(category, name="Sprocket", brand="Widgetco")
    make_product(category, name="Gear", tags=["widgets", "metal"])

    assert product_suggestions(db, "widg") == ["Widget", "widget", "Widgetco", "widgets"]


def test_suggestions_dedupe_and_truncate(db, make_category, make_product):
    category = make_category()
    make_product(category, name="Phone Case", brand="Phone Case", tags=["Phone Case"])
    make_product(category, name="Phone Stand")
    make_product(category, name="Phone Charger")

    assert product_suggestions(db, "phone") == ["Phone Case", "Phone Stand", "Phone Charger"]
    assert product_suggestions(db, "phone", limit=2) == ["Phone Case", "Phone Stand"]


def test_suggestions_require_two_characters_and_active_products(db, make_category, make_product):
    category = make_category()
    make_product(category, name="Hidden Lamp", is_active=False)

    assert product_suggestions(db, "h") == []
    assert product_suggestions(db, "  ") == []
    assert product_suggestions(db, None) == []
    assert product_suggestions(db, "lamp") == []


def test_search_filters_over_active_records(db, make_category, make_product):
    audio = make_category("Audio")
    make_category("Cameras")
    make_category("Archive", is_active=False)
    make_product(audio, brand="Sony", price=Decimal("99.50"), tags=["wireless", "audio"])
    make_product(audio, brand="Bose", price=Decimal("349.00"), tags=["audio", "noise-cancelling"])
    make_product(audio, brand="", price=Decimal("12.00"))
    make_product(audio, brand="Zeta", price=Decimal("5000.00"), tags=["legacy"], is_active=False)

    filters = search_filters(db)

    assert filters.brands == ["Bose", "Sony"]
    assert [facet.name for facet in filters.categories] == ["Audio", "Cameras"]
    assert filters.price_range.min == 12.0
    assert filters.price_range.max == 349.0
    assert filters.tags == ["audio", "noise-cancelling", "wireless"]


def test_search_filters_on_empty_dataset(db):
    filters = search_filters(db)

    assert filters.brands == []
    assert filters.categories == []
    assert filters.tags == []
    assert filters.price_range.min == 0
    assert filters.price_range.max == 0


def test_search_filters_use_select_distinct(db, make_category, make_product):
    category = make_category()
    make_product(category, brand="Acme", tags=["tools"])

    with warnings.catch_warnings():
        warnings.filterwarnings("error", message=".*unary distinct", category=SAWarning)
        filters = search_filters(db)

    assert filters.brands == ["Acme"]
    assert filters.tags == ["tools"]


@pytest.mark.parametrize(
    "value, expected",
    [("M2 Pro", "M2 Pro"), (16, "16"), (2.5, "2.5"), (True, "true"), (False, "false"), (None, "null")],
)
def test_specification_values_are_stringified_for_search(value, expected):
    assert stringify_spec_value(value) == expected
