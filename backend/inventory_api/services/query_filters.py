"""Translate search parameter objects into SQLAlchemy WHERE clauses.

Dimensions are AND'ed together. Free text (``q``) is an OR group across the
searchable columns, and the specifications filter joins that same OR group
rather than adding its own restriction. Contradictory bounds are passed
through as-is and simply match nothing.
"""

from __future__ import annotations

from sqlalchemy import ColumnElement, and_, case, func, or_
from sqlalchemy.orm import InstrumentedAttribute

from inventory_api.db.models import Category, Product, ProductSpecification, ProductTag
from inventory_api.services.search_query import CategorySearchQuery, ProductSearchQuery


def contains_text(column: InstrumentedAttribute, text: str) -> ColumnElement[bool]:
    """Case-insensitive literal substring match (LIKE wildcards are escaped)."""
    return column.icontains(text, autoescape=True)


def any_tag_contains(text: str) -> ColumnElement[bool]:
    return Product.tag_entries.any(contains_text(ProductTag.value, text))


def any_specification_contains(text: str) -> ColumnElement[bool]:
    return Product.spec_entries.any(contains_text(ProductSpecification.value_text, text))


def low_stock_condition() -> ColumnElement[bool]:
    return Product.quantity <= Product.low_stock_threshold


def build_product_predicate(query: ProductSearchQuery) -> ColumnElement[bool]:
    """Combine every populated product filter into one boolean clause."""
    conditions: list[ColumnElement[bool]] = [Product.is_active == query.is_active]

    text_alternatives: list[ColumnElement[bool]] = []
    if query.q:
        text_alternatives.extend(
            [
                contains_text(Product.name, query.q),
                contains_text(Product.description, query.q),
                contains_text(Product.brand, query.q),
                contains_text(Product.sku, query.q),
                any_tag_contains(query.q),
            ]
        )
    if query.specifications:
        text_alternatives.append(any_specification_contains(query.specifications))
    if text_alternatives:
        conditions.append(or_(*text_alternatives))

    if query.name:
        conditions.append(contains_text(Product.name, query.name))
    if query.description:
        conditions.append(contains_text(Product.description, query.description))
    if query.brand:
        conditions.append(contains_text(Product.brand, query.brand))
    if query.sku:
        conditions.append(contains_text(Product.sku, query.sku.upper()))
    if query.category_id:
        conditions.append(Product.category_id == query.category_id)

    if query.min_price is not None:
        conditions.append(Product.price >= query.min_price)
    if query.max_price is not None:
        conditions.append(Product.price <= query.max_price)
    if query.min_quantity is not None:
        conditions.append(Product.quantity >= query.min_quantity)
    if query.max_quantity is not None:
        conditions.append(Product.quantity <= query.max_quantity)

    if query.tags:
        conditions.append(or_(*(any_tag_contains(tag) for tag in query.tags)))

    if query.is_featured is not None:
        conditions.append(Product.is_featured == query.is_featured)

    if query.is_low_stock is True:
        conditions.append(low_stock_condition())
    elif query.is_low_stock is False:
        conditions.append(Product.quantity > Product.low_stock_threshold)

    return and_(*conditions)


def build_category_predicate(query: CategorySearchQuery) -> ColumnElement[bool]:
    conditions: list[ColumnElement[bool]] = [Category.is_active == query.is_active]

    if query.q:
        conditions.append(
            or_(
                contains_text(Category.name, query.q),
                contains_text(Category.description, query.q),
                contains_text(Category.slug, query.q),
            )
        )
    if query.name:
        conditions.append(contains_text(Category.name, query.name))
    if query.description:
        conditions.append(contains_text(Category.description, query.description))
    if query.slug:
        conditions.append(contains_text(Category.slug, query.slug))

    return and_(*conditions)


# Weights for relevance ranking; an exact name hit outranks any partial hit.
_SCORE_EXACT_NAME = 8
_SCORE_NAME = 4
_SCORE_SKU = 3
_SCORE_BRAND = 2
_SCORE_TAG = 2
_SCORE_DESCRIPTION = 1


def text_match_score(text: str) -> ColumnElement[int]:
    """Weighted text-match strength of a product row for ``text``."""
    return (
        case((func.lower(Product.name) == text.lower(), _SCORE_EXACT_NAME), else_=0)
        + case((contains_text(Product.name, text), _SCORE_NAME), else_=0)
        + case((contains_text(Product.sku, text), _SCORE_SKU), else_=0)
        + case((contains_text(Product.brand, text), _SCORE_BRAND), else_=0)
        + case((any_tag_contains(text), _SCORE_TAG), else_=0)
        + case((contains_text(Product.description, text), _SCORE_DESCRIPTION), else_=0)
    )
