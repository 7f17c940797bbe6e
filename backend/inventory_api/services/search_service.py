"""Product search, autocomplete suggestions and filter facets."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from inventory_api.api.schemas.common import PaginatedResult, PaginationMeta
from inventory_api.api.schemas.product import ProductRead
from inventory_api.api.schemas.search import CategoryFacet, PriceRange, SearchFilters
from inventory_api.db.models import Category, Product, ProductTag
from inventory_api.services.assembler import assemble_product
from inventory_api.services.query_filters import (
    any_tag_contains,
    build_product_predicate,
    contains_text,
)
from inventory_api.services.search_pipeline import ProductSearchPipeline
from inventory_api.services.search_query import ProductSearchQuery
from inventory_api.services.sorting import resolve_product_ordering
from inventory_api.utils.pagination import build_page_info, compute_skip

logger = logging.getLogger(__name__)

MIN_SUGGESTION_LENGTH = 2


def build_product_pipeline(query: ProductSearchQuery) -> ProductSearchPipeline:
    ordering = resolve_product_ordering(query.sort_by, query.order, bool(query.q))
    return ProductSearchPipeline(
        predicate=build_product_predicate(query),
        ordering=ordering,
        text_query=query.q,
    )


def run_product_pipeline(
    db: Session, pipeline: ProductSearchPipeline, page: int, limit: int
) -> PaginatedResult[ProductRead]:
    """Execute the count and page statements and assemble the result."""
    total = db.scalar(pipeline.count_statement()) or 0
    rows = db.execute(pipeline.page_statement(compute_skip(page, limit), limit)).all()
    page_info = build_page_info(page, limit, total)
    return PaginatedResult[ProductRead](
        data=[assemble_product(product, category) for product, category, _ in rows],
        pagination=PaginationMeta.model_validate(page_info),
    )


def search_products(
    db: Session, query: ProductSearchQuery
) -> PaginatedResult[ProductRead]:
    """Advanced product search over every filter dimension."""
    result = run_product_pipeline(
        db, build_product_pipeline(query), query.page, query.limit
    )
    logger.debug(
        f"Product search matched {result.pagination.total} row(s), "
        f"page {query.page} returned {len(result.data)}"
    )
    return result


def _active_products_ordered(*columns):
    return (
        select(*columns)
        .where(Product.is_active == True)
        .order_by(Product.created_at.asc(), Product.id.asc())
    )


def product_suggestions(db: Session, query: str | None, limit: int = 10) -> list[str]:
    """Autocomplete candidates from names, then brands, then tags.

    Each source is capped at ``limit`` before merging; duplicates are dropped
    case-sensitively, keeping the first occurrence.
    """
    text = (query or "").strip()
    if len(text) < MIN_SUGGESTION_LENGTH:
        return []

    suggestions: dict[str, None] = {}

    names = db.scalars(
        _active_products_ordered(Product.name)
        .where(contains_text(Product.name, text))
        .limit(limit)
    ).all()
    suggestions.update(dict.fromkeys(names))

    brands = db.scalars(
        _active_products_ordered(Product.brand)
        .where(Product.brand.is_not(None), Product.brand != "")
        .where(contains_text(Product.brand, text))
        .limit(limit)
    ).all()
    suggestions.update(dict.fromkeys(brands))

    tagged = db.scalars(
        _active_products_ordered(Product).where(any_tag_contains(text)).limit(limit)
    ).all()
    needle = text.lower()
    for product in tagged:
        suggestions.update(
            dict.fromkeys(tag for tag in product.tags if needle in tag.lower())
        )

    return list(suggestions)[:limit]


def search_filters(db: Session) -> SearchFilters:
    """Facet values over active records, recomputed on every call."""
    brands = db.scalars(
        select(Product.brand)
        .where(
            Product.is_active == True,
            Product.brand.is_not(None),
            Product.brand != "",
        )
        .distinct()
    ).all()

    categories = db.execute(
        select(Category.id, Category.name)
        .where(Category.is_active == True)
        .order_by(Category.name.asc())
    ).all()

    min_price, max_price = db.execute(
        select(func.min(Product.price), func.max(Product.price)).where(
            Product.is_active == True
        )
    ).one()

    tags = db.scalars(
        select(ProductTag.value)
        .join(Product, Product.id == ProductTag.product_id)
        .where(Product.is_active == True)
        .distinct()
    ).all()

    return SearchFilters(
        brands=sorted(brands),
        categories=[CategoryFacet(id=row.id, name=row.name) for row in categories],
        price_range=PriceRange(
            min=float(min_price) if min_price is not None else 0,
            max=float(max_price) if max_price is not None else 0,
        ),
        tags=sorted(tags),
    )
