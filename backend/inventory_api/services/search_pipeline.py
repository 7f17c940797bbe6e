"""Compose the match -> join -> derive -> sort -> paginate query plan.

A pipeline is built once per request and yields two statements over the same
match and join stages: a scalar count and a page of rows. The two are executed
separately, so a concurrent write landing in between can make ``total`` disagree
with the page by a row; that is accepted.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import ColumnElement, Select, func, select

from inventory_api.db.models import Category, Product
from inventory_api.services.query_filters import low_stock_condition, text_match_score
from inventory_api.services.sorting import TEXT_SCORE, Ordering

PRODUCT_SORT_COLUMNS = {
    "price": Product.price,
    "name": Product.name,
    "createdAt": Product.created_at,
    "quantity": Product.quantity,
    "isFeatured": Product.is_featured,
}

CATEGORY_SORT_COLUMNS = {
    "name": Category.name,
    "slug": Category.slug,
    "createdAt": Category.created_at,
    "updatedAt": Category.updated_at,
}


def _order_by_clauses(
    ordering: Ordering, columns: dict, text_query: str | None
) -> list[ColumnElement]:
    clauses: list[ColumnElement] = []
    for term in ordering:
        if term.field == TEXT_SCORE:
            if not text_query:
                continue
            column = text_match_score(text_query)
        else:
            column = columns[term.field]
        clauses.append(column.desc() if term.descending else column.asc())
    return clauses


@dataclass(frozen=True)
class ProductSearchPipeline:
    """Product search plan: match, category left join, low-stock flag, order."""

    predicate: ColumnElement[bool]
    ordering: Ordering
    text_query: str | None = None

    def _matched(self, *columns) -> Select:
        # Joining on the category primary key yields at most one category per
        # product; a dangling categoryId yields NULL category columns.
        return (
            select(*columns)
            .outerjoin(Category, Category.id == Product.category_id)
            .where(self.predicate)
        )

    def count_statement(self) -> Select:
        matched = self._matched(Product.id).subquery()
        return select(func.count()).select_from(matched)

    def page_statement(self, skip: int, limit: int) -> Select:
        """Rows of ``(Product, Category | None, is_low_stock)`` for one page."""
        order_by = _order_by_clauses(
            self.ordering, PRODUCT_SORT_COLUMNS, self.text_query
        )
        return (
            self._matched(
                Product, Category, low_stock_condition().label("is_low_stock")
            )
            .order_by(*order_by, Product.id.asc())
            .offset(skip)
            .limit(limit)
        )


@dataclass(frozen=True)
class CategorySearchPipeline:
    """Single-table category scan; no join and no derived columns."""

    predicate: ColumnElement[bool]
    ordering: Ordering

    def count_statement(self) -> Select:
        return select(func.count(Category.id)).where(self.predicate)

    def page_statement(self, skip: int, limit: int) -> Select:
        order_by = _order_by_clauses(self.ordering, CATEGORY_SORT_COLUMNS, None)
        return (
            select(Category)
            .where(self.predicate)
            .order_by(*order_by, Category.id.asc())
            .offset(skip)
            .limit(limit)
        )
