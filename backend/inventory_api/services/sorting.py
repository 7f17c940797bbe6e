"""Resolve a requested sort key and direction into an ordering.

The resolvers are pure: they return field names, not SQL, and the pipeline
composer maps those names onto columns.
"""

from __future__ import annotations

from typing import NamedTuple

RELEVANCE = "relevance"
TEXT_SCORE = "textScore"
DEFAULT_SORT_FIELD = "createdAt"

PRODUCT_SORT_FIELDS = frozenset({"price", "name", "createdAt", "quantity"})
CATEGORY_SORT_FIELDS = frozenset({"name", "slug", "createdAt", "updatedAt"})


class SortTerm(NamedTuple):
    field: str
    descending: bool


Ordering = tuple[SortTerm, ...]


def _is_descending(order: str | None) -> bool:
    return order != "asc"


def resolve_product_ordering(
    sort_by: str | None, order: str | None, has_text_query: bool
) -> Ordering:
    """Map ``sort_by``/``order`` to product sort terms.

    ``relevance`` has a fixed tie-break chain and ignores ``order``:
    text score (only with a text query), then featured first, then newest.
    """
    if sort_by == RELEVANCE:
        chain = (SortTerm("isFeatured", True), SortTerm("createdAt", True))
        if has_text_query:
            return (SortTerm(TEXT_SCORE, True),) + chain
        return chain
    field = sort_by if sort_by in PRODUCT_SORT_FIELDS else DEFAULT_SORT_FIELD
    return (SortTerm(field, _is_descending(order)),)


def resolve_category_ordering(sort_by: str | None, order: str | None) -> Ordering:
    field = sort_by if sort_by in CATEGORY_SORT_FIELDS else DEFAULT_SORT_FIELD
    return (SortTerm(field, _is_descending(order)),)
