"""Fully-populated search parameter objects handed from routers to services.

Defaults are resolved here, at the boundary, so the query builders never have
to tell "omitted" apart from "explicitly set to the default".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Literal

SortOrder = Literal["asc", "desc"]


@dataclass(frozen=True)
class ProductSearchQuery:
    q: str | None = None
    name: str | None = None
    description: str | None = None
    brand: str | None = None
    sku: str | None = None
    category_id: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    min_quantity: int | None = None
    max_quantity: int | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)
    is_active: bool = True
    is_featured: bool | None = None
    is_low_stock: bool | None = None
    specifications: str | None = None
    sort_by: str | None = "relevance"
    order: SortOrder = "desc"
    page: int = 1
    limit: int = 10


@dataclass(frozen=True)
class CategorySearchQuery:
    q: str | None = None
    name: str | None = None
    description: str | None = None
    slug: str | None = None
    is_active: bool = True
    sort_by: str | None = "createdAt"
    order: SortOrder = "desc"
    page: int = 1
    limit: int = 10


def clean_text(value: str | None) -> str | None:
    """Trim free-text parameters; blank strings count as absent."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def split_tags(raw: str | list[str] | None) -> tuple[str, ...]:
    """Accept ``tags=a,b`` or repeated ``tags`` parameters."""
    if not raw:
        return ()
    items = [raw] if isinstance(raw, str) else raw
    parts: list[str] = []
    for item in items:
        parts.extend(item.split(","))
    return tuple(tag.strip() for tag in parts if tag.strip())
