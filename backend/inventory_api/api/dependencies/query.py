"""Shared query-string parameters for paginated list endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from fastapi import Query

from inventory_api.core.config import get_settings

settings = get_settings()


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int
    sort: str | None
    order: Literal["asc", "desc"] | None


def get_page_params(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Items per page",
    ),
    sort: str | None = Query(None, description="Field to sort by"),
    order: Literal["asc", "desc"] | None = Query(None, description="Sort direction"),
) -> PageParams:
    """Collect page/limit/sort/order; endpoint-specific defaults apply later."""
    return PageParams(page=page, limit=limit, sort=sort, order=order)
