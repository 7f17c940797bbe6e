"""Offset arithmetic and result metadata shared by every list endpoint."""

from __future__ import annotations

import math
from dataclasses import dataclass


def compute_skip(page: int, limit: int) -> int:
    """Rows to skip before the requested 1-indexed page."""
    return (page - 1) * limit


@dataclass(frozen=True)
class PageInfo:
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


def build_page_info(page: int, limit: int, total: int) -> PageInfo:
    """Derive pagination metadata for a page of ``limit`` rows out of ``total``.

    Pages past the end are valid and simply report ``has_next=False``.
    ``limit`` is not clamped here; request validation owns that policy.
    """
    total_pages = math.ceil(total / limit)
    return PageInfo(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )
