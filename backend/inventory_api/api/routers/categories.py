"""CRUD and search endpoints for product categories."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inventory_api.api.dependencies.db import get_session
from inventory_api.api.dependencies.query import PageParams, get_page_params
from inventory_api.api.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate
from inventory_api.api.schemas.common import ApiResponse, PaginatedResult
from inventory_api.core.config import get_settings
from inventory_api.core.errors import InventoryError
from inventory_api.services import category_service
from inventory_api.services.search_query import CategorySearchQuery, clean_text

logger = logging.getLogger(__name__)

router = APIRouter()

settings = get_settings()


def _fail(db: Session, action: str, e: Exception) -> HTTPException:
    if isinstance(e, InventoryError):
        return HTTPException(status_code=e.status_code, detail=e.message)
    db.rollback()
    logger.error(f"Database error while trying to {action}: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


@router.post(
    "",
    summary="Create a category",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[CategoryRead],
)
async def create_category(
    payload: CategoryCreate,
    db: Session = Depends(get_session),
) -> ApiResponse[CategoryRead]:
    """Create a category; the slug is derived from the name when omitted."""
    try:
        category = category_service.create_category(db, payload)
        return ApiResponse.ok("Category created successfully", category)
    except (InventoryError, SQLAlchemyError) as e:
        raise _fail(db, "create category", e) from e


@router.get(
    "",
    summary="List and search categories",
    response_model=ApiResponse[PaginatedResult[CategoryRead]],
)
async def list_categories(
    q: str | None = Query(None, description="Text across name, description and slug"),
    name: str | None = Query(None),
    description: str | None = Query(None),
    slug: str | None = Query(None),
    is_active: bool = Query(True, alias="isActive"),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_session),
) -> ApiResponse[PaginatedResult[CategoryRead]]:
    query = CategorySearchQuery(
        q=clean_text(q),
        name=clean_text(name),
        description=clean_text(description),
        slug=clean_text(slug),
        is_active=is_active,
        sort_by=params.sort or "createdAt",
        order=params.order or "desc",
        page=params.page,
        limit=params.limit,
    )
    try:
        result = category_service.search_categories(db, query)
        return ApiResponse.ok("Categories retrieved successfully", result)
    except SQLAlchemyError as e:
        raise _fail(db, "retrieve categories", e) from e


@router.get(
    "/search/suggestions",
    summary="Autocomplete suggestions from category names",
    response_model=ApiResponse[list[str]],
)
async def category_suggestions(
    q: str | None = Query(None),
    limit: int = Query(settings.suggestion_limit, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_session),
) -> ApiResponse[list[str]]:
    try:
        suggestions = category_service.category_suggestions(db, q, limit)
        return ApiResponse.ok("Category suggestions retrieved successfully", suggestions)
    except SQLAlchemyError as e:
        raise _fail(db, "retrieve category suggestions", e) from e


@router.get(
    "/slug/{slug}",
    summary="Get an active category by slug",
    response_model=ApiResponse[CategoryRead],
)
async def get_category_by_slug(
    slug: str,
    db: Session = Depends(get_session),
) -> ApiResponse[CategoryRead]:
    try:
        category = category_service.find_category_by_slug(db, slug)
        return ApiResponse.ok("Category retrieved successfully", category)
    except (InventoryError, SQLAlchemyError) as e:
        raise _fail(db, "retrieve category", e) from e


@router.get(
    "/{category_id}",
    summary="Get an active category by id",
    response_model=ApiResponse[CategoryRead],
)
async def get_category(
    category_id: str,
    db: Session = Depends(get_session),
) -> ApiResponse[CategoryRead]:
    try:
        category = category_service.find_category(db, category_id)
        return ApiResponse.ok("Category retrieved successfully", category)
    except (InventoryError, SQLAlchemyError) as e:
        raise _fail(db, "retrieve category", e) from e


@router.patch(
    "/{category_id}",
    summary="Update a category",
    response_model=ApiResponse[CategoryRead],
)
async def update_category(
    category_id: str,
    payload: CategoryUpdate,
    db: Session = Depends(get_session),
) -> ApiResponse[CategoryRead]:
    try:
        category = category_service.update_category(db, category_id, payload)
        return ApiResponse.ok("Category updated successfully", category)
    except (InventoryError, SQLAlchemyError) as e:
        raise _fail(db, f"update category {category_id}", e) from e


@router.delete(
    "/{category_id}",
    summary="Delete category (soft delete)",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_category(
    category_id: str,
    db: Session = Depends(get_session),
) -> Response:
    try:
        category_service.remove_category(db, category_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except (InventoryError, SQLAlchemyError) as e:
        raise _fail(db, f"delete category {category_id}", e) from e


@router.delete(
    "/{category_id}/hard",
    summary="Permanently delete category",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def hard_delete_category(
    category_id: str,
    db: Session = Depends(get_session),
) -> Response:
    """Remove the row; products still pointing at it report no category."""
    try:
        category_service.hard_delete_category(db, category_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except (InventoryError, SQLAlchemyError) as e:
        raise _fail(db, f"permanently delete category {category_id}", e) from e
