"""CRUD, listing and search endpoints for product inventory."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inventory_api.api.dependencies.db import get_session
from inventory_api.api.dependencies.query import PageParams, get_page_params
from inventory_api.api.schemas.common import ApiResponse, PaginatedResult
from inventory_api.api.schemas.product import (
    ProductCreate,
    ProductRead,
    ProductUpdate,
    StockUpdate,
)
from inventory_api.api.schemas.search import SearchFilters
from inventory_api.core.config import get_settings
from inventory_api.core.errors import InventoryError
from inventory_api.services import product_service, search_service
from inventory_api.services.search_query import (
    ProductSearchQuery,
    clean_text,
    split_tags,
)

logger = logging.getLogger(__name__)

router = APIRouter()

settings = get_settings()

ProductSortKey = Literal["relevance", "price", "name", "createdAt", "quantity"]


def _domain_error(e: InventoryError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.message)


def _database_error(db: Session, action: str, e: SQLAlchemyError) -> HTTPException:
    db.rollback()
    logger.error(f"Database error while trying to {action}: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


@router.post(
    "",
    summary="Create a new product",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[ProductRead],
)
async def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_session),
) -> ApiResponse[ProductRead]:
    """Persist a product that references an existing, active category.

    The SKU is upper-cased; a duplicate SKU is reported as 409.
    """
    try:
        product = product_service.create_product(db, payload)
        return ApiResponse.ok("Product created successfully", product)
    except InventoryError as e:
        raise _domain_error(e) from e
    except SQLAlchemyError as e:
        raise _database_error(db, "create product", e) from e


@router.get(
    "",
    summary="List products with filters and pagination",
    response_model=ApiResponse[PaginatedResult[ProductRead]],
)
async def list_products(
    brand: str | None = Query(None, description="Filter by brand (partial match)"),
    is_featured: bool | None = Query(None, alias="isFeatured"),
    min_price: Decimal | None = Query(None, alias="minPrice", ge=0),
    max_price: Decimal | None = Query(None, alias="maxPrice", ge=0),
    category_id: str | None = Query(None, alias="categoryId"),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_session),
) -> ApiResponse[PaginatedResult[ProductRead]]:
    """Return active products, newest first unless another sort is given."""
    query = ProductSearchQuery(
        brand=clean_text(brand),
        is_featured=is_featured,
        min_price=min_price,
        max_price=max_price,
        category_id=clean_text(category_id),
        sort_by=params.sort or "createdAt",
        order=params.order or "desc",
        page=params.page,
        limit=params.limit,
    )
    try:
        result = product_service.list_products(db, query)
        return ApiResponse.ok("Products retrieved successfully", result)
    except SQLAlchemyError as e:
        raise _database_error(db, "retrieve products", e) from e


@router.get(
    "/low-stock",
    summary="List products at or below their low-stock threshold",
    response_model=ApiResponse[PaginatedResult[ProductRead]],
)
async def list_low_stock(
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_session),
) -> ApiResponse[PaginatedResult[ProductRead]]:
    """Sorted by quantity ascending unless another sort is given."""
    query = ProductSearchQuery(
        sort_by=params.sort or "quantity",
        order=params.order or "asc",
        page=params.page,
        limit=params.limit,
    )
    try:
        result = product_service.list_low_stock(db, query)
        return ApiResponse.ok("Low stock products retrieved successfully", result)
    except SQLAlchemyError as e:
        raise _database_error(db, "retrieve low stock products", e) from e


@router.get(
    "/search",
    summary="Advanced product search",
    response_model=ApiResponse[PaginatedResult[ProductRead]],
)
async def search_products(
    q: str | None = Query(
        None, description="Text across name, description, brand, SKU and tags"
    ),
    name: str | None = Query(None),
    description: str | None = Query(None),
    brand: str | None = Query(None),
    sku: str | None = Query(None),
    category_id: str | None = Query(None, alias="categoryId"),
    min_price: Decimal | None = Query(None, alias="minPrice", ge=0),
    max_price: Decimal | None = Query(None, alias="maxPrice", ge=0),
    min_quantity: int | None = Query(None, alias="minQuantity", ge=0),
    max_quantity: int | None = Query(None, alias="maxQuantity", ge=0),
    tags: list[str] | None = Query(None, description="Comma-separated tags"),
    is_active: bool = Query(True, alias="isActive"),
    is_featured: bool | None = Query(None, alias="isFeatured"),
    is_low_stock: bool | None = Query(None, alias="isLowStock"),
    specifications: str | None = Query(
        None, description="Text within specification values"
    ),
    sort_by: ProductSortKey | None = Query(None, alias="sortBy"),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_session),
) -> ApiResponse[PaginatedResult[ProductRead]]:
    """Search products; an empty match is a successful empty page."""
    query = ProductSearchQuery(
        q=clean_text(q),
        name=clean_text(name),
        description=clean_text(description),
        brand=clean_text(brand),
        sku=clean_text(sku),
        category_id=clean_text(category_id),
        min_price=min_price,
        max_price=max_price,
        min_quantity=min_quantity,
        max_quantity=max_quantity,
        tags=split_tags(tags),
        is_active=is_active,
        is_featured=is_featured,
        is_low_stock=is_low_stock,
        specifications=clean_text(specifications),
        sort_by=sort_by or params.sort or "relevance",
        order=params.order or "desc",
        page=params.page,
        limit=params.limit,
    )
    try:
        result = search_service.search_products(db, query)
        return ApiResponse.ok("Products search completed successfully", result)
    except SQLAlchemyError as e:
        raise _database_error(db, "search products", e) from e


@router.get(
    "/search/suggestions",
    summary="Autocomplete suggestions from names, brands and tags",
    response_model=ApiResponse[list[str]],
)
async def search_suggestions(
    q: str | None = Query(None),
    limit: int = Query(settings.suggestion_limit, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_session),
) -> ApiResponse[list[str]]:
    try:
        suggestions = search_service.product_suggestions(db, q, limit)
        return ApiResponse.ok("Search suggestions retrieved successfully", suggestions)
    except SQLAlchemyError as e:
        raise _database_error(db, "retrieve search suggestions", e) from e


@router.get(
    "/search/filters",
    summary="Available filter values for search UIs",
    response_model=ApiResponse[SearchFilters],
)
async def search_filters(
    db: Session = Depends(get_session),
) -> ApiResponse[SearchFilters]:
    try:
        filters = search_service.search_filters(db)
        return ApiResponse.ok("Search filters retrieved successfully", filters)
    except SQLAlchemyError as e:
        raise _database_error(db, "retrieve search filters", e) from e


@router.get(
    "/sku/{sku}",
    summary="Get an active product by SKU",
    response_model=ApiResponse[ProductRead],
)
async def get_product_by_sku(
    sku: str,
    db: Session = Depends(get_session),
) -> ApiResponse[ProductRead]:
    try:
        product = product_service.find_product_by_sku(db, sku)
        return ApiResponse.ok("Product retrieved successfully", product)
    except InventoryError as e:
        raise _domain_error(e) from e
    except SQLAlchemyError as e:
        raise _database_error(db, "retrieve product", e) from e


@router.get(
    "/category/{category_id}",
    summary="List active products of one category",
    response_model=ApiResponse[PaginatedResult[ProductRead]],
)
async def list_products_by_category(
    category_id: str,
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_session),
) -> ApiResponse[PaginatedResult[ProductRead]]:
    query = ProductSearchQuery(
        sort_by=params.sort or "createdAt",
        order=params.order or "desc",
        page=params.page,
        limit=params.limit,
    )
    try:
        result = product_service.list_by_category(db, category_id, query)
        return ApiResponse.ok("Products by category retrieved successfully", result)
    except InventoryError as e:
        raise _domain_error(e) from e
    except SQLAlchemyError as e:
        raise _database_error(db, "retrieve products by category", e) from e


@router.get(
    "/{product_id}",
    summary="Get an active product by id",
    response_model=ApiResponse[ProductRead],
)
async def get_product(
    product_id: str,
    db: Session = Depends(get_session),
) -> ApiResponse[ProductRead]:
    try:
        product = product_service.find_product(db, product_id)
        return ApiResponse.ok("Product retrieved successfully", product)
    except InventoryError as e:
        raise _domain_error(e) from e
    except SQLAlchemyError as e:
        raise _database_error(db, "retrieve product", e) from e


@router.patch(
    "/{product_id}",
    summary="Update existing product",
    response_model=ApiResponse[ProductRead],
)
async def update_product(
    product_id: str,
    payload: ProductUpdate,
    db: Session = Depends(get_session),
) -> ApiResponse[ProductRead]:
    """Partial update; category and SKU are re-validated when they change."""
    try:
        product = product_service.update_product(db, product_id, payload)
        return ApiResponse.ok("Product updated successfully", product)
    except InventoryError as e:
        raise _domain_error(e) from e
    except SQLAlchemyError as e:
        raise _database_error(db, f"update product {product_id}", e) from e


@router.patch(
    "/{product_id}/stock",
    summary="Set the stock quantity of a product",
    response_model=ApiResponse[ProductRead],
)
async def update_stock(
    product_id: str,
    payload: StockUpdate,
    db: Session = Depends(get_session),
) -> ApiResponse[ProductRead]:
    try:
        product = product_service.update_stock(db, product_id, payload.quantity)
        return ApiResponse.ok("Product stock updated successfully", product)
    except InventoryError as e:
        raise _domain_error(e) from e
    except SQLAlchemyError as e:
        raise _database_error(db, f"update stock of product {product_id}", e) from e


@router.delete(
    "/{product_id}",
    summary="Delete product (soft delete)",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_product(
    product_id: str,
    db: Session = Depends(get_session),
) -> Response:
    """Mark the product inactive; it stays stored but leaves default listings."""
    try:
        product_service.remove_product(db, product_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except InventoryError as e:
        raise _domain_error(e) from e
    except SQLAlchemyError as e:
        raise _database_error(db, f"delete product {product_id}", e) from e


@router.delete(
    "/{product_id}/hard",
    summary="Permanently delete product",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def hard_delete_product(
    product_id: str,
    db: Session = Depends(get_session),
) -> Response:
    try:
        product_service.hard_delete_product(db, product_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except InventoryError as e:
        raise _domain_error(e) from e
    except SQLAlchemyError as e:
        raise _database_error(db, f"permanently delete product {product_id}", e) from e
