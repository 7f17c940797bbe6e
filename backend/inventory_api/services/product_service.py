"""Product write paths and the simple listing endpoints."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inventory_api.api.schemas.common import PaginatedResult
from inventory_api.api.schemas.product import ProductCreate, ProductRead, ProductUpdate
from inventory_api.core.errors import (
    ConflictError,
    InvalidInputError,
    InvalidReferenceError,
    NotFoundError,
)
from inventory_api.db.models import Category, Product
from inventory_api.services.assembler import assemble_product
from inventory_api.services.category_service import get_active_category
from inventory_api.services.search_query import ProductSearchQuery
from inventory_api.services.search_service import (
    build_product_pipeline,
    run_product_pipeline,
)

logger = logging.getLogger(__name__)

DUPLICATE_SKU_MESSAGE = "Product SKU already exists"
# Columns that may be cleared with an explicit null in a partial update
NULLABLE_FIELDS = {"brand"}


def _require_category(db: Session, category_id: str) -> Category:
    category = get_active_category(db, category_id)
    if category is None:
        raise InvalidReferenceError("Invalid category ID")
    return category


def _commit_or_conflict(db: Session) -> None:
    # SKU uniqueness is left to the unique index; no pre-check, so no race.
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Product uniqueness violation: {e.orig}")
        raise ConflictError(DUPLICATE_SKU_MESSAGE) from e


def _get_product(db: Session, product_id: str) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


def create_product(db: Session, payload: ProductCreate) -> ProductRead:
    category = _require_category(db, payload.category_id)

    product = Product(
        name=payload.name,
        description=payload.description,
        price=payload.price,
        sku=payload.sku,
        quantity=payload.quantity,
        low_stock_threshold=payload.low_stock_threshold,
        category_id=payload.category_id,
        brand=payload.brand or None,
        images=list(payload.images),
        is_active=payload.is_active,
        is_featured=payload.is_featured,
    )
    product.tags = payload.tags
    product.specifications = payload.specifications
    db.add(product)
    _commit_or_conflict(db)
    db.refresh(product)

    logger.info(f"Created product {product.id} with SKU {product.sku}")
    return assemble_product(product, category)


def list_products(db: Session, query: ProductSearchQuery) -> PaginatedResult[ProductRead]:
    """Plain listing: same pipeline as search, narrower parameter set."""
    return run_product_pipeline(
        db, build_product_pipeline(query), query.page, query.limit
    )


def list_low_stock(db: Session, query: ProductSearchQuery) -> PaginatedResult[ProductRead]:
    low_stock = ProductSearchQuery(
        is_low_stock=True,
        sort_by=query.sort_by or "quantity",
        order=query.order,
        page=query.page,
        limit=query.limit,
    )
    return run_product_pipeline(
        db, build_product_pipeline(low_stock), low_stock.page, low_stock.limit
    )


def list_by_category(
    db: Session, category_id: str, query: ProductSearchQuery
) -> PaginatedResult[ProductRead]:
    _require_category(db, category_id)
    scoped = ProductSearchQuery(
        category_id=category_id,
        sort_by=query.sort_by,
        order=query.order,
        page=query.page,
        limit=query.limit,
    )
    return run_product_pipeline(
        db, build_product_pipeline(scoped), scoped.page, scoped.limit
    )


def find_product(db: Session, product_id: str) -> ProductRead:
    product = db.get(Product, product_id)
    if product is None or not product.is_active:
        raise NotFoundError("Product not found")
    return assemble_product(product, db.get(Category, product.category_id))


def find_product_by_sku(db: Session, sku: str) -> ProductRead:
    product = db.scalar(
        select(Product).where(
            Product.sku == sku.strip().upper(), Product.is_active == True
        )
    )
    if product is None:
        raise NotFoundError("Product not found")
    return assemble_product(product, db.get(Category, product.category_id))


def update_product(db: Session, product_id: str, payload: ProductUpdate) -> ProductRead:
    """Apply only the fields present in the request body."""
    product = _get_product(db, product_id)

    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_FIELDS
    }
    if "category_id" in changes:
        _require_category(db, changes["category_id"])

    for key, value in changes.items():
        setattr(product, key, value)

    _commit_or_conflict(db)
    db.refresh(product)

    logger.info(f"Updated product {product_id}")
    return assemble_product(product, db.get(Category, product.category_id))


def update_stock(db: Session, product_id: str, quantity: int) -> ProductRead:
    if quantity < 0:
        raise InvalidInputError("Quantity cannot be negative")

    product = _get_product(db, product_id)
    product.quantity = quantity
    db.commit()
    db.refresh(product)

    logger.info(f"Set stock of product {product_id} to {quantity}")
    return assemble_product(product, db.get(Category, product.category_id))


def remove_product(db: Session, product_id: str) -> None:
    """Soft delete by clearing ``is_active``; the row is kept."""
    product = _get_product(db, product_id)
    product.is_active = False
    db.commit()
    logger.info(f"Soft deleted product {product_id}")


def hard_delete_product(db: Session, product_id: str) -> None:
    product = _get_product(db, product_id)
    db.delete(product)
    db.commit()
    logger.info(f"Permanently deleted product {product_id}")
