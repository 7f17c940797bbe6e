"""Map ORM rows onto public response schemas."""

from __future__ import annotations

from inventory_api.api.schemas.category import CategoryRead
from inventory_api.api.schemas.product import ProductRead
from inventory_api.db.models import Category, Product


def assemble_category(category: Category) -> CategoryRead:
    return CategoryRead.model_validate(category)


def assemble_product(product: Product, category: Category | None = None) -> ProductRead:
    """Build the public product shape.

    ``isLowStock`` is recomputed from quantity and threshold on every call,
    whatever an upstream query may have projected. The category is embedded
    by value only when one was resolved.
    """
    return ProductRead(
        id=product.id,
        name=product.name,
        description=product.description,
        price=float(product.price),
        sku=product.sku,
        quantity=product.quantity,
        low_stock_threshold=product.low_stock_threshold,
        category_id=product.category_id,
        category=assemble_category(category) if category is not None else None,
        brand=product.brand,
        tags=list(product.tags),
        images=list(product.images or []),
        specifications=dict(product.specifications),
        is_active=product.is_active,
        is_featured=product.is_featured,
        is_low_stock=product.quantity <= product.low_stock_threshold,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )
