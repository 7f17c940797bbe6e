"""Pydantic models describing Product payloads."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import Field, StringConstraints, model_serializer

from inventory_api.api.schemas.category import CategoryRead
from inventory_api.api.schemas.common import CamelModel

ProductName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=2, max_length=200)
]
ProductDescription = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=10, max_length=1000)
]
Sku = Annotated[
    str,
    StringConstraints(strip_whitespace=True, to_upper=True, min_length=1, max_length=50),
]
Brand = Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]
# Tags and specification keys share the 100-character column width
Tag = Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]
SpecKey = Annotated[str, StringConstraints(max_length=100)]
Price = Annotated[
    Decimal, Field(ge=0, le=Decimal("999999.99"), max_digits=8, decimal_places=2)
]
SpecValue = str | int | float | bool | None


class ProductCreate(CamelModel):
    """Schema for manually created products."""

    name: ProductName
    description: ProductDescription
    price: Price
    sku: Sku = Field(..., description="Unique SKU, stored upper-cased")
    quantity: int = Field(..., ge=0)
    low_stock_threshold: int = Field(5, ge=0)
    category_id: str = Field(..., min_length=1, max_length=36)
    brand: Brand | None = None
    tags: list[Tag] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    specifications: dict[SpecKey, SpecValue] = Field(default_factory=dict)
    is_active: bool = True
    is_featured: bool = False


class ProductUpdate(CamelModel):
    """Partial update; only fields present in the request body are applied."""

    name: ProductName | None = None
    description: ProductDescription | None = None
    price: Price | None = None
    sku: Sku | None = None
    quantity: int | None = Field(None, ge=0)
    low_stock_threshold: int | None = Field(None, ge=0)
    category_id: str | None = Field(None, min_length=1, max_length=36)
    brand: Brand | None = None
    tags: list[Tag] | None = None
    images: list[str] | None = None
    specifications: dict[SpecKey, SpecValue] | None = None
    is_active: bool | None = None
    is_featured: bool | None = None


class StockUpdate(CamelModel):
    quantity: int


class ProductRead(CamelModel):
    id: str
    name: str
    description: str
    price: float
    sku: str
    quantity: int
    low_stock_threshold: int
    category_id: str
    category: CategoryRead | None = None
    brand: str | None = None
    tags: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    specifications: dict[str, Any] = Field(default_factory=dict)
    is_active: bool
    is_featured: bool
    is_low_stock: bool
    created_at: datetime
    updated_at: datetime

    @model_serializer(mode="wrap")
    def _omit_missing_category(self, handler):
        # An unresolved category is left out of the payload, not sent as null.
        data = handler(self)
        if self.category is None:
            data.pop("category", None)
        return data
