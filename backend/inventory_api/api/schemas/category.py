"""Pydantic models describing Category payloads."""

from datetime import datetime
from typing import Annotated

from pydantic import Field, StringConstraints

from inventory_api.api.schemas.common import CamelModel

CategoryName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)
]
CategoryDescription = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=10, max_length=500)
]
CategorySlug = Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]


class CategoryCreate(CamelModel):
    name: CategoryName
    description: CategoryDescription
    slug: CategorySlug | None = Field(None, description="Derived from name when omitted")
    is_active: bool = True


class CategoryUpdate(CamelModel):
    name: CategoryName | None = None
    description: CategoryDescription | None = None
    slug: CategorySlug | None = None
    is_active: bool | None = None


class CategoryRead(CamelModel):
    id: str
    name: str
    description: str
    slug: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
