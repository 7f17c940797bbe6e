"""Payloads for the product search facets endpoint."""

from pydantic import Field

from inventory_api.api.schemas.common import CamelModel


class CategoryFacet(CamelModel):
    id: str
    name: str


class PriceRange(CamelModel):
    min: float = 0
    max: float = 0


class SearchFilters(CamelModel):
    brands: list[str] = Field(default_factory=list)
    categories: list[CategoryFacet] = Field(default_factory=list)
    price_range: PriceRange = Field(default_factory=PriceRange)
    tags: list[str] = Field(default_factory=list)
