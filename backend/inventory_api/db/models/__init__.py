"""Database models package."""
from inventory_api.db.models.product import Product, ProductSpecification, ProductTag
from inventory_api.db.models.category import Category

__all__ = ["Product", "ProductTag", "ProductSpecification", "Category"]
