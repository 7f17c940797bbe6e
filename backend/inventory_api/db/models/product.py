"""SQLAlchemy models for product records, their tags and specifications."""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship, validates
from sqlalchemy.types import DateTime

from inventory_api.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def stringify_spec_value(value: Any) -> str:
    """Render a specification value the way free-text search sees it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    # Stored upper-cased, so a plain unique index is case-insensitive in effect
    sku = Column(String(50), nullable=False, unique=True)
    quantity = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(Integer, nullable=False, default=5)
    # No FK constraint: a hard-deleted category leaves a dangling reference
    # which reads back as "no category".
    category_id = Column(String(36), nullable=False, index=True)
    brand = Column(String(100))
    images = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    tag_entries = relationship(
        "ProductTag",
        order_by="ProductTag.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    spec_entries = relationship(
        "ProductSpecification",
        order_by="ProductSpecification.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def tags(self) -> list[str]:
        return [entry.value for entry in self.tag_entries]

    @tags.setter
    def tags(self, values: list[str]) -> None:
        self.tag_entries = [
            ProductTag(position=index, value=value)
            for index, value in enumerate(values)
        ]

    @property
    def specifications(self) -> dict[str, Any]:
        return {entry.key: entry.value for entry in self.spec_entries}

    @specifications.setter
    def specifications(self, values: dict[str, Any]) -> None:
        self.spec_entries = [
            ProductSpecification(position=index, key=key, value=value)
            for index, (key, value) in enumerate(values.items())
        ]


class ProductTag(Base):
    __tablename__ = "product_tags"

    id = Column(Integer, primary_key=True)
    product_id = Column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False, default=0)
    value = Column(String(100), nullable=False, index=True)


class ProductSpecification(Base):
    __tablename__ = "product_specifications"

    id = Column(Integer, primary_key=True)
    product_id = Column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False, default=0)
    key = Column(String(100), nullable=False)
    value = Column(JSON)
    value_text = Column(Text, nullable=False, default="")

    @validates("value")
    def _sync_value_text(self, _key: str, value: Any) -> Any:
        self.value_text = stringify_spec_value(value)
        return value
