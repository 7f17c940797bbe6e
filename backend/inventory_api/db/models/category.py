"""SQLAlchemy model for product categories."""

import uuid

from sqlalchemy import Boolean, Column, String, Text
from sqlalchemy.types import DateTime

from inventory_api.db.base import Base
from inventory_api.db.models.product import utcnow


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=False)
    slug = Column(String(100), index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
