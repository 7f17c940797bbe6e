from __future__ import annotations

import os

# Must be set before the application modules read settings.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from inventory_api.api.dependencies.db import get_session
from inventory_api.db.base import Base
from inventory_api.db.models import Category, Product
from inventory_api.main import create_app

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
    )


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_session():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app = create_app()
    app.dependency_overrides[get_session] = override_get_session
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_category(db):
    """Insert a category directly, bypassing the API."""

    def _make(name: str = "Electronics", **overrides) -> Category:
        fields = {
            "name": name,
            "description": f"{name} and related accessories",
            "slug": name.lower().replace(" ", "-"),
            "is_active": True,
        }
        fields.update(overrides)
        category = Category(**fields)
        db.add(category)
        db.commit()
        return category

    return _make


@pytest.fixture
def make_product(db):
    """Insert a product with strictly increasing ``created_at`` values."""
    sequence = count(1)

    def _make(category: Category | None = None, **overrides) -> Product:
        n = next(sequence)
        tags = overrides.pop("tags", [])
        specifications = overrides.pop("specifications", {})
        fields = {
            "name": f"Product {n}",
            "description": f"Description for product number {n}",
            "price": Decimal("10.00"),
            "sku": f"SKU-{n:04d}",
            "quantity": 50,
            "low_stock_threshold": 5,
            "category_id": category.id if category is not None else "missing-category",
            "brand": None,
            "images": [],
            "is_active": True,
            "is_featured": False,
            "created_at": BASE_TIME + timedelta(minutes=n),
        }
        fields.update(overrides)
        product = Product(**fields)
        product.tags = tags
        product.specifications = specifications
        db.add(product)
        db.commit()
        return product

    return _make
