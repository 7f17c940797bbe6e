"""Category management, listing and name suggestions."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inventory_api.api.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate
from inventory_api.api.schemas.common import PaginatedResult, PaginationMeta
from inventory_api.core.errors import ConflictError, NotFoundError
from inventory_api.db.models import Category
from inventory_api.services.assembler import assemble_category
from inventory_api.services.query_filters import build_category_predicate, contains_text
from inventory_api.services.search_pipeline import CategorySearchPipeline
from inventory_api.services.search_query import CategorySearchQuery
from inventory_api.services.sorting import resolve_category_ordering
from inventory_api.utils.pagination import build_page_info, compute_skip
from inventory_api.utils.slug import generate_slug, normalize_slug

logger = logging.getLogger(__name__)

MIN_SUGGESTION_LENGTH = 2
DUPLICATE_NAME_MESSAGE = "Category name already exists"


def get_active_category(db: Session, category_id: str) -> Category | None:
    """Return the category when it exists and is active, else ``None``."""
    category = db.get(Category, category_id)
    if category is None or not category.is_active:
        return None
    return category


def _commit_or_conflict(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Category uniqueness violation: {e.orig}")
        raise ConflictError(DUPLICATE_NAME_MESSAGE) from e


def create_category(db: Session, payload: CategoryCreate) -> CategoryRead:
    slug = normalize_slug(payload.slug) if payload.slug else generate_slug(payload.name)
    category = Category(
        name=payload.name,
        description=payload.description,
        slug=slug,
        is_active=payload.is_active,
    )
    db.add(category)
    _commit_or_conflict(db)
    db.refresh(category)

    logger.info(f"Created category {category.id} ({category.name})")
    return assemble_category(category)


def search_categories(
    db: Session, query: CategorySearchQuery
) -> PaginatedResult[CategoryRead]:
    """Filtered, sorted page of categories; a direct single-table scan."""
    pipeline = CategorySearchPipeline(
        predicate=build_category_predicate(query),
        ordering=resolve_category_ordering(query.sort_by, query.order),
    )
    total = db.scalar(pipeline.count_statement()) or 0
    categories = db.scalars(
        pipeline.page_statement(compute_skip(query.page, query.limit), query.limit)
    ).all()
    return PaginatedResult[CategoryRead](
        data=[assemble_category(category) for category in categories],
        pagination=PaginationMeta.model_validate(
            build_page_info(query.page, query.limit, total)
        ),
    )


def find_category(db: Session, category_id: str) -> CategoryRead:
    category = get_active_category(db, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return assemble_category(category)


def find_category_by_slug(db: Session, slug: str) -> CategoryRead:
    category = db.scalar(
        select(Category).where(Category.slug == slug, Category.is_active == True)
    )
    if category is None:
        raise NotFoundError("Category not found")
    return assemble_category(category)


def update_category(
    db: Session, category_id: str, payload: CategoryUpdate
) -> CategoryRead:
    """Apply a partial update; a renamed category gets a fresh slug unless one is given."""
    category = db.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")

    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None
    }
    # A blank slug counts as omitted and is derived from the (possibly new) name
    slug = changes.pop("slug", None)
    if slug:
        changes["slug"] = normalize_slug(slug)
    elif slug is not None or "name" in changes:
        changes["slug"] = generate_slug(changes.get("name", category.name))

    for key, value in changes.items():
        setattr(category, key, value)

    _commit_or_conflict(db)
    db.refresh(category)

    logger.info(f"Updated category {category_id}")
    return assemble_category(category)


def remove_category(db: Session, category_id: str) -> None:
    """Soft delete: the category stays stored but drops out of listings."""
    category = db.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    category.is_active = False
    db.commit()
    logger.info(f"Soft deleted category {category_id}")


def hard_delete_category(db: Session, category_id: str) -> None:
    category = db.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    db.delete(category)
    db.commit()
    logger.info(f"Permanently deleted category {category_id}")


def category_suggestions(db: Session, query: str | None, limit: int = 10) -> list[str]:
    """Active category names containing ``query``, deduplicated in order."""
    text = (query or "").strip()
    if len(text) < MIN_SUGGESTION_LENGTH:
        return []

    names = db.scalars(
        select(Category.name)
        .where(Category.is_active == True, contains_text(Category.name, text))
        .order_by(Category.created_at.asc(), Category.id.asc())
        .limit(limit)
    ).all()
    return list(dict.fromkeys(names))[:limit]
