"""Request-scoped database session for the API routers."""

from collections.abc import Generator

from sqlalchemy.orm import Session

from inventory_api.db.session import get_db


def get_session() -> Generator[Session, None, None]:
    """Session committed after the handler returns; tests override this seam."""
    yield from get_db()
