"""
Database engine and unit-of-work management.
"""
from typing import Iterator, Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from blog.core.config import settings
from blog.db.base import metadata
from blog.db.store import EntityStore


def build_engine(url: Optional[str] = None, **kwargs) -> Engine:
    """Create an engine for ``url`` (defaults to the configured database)."""
    url = url or settings.DATABASE_URL
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_pre_ping", True)
        kwargs.setdefault("pool_recycle", 3600)
    return create_engine(url, echo=settings.DB_ECHO, **kwargs)


engine = build_engine()


def get_store() -> Iterator[EntityStore]:
    """Dependency yielding one EntityStore per request.

    Services commit explicitly; anything left uncommitted is rolled back
    when the connection closes.
    """
    with engine.connect() as connection:
        store = EntityStore(connection)
        try:
            yield store
        finally:
            store.close()


def init_db(bind: Optional[Engine] = None) -> None:
    """Initialize database tables."""
    # Register every table on the metadata
    import blog.models  # noqa: F401
    metadata.create_all(bind=bind or engine)
