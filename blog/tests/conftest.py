"""
Shared fixtures: an isolated in-memory database per test.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.pool import StaticPool

from blog.api.dependencies import get_sessions
from blog.core.config import settings
from blog.core.sessions import SessionIdentity
from blog.db.session import get_store, init_db
from blog.db.store import EntityStore
from blog.main import app

# Cheap hashes keep the suite fast
settings.BCRYPT_ROUNDS = 4


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def store(engine):
    with engine.connect() as connection:
        store = EntityStore(connection)
        yield store
        store.close()


@pytest.fixture()
def sessions():
    return SessionIdentity()


@pytest.fixture()
def statements(engine):
    """SQL strings sent to the database while the test runs."""
    captured = []

    def capture(conn, cursor, statement, parameters, context, executemany):
        captured.append(statement)

    event.listen(engine, "before_cursor_execute", capture)
    yield captured
    event.remove(engine, "before_cursor_execute", capture)


@pytest.fixture()
def client(engine, sessions):
    def override_get_store():
        with engine.connect() as connection:
            store = EntityStore(connection)
            try:
                yield store
            finally:
                store.close()

    app.dependency_overrides[get_store] = override_get_store
    app.dependency_overrides[get_sessions] = lambda: sessions
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
