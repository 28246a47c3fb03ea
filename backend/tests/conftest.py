import os

# Configure before anything imports portfolio.core.config
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")  # bcrypt minimum, keeps tests fast
os.environ.setdefault("SESSION_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from portfolio.core.database import Base, get_db
from portfolio.api.dependencies import get_session_store
from portfolio.main import app
from portfolio.models import user as user_model, message as message_model  # noqa: F401
from portfolio.services.session_store import InMemorySessionStore


@pytest.fixture
def engine():
    # One shared in-memory connection so every session sees the same tables
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        # SQLite ignores ON DELETE clauses unless this is on
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def client(engine, store):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_store] = lambda: store
    # Not used as a context manager: the lifespan (MySQL bootstrap, scheduler) stays off
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client, username, email=None, password="pass1234", confirm=None):
    return client.post("/api/register", json={
        "username": username,
        "email": email or f"{username}@example.com",
        "password": password,
        "confirm-password": confirm if confirm is not None else password,
    })
