import os

# Settings are read at import time, so the environment must be ready first
os.environ["JWT_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "development"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app

ALICE = {"username": "alice", "email": "a@b.com", "password": "Abc123!", "shopName": "Al's"}


@pytest.fixture()
def engine():
    """Fresh in-memory database per test; StaticPool keeps a single shared connection."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def new_client(client):
    """Factory for extra clients with their own cookie jar (same database)."""
    opened = []

    def _make():
        c = TestClient(app)
        opened.append(c)
        return c

    yield _make
    for c in opened:
        c.close()


@pytest.fixture()
def register_user():
    def _register(c, **overrides):
        payload = dict(ALICE)
        payload.update(overrides)
        return c.post("/auth/register", json=payload)

    return _register


@pytest.fixture()
def alice(client, register_user):
    """Client already holding alice's session cookies."""
    r = register_user(client)
    assert r.status_code == 201, r.text
    return client
