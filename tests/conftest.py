import os
from dataclasses import dataclass

# Settings are read at import time; point them at test values before importing the app.
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ADMIN_PASSWORD"] = "seed-password-123"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import cv_backend.models  # noqa: F401
from cv_backend.core.rate_limiter import login_limiter
from cv_backend.database import Base, get_db
from cv_backend.dependencies import get_current_user, get_current_username, require_rotated_password
from cv_backend.main import app

# StaticPool keeps every session on the same in-memory database
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@dataclass
class StubUser:
    id: str = "user-1"
    username: str = "admin"
    first_login: bool = False
    login_count: int = 1
    password_hash: str = "hashed-password"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def stub_user() -> StubUser:
    return StubUser()


def _override_get_db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def anon_client(db):
    """Client backed by the test database with no authentication overrides."""
    login_limiter.reset()
    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def client(db, stub_user: StubUser):
    """Client backed by the test database, authenticated as stub_user."""
    login_limiter.reset()
    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_current_username] = lambda: stub_user.username
    app.dependency_overrides[get_current_user] = lambda: stub_user
    app.dependency_overrides[require_rotated_password] = lambda: stub_user
    yield TestClient(app)
    app.dependency_overrides.clear()
