"""Pytest configuration for backend tests."""
import sys
import os
from pathlib import Path
from datetime import timedelta
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Never touch a real database from tests
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("ENVIRONMENT", "test")

from fastapi.testclient import TestClient

from app.database import Base, get_db
from app.core.security import create_access_token, get_password_hash
from app.models import User, ProfileVisibility
from app.services.catalog_gateway import CatalogBook, CatalogUnavailableError, get_catalog_gateway
from app.main import app


class FakeCatalogGateway:
    """Stands in for the Google Books gateway. Results are keyed by query string."""

    def __init__(self, results=None, failing=()):
        self.results = results or {}
        self.failing = set(failing)
        self.calls = []

    def search(self, query, max_results=10, order_by=None):
        self.calls.append({"query": query, "max_results": max_results, "order_by": order_by})
        if query in self.failing:
            raise CatalogUnavailableError(f"catalog down for {query}")
        return list(self.results.get(query, []))


@pytest.fixture
def catalog_book():
    """Factory for CatalogBook results."""
    def _catalog_book(title, author="Someone", categories=None, description="A book.", google_id=None):
        return CatalogBook(
            google_id=google_id or f"g-{title.lower().replace(' ', '-')}",
            title=title,
            author=author,
            description=description,
            page_count=200,
            categories=list(categories or []),
        )

    return _catalog_book


@pytest.fixture(scope="function")
def engine():
    """
    Fresh in-memory SQLite database per test.

    StaticPool keeps a single connection so every session sees the same data.
    """
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def db(engine) -> Session:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(db: Session):
    """TestClient whose requests share the test's database session."""
    def _get_test_db():
        yield db

    app.dependency_overrides[get_db] = _get_test_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db: Session):
    """Factory for persisted users."""
    counter = {"n": 0}

    def _make_user(
        email=None,
        name="Test Reader",
        password="password123",
        visibility=ProfileVisibility.PUBLIC.value,
        is_admin=False,
        **fields,
    ) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"reader{counter['n']}@example.com",
            name=name,
            password_hash=get_password_hash(password) if password else None,
            profile_visibility=visibility,
            is_admin=is_admin,
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def test_user(make_user) -> User:
    return make_user(email="test@example.com", name="Test User")


@pytest.fixture
def auth_headers():
    """Build a Bearer header carrying a real access token for a user."""
    def _headers(user: User, expires_delta: timedelta = None) -> dict:
        token = create_access_token({"sub": str(user.id)}, expires_delta=expires_delta)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def fake_gateway():
    """Install a fake catalog gateway; configure it through the returned object."""
    gateway = FakeCatalogGateway()
    app.dependency_overrides[get_catalog_gateway] = lambda: gateway
    yield gateway
    app.dependency_overrides.pop(get_catalog_gateway, None)
