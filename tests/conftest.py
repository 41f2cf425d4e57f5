"""
pytest Fixtures for Catalog API Tests

This file contains shared fixtures used across all test files.

For database tests, we use:
- session scope for engine (expensive to create)
- function scope for sessions (isolation between tests)

Redis is replaced by FakeCache, a dict-backed CacheBackend that can be
switched into failure mode. Elasticsearch is disabled unless a test
injects a mocked SearchIndex.
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# IMPORTANT: Set environment variables BEFORE importing the app
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["ELASTICSEARCH_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "test"

from collections.abc import Generator
from datetime import date
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from catalog.database import Base, get_db
from catalog.exceptions import AccelerantDegradedError
from catalog.main import create_app
from catalog.models import Author, Book, Review, Sale
from catalog.services.cache import CacheBackend
from catalog.services.coordinator import CacheAsideCoordinator
from catalog.services.elasticsearch import NullSearchIndex
from catalog.services.health import Backend, HealthMonitor


# =============================================================================
# CACHE DOUBLE
# =============================================================================
class FakeCache(CacheBackend):
    """
    In-memory CacheBackend.

    Set ``failing = True`` to make every call raise like a dead Redis.
    """

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.failing = False
        self.gets: list[str] = []
        self.deleted: list[str] = []

    def _check(self) -> None:
        if self.failing:
            raise AccelerantDegradedError("cache", "connection refused")

    def ping(self) -> bool:
        self._check()
        return True

    def get(self, key: str) -> str | None:
        self._check()
        self.gets.append(key)
        return self.data.get(key)

    def set(self, key: str, value: str, ttl: int) -> None:
        self._check()
        self.data[key] = value

    def delete(self, *keys: str) -> None:
        self._check()
        for key in keys:
            self.deleted.append(key)
            self.data.pop(key, None)

    def stats(self) -> dict[str, Any]:
        return {"keys": len(self.data)}


# =============================================================================
# DATABASE FIXTURES
# =============================================================================
@pytest.fixture(scope="session")
def engine():
    """
    Create a SQLite in-memory database engine.

    StaticPool keeps the connection alive for the entire session.
    Without it, SQLite in-memory database would disappear between connections.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    The session is wrapped in a transaction that's rolled back,
    ensuring test isolation without needing to recreate tables.
    """
    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )

    connection = engine.connect()
    transaction = connection.begin()
    session = TestSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


# =============================================================================
# BACKEND FIXTURES
# =============================================================================
@pytest.fixture
def fake_cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def health(fake_cache: FakeCache) -> HealthMonitor:
    """Health monitor with the fake cache already connected."""
    monitor = HealthMonitor(fake_cache, NullSearchIndex(), retry_interval=30.0)
    monitor.mark_available(Backend.CACHE)
    return monitor


@pytest.fixture
def coordinator(fake_cache: FakeCache, health: HealthMonitor) -> CacheAsideCoordinator:
    return CacheAsideCoordinator(fake_cache, health, ttl=3600)


@pytest.fixture(scope="function")
def client(db_session: Session, fake_cache: FakeCache) -> Generator[TestClient, None, None]:
    """
    Create a test client with the test database and the fake cache.

    We override the get_db dependency to use our test session.
    """
    app = create_app(cache_backend=fake_cache, search_index=NullSearchIndex())

    def override_get_db():
        """Provide test database session instead of real one."""
        try:
            yield db_session
        finally:
            pass  # Session cleanup handled by db_session fixture

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================
@pytest.fixture
def sample_author(db_session: Session) -> Author:
    """Create a sample author for testing."""
    author = Author(
        name="Ursula K. Le Guin",
        date_of_birth=date(1929, 10, 21),
        country_of_origin="United States",
        description="American author of speculative fiction.",
    )
    db_session.add(author)
    db_session.commit()
    db_session.refresh(author)
    return author


@pytest.fixture
def sample_book(db_session: Session, sample_author: Author) -> Book:
    """Create a sample book by the sample author."""
    book = Book(
        name="A Wizard of Earthsea",
        summary="A young mage learns the true names of things.",
        publication_date=date(1968, 11, 1),
        author_id=sample_author.id,
    )
    db_session.add(book)
    db_session.commit()
    db_session.refresh(book)
    return book


@pytest.fixture
def sample_review(db_session: Session, sample_book: Book) -> Review:
    """Create a sample review of the sample book."""
    review = Review(
        book_id=sample_book.id,
        review="A quiet, wise book about names and power.",
        score=4,
    )
    db_session.add(review)
    db_session.commit()
    db_session.refresh(review)
    return review


@pytest.fixture
def sample_sale(db_session: Session, sample_book: Book) -> Sale:
    """Create a sample ledger line for the sample book."""
    sale = Sale(book_id=sample_book.id, year=1968, sales=1200)
    db_session.add(sale)
    db_session.commit()
    db_session.refresh(sale)
    return sale


@pytest.fixture
def make_book(db_session: Session, sample_author: Author):
    """Factory fixture: create a book with the given name and publication year."""

    def _make_book(name: str, year: int = 2000, summary: str = "A book.") -> Book:
        book = Book(
            name=name,
            summary=summary,
            publication_date=date(year, 1, 1),
            author_id=sample_author.id,
        )
        db_session.add(book)
        db_session.commit()
        db_session.refresh(book)
        return book

    return _make_book
