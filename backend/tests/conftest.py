"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Settings are cached on first import; point them at throwaway resources
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["SENTRY_DSN"] = ""

from typing import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from bookclub.core.database import Base, get_db  # noqa: E402
from bookclub.main import app  # noqa: E402
from bookclub.models.book import Book, BookStatus  # noqa: E402
from bookclub.models.user import InviteCode, User  # noqa: E402
from bookclub.schemas.book import CatalogSearchResult, EnglishEdition  # noqa: E402
from bookclub.services.auth_service import create_access_token, get_password_hash  # noqa: E402
from bookclub.services.external_apis import get_open_library_client  # noqa: E402

# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeOpenLibrary:
    """Stands in for OpenLibraryClient so tests never touch the network."""

    description = "A description fetched from Open Library."

    def __init__(self):
        self.description_lookups = []

    async def search_books(self, query: str) -> list[CatalogSearchResult]:
        return [
            CatalogSearchResult(
                open_library_key="/works/OL1W",
                title=f"{query} (result)",
                author="Some Author",
                isbn13="9780000000001",
            )
        ]

    async def get_english_edition(self, work_key: str) -> EnglishEdition | None:
        if work_key == "/works/MISSING":
            return None
        return EnglishEdition(isbn13="9780000000002", isbn10="0000000002", cover_id=42)

    async def find_description(self, work_key: str | None, isbn: str | None) -> str | None:
        self.description_lookups.append((work_key, isbn))
        return self.description if work_key or isbn else None


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def open_library() -> FakeOpenLibrary:
    return FakeOpenLibrary()


@pytest.fixture(scope="function")
def client(db: Session, open_library: FakeOpenLibrary) -> Generator[TestClient, None, None]:
    """Create a test client with database and Open Library overrides."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    async def override_open_library():
        yield open_library

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_open_library_client] = override_open_library

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def make_user(db: Session, name: str, email: str, is_admin: bool = False) -> User:
    user = User(
        name=name,
        email=email,
        hashed_password=get_password_hash("password123"),
        is_admin=is_admin,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def headers_for(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(db: Session) -> User:
    return make_user(db, "Admin", "admin@example.com", is_admin=True)


@pytest.fixture
def member(db: Session) -> User:
    return make_user(db, "Alice", "alice@example.com")


@pytest.fixture
def other_member(db: Session) -> User:
    return make_user(db, "Bob", "bob@example.com")


@pytest.fixture
def admin_headers(admin: User) -> dict:
    return headers_for(admin)


@pytest.fixture
def member_headers(member: User) -> dict:
    return headers_for(member)


@pytest.fixture
def other_headers(other_member: User) -> dict:
    return headers_for(other_member)


@pytest.fixture
def invite_code(db: Session, admin: User) -> InviteCode:
    invite = InviteCode(code="ABCD1234", created_by_id=admin.id)
    db.add(invite)
    db.commit()
    db.refresh(invite)
    return invite


def make_book(
    db: Session,
    title: str,
    added_by: User,
    status: BookStatus = BookStatus.SUGGESTION,
    **kwargs,
) -> Book:
    book = Book(
        title=title,
        author=kwargs.pop("author", "Test Author"),
        status=status,
        added_by_id=added_by.id,
        **kwargs,
    )
    db.add(book)
    db.commit()
    db.refresh(book)
    return book


@pytest.fixture
def books(db: Session, admin: User, member: User) -> dict[str, Book]:
    """One book in each state: a member's suggestion, the current read, a finished one."""
    return {
        "suggestion": make_book(db, "Piranesi", member, author="Susanna Clarke"),
        "current": make_book(
            db,
            "The Left Hand of Darkness",
            admin,
            status=BookStatus.CURRENT,
            author="Ursula K. Le Guin",
        ),
        "completed": make_book(
            db,
            "Station Eleven",
            admin,
            status=BookStatus.COMPLETED,
            author="Emily St. John Mandel",
            synopsis="A travelling symphony after the collapse.",
        ),
    }


@pytest.fixture
def book_factory(db: Session):
    """Add extra books inside a test: ``book_factory("Dune", added_by=admin)``."""
    def factory(title: str, added_by: User, status: BookStatus = BookStatus.SUGGESTION, **kwargs):
        return make_book(db, title, added_by, status=status, **kwargs)

    return factory
