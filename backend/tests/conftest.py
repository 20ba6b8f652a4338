"""
Pytest configuration and fixtures.
Provides an in-memory database per test, user fixtures, session tokens and an
HTTP client wired to the test database.
"""
import os

# Must be set before the application modules read their configuration
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SESSION_SECRET_KEY", "test_secret_key_for_testing_purposes_only_very_long_and_secure")
os.environ.setdefault("ENABLE_SECURITY_HEADERS", "true")

import pytest
from datetime import datetime, timezone, timedelta
from typing import AsyncGenerator
from unittest.mock import Mock
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from services.db import Base, get_db
from models.user import User
from models.photo import Photo, Comment
from dao.user_dao import UserDAO
from services.auth import create_session_token
from services.file_storage import storage

# Test database URL (in-memory SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

@pytest.fixture
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()

@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session
        await session.rollback()

async def _create_user(db_session: AsyncSession, first_name: str, last_name: str, **profile) -> User:
    return await UserDAO(db_session).create_user(
        User(first_name=first_name, last_name=last_name, **profile)
    )

@pytest.fixture
async def alice(db_session: AsyncSession) -> User:
    return await _create_user(
        db_session, "Alice", "Archer",
        location="Lisbon", description="Street photographer", occupation="Designer"
    )

@pytest.fixture
async def bob(db_session: AsyncSession) -> User:
    return await _create_user(
        db_session, "Bob", "Baker",
        location="Oslo", description="Mostly fjords", occupation="Engineer"
    )

@pytest.fixture
def make_user(db_session: AsyncSession):
    async def _make_user(first_name: str, last_name: str, **profile) -> User:
        return await _create_user(db_session, first_name, last_name, **profile)
    return _make_user

@pytest.fixture
def make_photo(db_session: AsyncSession):
    """Insert a photo with an explicit timestamp."""
    counter = {"n": 0}

    async def _make_photo(owner: User, date_time: datetime = None, file_name: str = None) -> Photo:
        counter["n"] += 1
        photo = Photo(
            user_id=owner.id,
            file_name=file_name or f"1700000000000-{counter['n']}.jpg",
            date_time=date_time or datetime.now(timezone.utc)
        )
        db_session.add(photo)
        await db_session.commit()
        await db_session.refresh(photo)
        return photo
    return _make_photo

@pytest.fixture
def make_comment(db_session: AsyncSession):
    """Insert a comment directly, bypassing validation."""
    async def _make_comment(photo: Photo, author_id: str, text: str = "nice!") -> Comment:
        comment = Comment(
            photo_id=photo.id,
            user_id=author_id,
            comment=text,
            date_time=datetime.now(timezone.utc)
        )
        db_session.add(comment)
        await db_session.commit()
        await db_session.refresh(comment)
        return comment
    return _make_comment

@pytest.fixture
def auth_headers():
    """Bearer header carrying a session token for a user."""
    def _headers(user: User, expires_delta: timedelta = None) -> dict:
        return {"Authorization": f"Bearer {create_session_token(user.id, expires_delta)}"}
    return _headers

@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Point photo storage at a per-test directory that does not exist yet."""
    target = tmp_path / "public" / "images"
    monkeypatch.setattr(storage, "base_path", target)
    return target

@pytest.fixture
async def client(db_session: AsyncSession, upload_dir):
    """HTTP client for the app, sharing the test database session."""
    from main import app

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

@pytest.fixture
def mock_request():
    """Create a mock FastAPI request for testing."""
    request = Mock()
    request.url.path = "/api/test"
    request.method = "DELETE"
    request.headers = {"user-agent": "Test Client/1.0"}
    request.client.host = "127.0.0.1"
    request.path_params = {}

    return request

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as HTTP-level integration tests"
    )
