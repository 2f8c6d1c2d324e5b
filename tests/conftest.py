"""
Pytest configuration and fixtures for tests.
Provides reusable test fixtures for database, users, and data setup.
"""
import os

# Settings are read at import time, so the environment must be in place
# before anything under app/ is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-access-secret-0123456789abcdef"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret-0123456789abcdef"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"
os.environ["ENVIRONMENT"] = "test"

import pytest
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

from app.main import app
from app.core.database import get_db
from app.core.security import TokenService, hash_password
from app.dependencies import get_current_user
from app.models.base import Base


# In-memory SQLite shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    TestSessionLocal = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()


@pytest.fixture(scope="session")
def password_hash() -> str:
    """Bcrypt hash of TEST_PASSWORD, computed once per run."""
    return hash_password(TEST_PASSWORD)


async def _create_user(db_session: AsyncSession, password_hash: str, **fields):
    from app.models.user import User

    user = User(password_hash=password_hash, **fields)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def make_user(db_session: AsyncSession, password_hash):
    """Factory for extra users: ``await make_user(email=..., who_can_message=...)``."""
    async def factory(**fields):
        return await _create_user(db_session, password_hash, **fields)
    return factory


@pytest.fixture
async def user_a(db_session: AsyncSession, password_hash):
    """Create the primary test user (the authenticated user in API tests)."""
    return await _create_user(
        db_session,
        password_hash,
        email="alice@example.com",
        username="alice",
        first_name="Alice",
        last_name="Archer",
    )


@pytest.fixture
async def user_b(db_session: AsyncSession, password_hash):
    """Create a second test user."""
    return await _create_user(
        db_session,
        password_hash,
        email="bob@example.com",
        username="bob",
        first_name="Bob",
    )


@pytest.fixture
async def user_c(db_session: AsyncSession, password_hash):
    """Create a third user who is not part of the default conversation."""
    return await _create_user(
        db_session,
        password_hash,
        email="carol@example.com",
        username="carol",
    )


@pytest.fixture
async def conversation(db_session: AsyncSession, user_a, user_b):
    """Create a conversation between user_a and user_b."""
    from app.models.conversation import Conversation, order_user_ids

    user1_id, user2_id = order_user_ids(user_a.id, user_b.id)
    conv = Conversation(user1_id=user1_id, user2_id=user2_id)
    db_session.add(conv)
    await db_session.commit()
    await db_session.refresh(conv)

    return conv


@pytest.fixture
async def message_from_b(db_session: AsyncSession, conversation, user_b):
    """Create an unread text message from user_b to user_a."""
    from app.models.message import Message, MessageType

    message = Message(
        conversation_id=conversation.id,
        sender_id=user_b.id,
        message_type=MessageType.TEXT,
        content="Hey Alice",
        attachments=[],
    )
    db_session.add(message)
    await db_session.commit()
    await db_session.refresh(message)

    return message


@pytest.fixture
def as_user():
    """Switch the authenticated user for requests made through ``client``."""
    def switch(user):
        async def override_get_current_user():
            return user
        app.dependency_overrides[get_current_user] = override_get_current_user
    return switch


@pytest.fixture(scope="function")
async def client(db_session: AsyncSession, user_a, as_user) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client authenticated as user_a."""

    async def override_get_db():
        yield db_session

    # Override dependencies
    app.dependency_overrides[get_db] = override_get_db
    as_user(user_a)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    # Clear overrides after test
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def unauth_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client WITHOUT authentication overrides (real token flow)."""

    async def override_get_db():
        yield db_session

    # Only override database, not authentication
    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    # Clear overrides after test
    app.dependency_overrides.clear()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService()


@pytest.fixture
def auth_headers(token_service, user_a):
    """Bearer header carrying a real access token for user_a."""
    token = token_service.create_access_token(user_a.id, user_a.email, user_a.username)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_password() -> str:
    """Plain text password of every fixture user."""
    return TEST_PASSWORD
