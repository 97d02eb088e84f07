import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import StaticPool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from huddle.config import settings
from huddle.database import get_db
from huddle.dependencies import get_current_user
from huddle.main import app
from huddle.models import Base
from huddle.models.profile import Profile

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


async def _create_profile(
    db: AsyncSession, username: str, full_name: str, bio: str = ""
) -> Profile:
    profile = Profile(
        id=uuid.uuid4(),
        username=username,
        full_name=full_name,
        bio=bio,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    return profile


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
async def alice(db_session: AsyncSession) -> Profile:
    return await _create_profile(db_session, "alice", "Alice Liddell", "Curiouser and curiouser")


@pytest.fixture
async def bob(db_session: AsyncSession) -> Profile:
    return await _create_profile(db_session, "bob", "Bob Builder")


@pytest.fixture
async def carol(db_session: AsyncSession) -> Profile:
    return await _create_profile(db_session, "carol", "Carol Danvers")


@pytest.fixture
def login_as():
    """Switch the authenticated profile for subsequent client requests."""

    def _login(profile: Profile) -> None:
        async def override_get_current_user():
            return profile

        app.dependency_overrides[get_current_user] = override_get_current_user

    return _login


@pytest.fixture
async def anon_client(db_engine) -> AsyncGenerator[AsyncClient, None]:
    """Client with a test database but real bearer-token authentication."""
    session_factory = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def client(anon_client: AsyncClient, alice: Profile, login_as) -> AsyncClient:
    login_as(alice)
    return anon_client


@pytest.fixture
def token_for():
    """Mint an access token the way the auth provider would."""

    def _token(profile: Profile, token_type: str = "access") -> str:
        return jwt.encode(
            {"sub": str(profile.id), "type": token_type},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )

    return _token
