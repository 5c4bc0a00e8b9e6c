# tests/conftest.py
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-complaint-desk-suite")
os.environ.setdefault("DATABASE_URL_ASYNC", "sqlite+aiosqlite://")
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import fakeredis
import pytest
from typing import AsyncGenerator, Awaitable, Callable
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy import event
from sqlmodel import SQLModel

from app.main import app
from app.core.auth import create_access_token, generate_passwd_hash
from app.core.rate_limit import FixedWindowRateLimiter
from app.core.config import settings
from app.db.models import AccountRole, AdminUser
from app.db.session import get_session, _enable_sqlite_foreign_keys

# Use an in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite+aiosqlite://"

TEST_PASSWORD = "correct-horse-battery"
_PASSWORD_HASH = generate_passwd_hash(TEST_PASSWORD)


@pytest.fixture(scope="function")
async def session_maker() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def redis_client() -> fakeredis.FakeAsyncRedis:
    # A private server per test keeps rate limit counters isolated
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture(scope="function")
async def client(session_maker, db_session: AsyncSession, redis_client) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.state.rate_limiter = FixedWindowRateLimiter(
        redis_client,
        limit=settings.RATE_LIMIT_REQUESTS,
        period=settings.RATE_LIMIT_WINDOW_SECONDS,
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def make_account(db_session: AsyncSession) -> Callable[..., Awaitable[AdminUser]]:
    async def _make_account(
        email: str = "admin@example.com",
        name: str = "Alice Admin",
        role: AccountRole = AccountRole.ADMIN,
        is_active: bool = True,
    ) -> AdminUser:
        account = AdminUser(
            email=email,
            password_hash=_PASSWORD_HASH,
            name=name,
            role=role,
            is_active=is_active,
        )
        db_session.add(account)
        await db_session.commit()
        await db_session.refresh(account)
        return account

    return _make_account


@pytest.fixture
def account_password() -> str:
    return TEST_PASSWORD


@pytest.fixture
async def admin_account(make_account) -> AdminUser:
    return await make_account()


@pytest.fixture
async def agent_account(make_account) -> AdminUser:
    return await make_account(email="agent@example.com", name="Bob Agent", role=AccountRole.AGENT)


@pytest.fixture
def admin_headers(admin_account: AdminUser) -> dict:
    token = create_access_token(account=admin_account)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def agent_headers(agent_account: AdminUser) -> dict:
    token = create_access_token(account=agent_account)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def complaint_payload() -> dict:
    return {
        "name": "Ann",
        "email": "ann@x.com",
        "complaint": "This is a long enough complaint body.",
    }


@pytest.fixture
def submit_complaint(client: AsyncClient, complaint_payload: dict):
    async def _submit(**overrides) -> dict:
        response = await client.post("/api/complaints", json={**complaint_payload, **overrides})
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _submit
