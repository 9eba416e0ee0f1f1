"""Service test fixtures — async DB, seeded defaults and a FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database with the default
      OAuth client and license templates seeded
    - get_db dependency overridden to use test DB session
    - db_manager patched for background tasks that bypass get_db (webhooks)
    - Rate limit budgets are reset, webhook sender and payment gateway are
      fresh per test

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
    - Outbound webhooks go through httpx.MockTransport; `webhook_calls`
      records every request so tests can assert on signatures
    - Principals are minted directly (JWT for users, OAuthToken rows for
      licensees) instead of calling /login and /token in every test
"""

from datetime import timedelta

import httpx
import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

import artiquity.infrastructure.database as db_module
import artiquity.models  # noqa: F401
from artiquity.api.dependencies import (
    get_payment_gateway, get_webhook_sender,
)
from artiquity.config import get_settings
from artiquity.core.timestamps import utc_now
from artiquity.db.base import Base
from artiquity.db.seed import DEFAULT_CLIENT_ROW_ID, seed_defaults
from artiquity.infrastructure.database import get_db, DatabaseSessionManager
from artiquity.infrastructure.payment_gateway import MockPaymentGateway
from artiquity.infrastructure.rate_limiter import limiter
from artiquity.infrastructure.security import create_jwt, hash_secret, new_access_token
from artiquity.infrastructure.webhook_sender import WebhookSender
from artiquity.main import app
from artiquity.models.oauth_token import OAuthToken
from artiquity.models.user import User

@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )
    async with factory() as session:
        settings = get_settings()
        await seed_defaults(
            session, settings.default_client_id, settings.default_client_secret,
        )
    return factory


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def webhook_calls():
    """Requests captured by the mock webhook transport."""
    return []


@pytest.fixture
async def client(test_engine, test_session_factory, webhook_calls):
    """FastAPI test client with DB and outbound dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    def record(request: httpx.Request) -> httpx.Response:
        webhook_calls.append(request)
        return httpx.Response(200, text="received")

    sender = WebhookSender(transport=httpx.MockTransport(record))

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_webhook_sender] = lambda: sender
    app.dependency_overrides[get_payment_gateway] = MockPaymentGateway
    limiter.reset()

    # Patch db_manager for background tasks that use it directly
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def make_user(test_db):
    """Factory: insert a user and return (user, JWT auth headers)."""
    async def _make(
        email: str = "artist@example.com",
        user_type: str = "individual",
        country_code: str | None = "US",
    ) -> tuple[User, dict]:
        user = User(
            email=email,
            password_hash=hash_secret("correct-horse"),
            user_type=user_type,
            country_code=country_code,
        )
        test_db.add(user)
        await test_db.commit()
        settings = get_settings()
        token = create_jwt(
            {
                "sub": user.id, "email": user.email,
                "userType": user.user_type, "countryCode": user.country_code,
            },
            settings.jwt_secret, settings.jwt_algorithm,
        )
        return user, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def make_oauth_headers(test_db):
    """Factory: insert an access token for the default client and return its headers."""
    async def _make(
        user_id: str | None = None,
        scope: str = "read,write,license",
        expires_in: timedelta = timedelta(hours=1),
    ) -> dict:
        token = OAuthToken(
            access_token=new_access_token(),
            client_id=DEFAULT_CLIENT_ROW_ID,
            user_id=user_id,
            scope=scope,
            expires_at=utc_now() + expires_in,
        )
        test_db.add(token)
        await test_db.commit()
        return {"Authorization": f"Bearer {token.access_token}"}

    return _make


@pytest.fixture
async def oauth_headers(make_oauth_headers):
    """Client-credentials style token (no user)."""
    return await make_oauth_headers()
