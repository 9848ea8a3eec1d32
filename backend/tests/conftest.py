"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator
from typing import Any

# Set test environment before importing app
os.environ["ENVIRONMENT"] = "test"
os.environ["CACHE_BACKEND"] = "memory"
os.environ["EMAIL_BACKEND"] = "console"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from estatehub.api.deps import get_context
from estatehub.config import Settings, settings
from estatehub.context import AppContext
from estatehub.database import get_session
from estatehub.main import app
from estatehub.models import (
    Account,
    AccountRole,
    Furnishing,
    Property,
    PropertyStatus,
    PropertyType,
)
from estatehub.services.auth import hash_password
from estatehub.services.email import EmailBackend
from estatehub.services.notifications import NotificationDispatcher
from estatehub.services.token_store import MemoryTokenStore

PASSWORD = "password123"


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingEmailBackend(EmailBackend):
    """Keeps sent messages in memory. ``deliver=False`` simulates a failing relay."""

    def __init__(self, deliver: bool = True):
        self.deliver = deliver
        self.sent: list[dict[str, Any]] = []

    async def send(self, to: str, subject: str, html: str, text: str | None = None) -> bool:
        self.sent.append({"to": to, "subject": subject, "html": html, "text": text})
        return self.deliver


class RecordingDispatcher(NotificationDispatcher):
    """Dispatcher that remembers the last verification token and OTP per email."""

    def __init__(self, backend: RecordingEmailBackend, config: Settings = settings):
        super().__init__(backend=backend, config=config)
        self.verification_tokens: dict[str, str] = {}
        self.otps: dict[str, str] = {}

    async def send_verification(self, to: str, name: str, token: str) -> bool:
        self.verification_tokens[to] = token
        return await super().send_verification(to, name, token)

    async def send_otp(self, to: str, name: str, otp: str, *, resend: bool = False) -> bool:
        self.otps[to] = otp
        return await super().send_otp(to, name, otp, resend=resend)


@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        settings.database_url_test,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with factory() as session:
        yield session


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def token_store(clock: FakeClock) -> MemoryTokenStore:
    return MemoryTokenStore(clock=clock)


@pytest.fixture
def email_backend() -> RecordingEmailBackend:
    return RecordingEmailBackend()


@pytest.fixture
def notifier(email_backend: RecordingEmailBackend) -> RecordingDispatcher:
    return RecordingDispatcher(email_backend)


@pytest.fixture
def ctx(token_store: MemoryTokenStore, notifier: RecordingDispatcher) -> AppContext:
    return AppContext.create(settings, token_store, notifier)


@pytest.fixture
async def client(session: AsyncSession, ctx: AppContext) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client.

    Uses https so the Secure session cookies are sent back by the cookie jar.
    """

    async def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_context] = lambda: ctx

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="https://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


async def make_account(
    session: AsyncSession,
    email: str,
    role: AccountRole = AccountRole.USER,
    approved: bool = True,
    **kwargs: Any,
) -> Account:
    account = Account(
        name=kwargs.pop("name", email.split("@")[0].title()),
        email=email,
        password_hash=hash_password(PASSWORD, rounds=4),
        contact=kwargs.pop("contact", "9876543210"),
        role=role,
        is_approved=approved,
        **kwargs,
    )
    session.add(account)
    await session.commit()
    return account


async def make_property(session: AsyncSession, agent: Account, **kwargs: Any) -> Property:
    values: dict[str, Any] = {
        "title": "Sunny two bedroom flat",
        "description": "Bright flat close to the park with a large balcony.",
        "price": 250000.0,
        "property_type": PropertyType.SALE,
        "category": "apartment",
        "address": "12 Park Street",
        "city": "Pune",
        "state": "Maharashtra",
        "country": "India",
        "pincode": "411001",
        "bedrooms": 2,
        "bathrooms": 1,
        "area": 950.0,
        "furnishing": Furnishing.SEMI_FURNISHED,
        "status": PropertyStatus.AVAILABLE,
    }
    values.update(kwargs)
    prop = Property(agent_id=agent.id, **values)
    session.add(prop)
    await session.commit()
    return prop


@pytest.fixture
async def user(session: AsyncSession) -> Account:
    return await make_account(session, "buyer@example.com")


@pytest.fixture
async def admin(session: AsyncSession) -> Account:
    return await make_account(session, "admin@example.com", AccountRole.ADMIN)


@pytest.fixture
async def agent(session: AsyncSession) -> Account:
    """An approved agent."""
    return await make_account(
        session, "agent@example.com", AccountRole.AGENT, agency_name="Acme Realty"
    )


@pytest.fixture
async def pending_agent(session: AsyncSession) -> Account:
    return await make_account(
        session, "newagent@example.com", AccountRole.AGENT, approved=False, agency_name="Fresh Homes"
    )


@pytest.fixture
async def listing(session: AsyncSession, agent: Account) -> Property:
    """A pending listing owned by ``agent``."""
    return await make_property(session, agent)


def bearer(ctx: AppContext, account: Account) -> dict[str, str]:
    return {"Authorization": f"Bearer {ctx.sessions.create_access_token(account.id)}"}


@pytest.fixture
def auth_headers(ctx: AppContext, user: Account) -> dict[str, str]:
    return bearer(ctx, user)


@pytest.fixture
def admin_headers(ctx: AppContext, admin: Account) -> dict[str, str]:
    return bearer(ctx, admin)


@pytest.fixture
def agent_headers(ctx: AppContext, agent: Account) -> dict[str, str]:
    return bearer(ctx, agent)


# Helper to make authenticated requests
class AuthenticatedClient:
    """Wrapper for AsyncClient with authentication."""

    def __init__(self, client: AsyncClient, headers: dict[str, str]):
        self.client = client
        self.headers = headers

    async def get(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.get(url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.post(url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.put(url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.delete(url, **kwargs)


@pytest.fixture
def authenticated_client(client: AsyncClient, auth_headers: dict[str, str]) -> AuthenticatedClient:
    return AuthenticatedClient(client, auth_headers)


@pytest.fixture
def admin_client(client: AsyncClient, admin_headers: dict[str, str]) -> AuthenticatedClient:
    return AuthenticatedClient(client, admin_headers)


@pytest.fixture
def agent_client(client: AsyncClient, agent_headers: dict[str, str]) -> AuthenticatedClient:
    return AuthenticatedClient(client, agent_headers)
