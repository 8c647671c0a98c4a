"""
Pytest Configuration and Fixtures

Shared fixtures: an in-memory SQLite database per test, record factories,
bearer-token helpers and an HTTP client wired to the app.
"""

import os

# Fast hashing for tests; must be set before atmachetana.config is imported.
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "local")

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from datetime import UTC, datetime  # noqa: E402
from typing import Any  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import configure_mappers  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from atmachetana.auth import Principal, issue_token  # noqa: E402
from atmachetana.core.database import get_db  # noqa: E402
from atmachetana.core.enums import Role  # noqa: E402
from atmachetana.core.models import Appointment, Base, Staff, Student  # noqa: E402
from atmachetana.core.security import get_password_hash  # noqa: E402
from atmachetana.main import app  # noqa: E402
from atmachetana.notifications import EmailClient, SentReceipt, get_email_client  # noqa: E402

# Ensure all mappers are configured
configure_mappers()

TEST_PASSWORD = "secret123"  # pragma: allowlist secret


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite shared by every connection of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for testing."""
    factory = async_sessionmaker(async_engine, expire_on_commit=False, autoflush=False)
    async with factory() as session:
        yield session


# ============================================================================
# Factories
# ============================================================================


@pytest.fixture
def make_student(db_session: AsyncSession) -> Callable[..., Awaitable[Student]]:
    """Factory for verified students with a known password."""
    counter = {"n": 0}

    async def _make(**overrides: Any) -> Student:
        counter["n"] += 1
        n = counter["n"]
        fields: dict[str, Any] = {
            "first_name": f"Student{n}",
            "last_name": "Test",
            "email": f"student{n}@example.com",
            "hashed_password": get_password_hash(TEST_PASSWORD),
            "is_verified": True,
            "subjects": [],
            "interests": [],
        }
        fields.update(overrides)
        student = Student(**fields)
        db_session.add(student)
        await db_session.commit()
        return student

    return _make


@pytest.fixture
def make_staff(db_session: AsyncSession) -> Callable[..., Awaitable[Staff]]:
    """Factory for staff accounts (counsellor by default)."""
    counter = {"n": 0}

    async def _make(**overrides: Any) -> Staff:
        counter["n"] += 1
        n = counter["n"]
        fields: dict[str, Any] = {
            "name": f"Staff {n}",
            "email": f"staff{n}@example.com",
            "hashed_password": get_password_hash(TEST_PASSWORD),
            "role": Role.COUNSELLOR.value,
            "is_active": True,
        }
        fields.update(overrides)
        staff = Staff(**fields)
        db_session.add(staff)
        await db_session.commit()
        return staff

    return _make


@pytest.fixture
def make_appointment(db_session: AsyncSession) -> Callable[..., Awaitable[Appointment]]:
    """Factory for appointments; ``student_id`` is required."""

    async def _make(**overrides: Any) -> Appointment:
        fields: dict[str, Any] = {
            "requested_date": datetime(2024, 3, 10, 10, 0),
            "requested_time": "10:00 AM",
            "type": "Academic Counseling",
            "priority": "Medium",
            "status": "Pending",
            "action_items": [],
        }
        fields.update(overrides)
        appointment = Appointment(**fields)
        db_session.add(appointment)
        await db_session.commit()
        return appointment

    return _make


@pytest.fixture
async def student(make_student: Callable[..., Awaitable[Student]]) -> Student:
    return await make_student()


@pytest.fixture
async def counsellor(make_staff: Callable[..., Awaitable[Staff]]) -> Staff:
    return await make_staff()


@pytest.fixture
async def admin(make_staff: Callable[..., Awaitable[Staff]]) -> Staff:
    return await make_staff(role=Role.ADMIN.value, name="Admin", email="admin@example.com")


# ============================================================================
# Principals & tokens
# ============================================================================


def principal_for(account: Student | Staff) -> Principal:
    if isinstance(account, Student):
        return Principal.from_student(account)
    return Principal.from_staff(account)


@pytest.fixture
def auth_headers() -> Callable[[Student | Staff], dict[str, str]]:
    """Build the ``Authorization`` header for an account."""

    def _headers(account: Student | Staff) -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_token(principal_for(account))}"}

    return _headers


@pytest.fixture
def principal() -> Callable[[Student | Staff], Principal]:
    return principal_for


# ============================================================================
# HTTP client
# ============================================================================


@pytest.fixture
def email_client() -> AsyncMock:
    """Email client double; every send succeeds unless a test says otherwise."""
    client = AsyncMock(spec=EmailClient)

    async def fake_send(*, to: str, subject: str, html: str) -> SentReceipt:
        return SentReceipt(
            message_id="<test@example.com>", recipient=to, sent_at=datetime.now(UTC)
        )

    client.send.side_effect = fake_send
    client.verify.return_value = True
    return client


@pytest.fixture
async def client(
    db_session: AsyncSession, email_client: AsyncMock
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database and email dependency overrides."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_client] = lambda: email_client
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
