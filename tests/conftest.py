"""Shared test fixtures — async DB, client, auth helpers, factories.

Reusable across all test modules (permissions, leave, notifications, etc.).
Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test settings before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from leavedesk.auth.schemas import Actor
from leavedesk.common.constants import LeaveStatus, Role
from leavedesk.common.rate_limit import limiter
from leavedesk.config import settings
from leavedesk.database import Base, get_db
from leavedesk.main import create_app

# Import ALL model modules so every table is registered on Base.metadata
import leavedesk.common.audit  # noqa: F401
import leavedesk.employees.models  # noqa: F401
import leavedesk.leave.models  # noqa: F401
import leavedesk.notifications.models  # noqa: F401

from leavedesk.employees.models import Employee
from leavedesk.leave.models import Leave, LeaveBalance, LeaveType


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

def _make_employee(
    *,
    email: Optional[str] = None,
    first_name: str = "Test",
    last_name: str = "User",
    role: Role = Role.employee,
    department: Optional[str] = "Engineering",
    manager_id: Optional[uuid.UUID] = None,
    is_active: bool = True,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        email=email or f"user-{uuid.uuid4().hex[:8]}@leavedesk.test",
        first_name=first_name,
        last_name=last_name,
        role=role,
        department=department,
        manager_id=manager_id,
        is_active=is_active,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


async def _seed_employee(db: AsyncSession, **kwargs) -> Employee:
    emp = Employee(**_make_employee(**kwargs))
    db.add(emp)
    await db.flush()
    return emp


async def _seed_leave_type(
    db: AsyncSession,
    *,
    name: str = "Annual Leave",
    default_allocation_days: int = 20,
    is_active: bool = True,
) -> LeaveType:
    lt = LeaveType(
        id=uuid.uuid4(),
        name=name,
        description=f"{name} allocation",
        default_allocation_days=default_allocation_days,
        is_active=is_active,
    )
    db.add(lt)
    await db.flush()
    return lt


async def _seed_balance(
    db: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    *,
    year: int = 2025,
    total_days: int = 20,
    used_days: int = 0,
) -> LeaveBalance:
    bal = LeaveBalance(
        id=uuid.uuid4(),
        employee_id=employee_id,
        leave_type_id=leave_type_id,
        year=year,
        total_days=total_days,
        used_days=used_days,
    )
    db.add(bal)
    await db.flush()
    return bal


async def _seed_leave(
    db: AsyncSession,
    requester_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    *,
    start_date: date = date(2025, 2, 1),
    end_date: date = date(2025, 2, 5),
    status: Optional[LeaveStatus] = None,
    reason: Optional[str] = "Family trip",
) -> Leave:
    """Insert a leave row directly, bypassing the service."""
    leave = Leave(
        id=uuid.uuid4(),
        requester_id=requester_id,
        leave_type_id=leave_type_id,
        start_date=start_date,
        end_date=end_date,
        days_count=(end_date - start_date).days + 1,
        status=status or LeaveStatus.pending,
        reason=reason,
    )
    db.add(leave)
    await db.flush()
    return leave


def actor_for(employee: Employee) -> Actor:
    return Actor(id=employee.id, role=employee.role)


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    employee_id: uuid.UUID,
    expired: bool = False,
    secret: Optional[str] = None,
) -> str:
    """Generate a JWT like the identity provider would issue it."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
    payload = {
        "sub": str(employee_id),
        "exp": exp,
    }
    return jwt.encode(
        payload, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM,
    )


def auth_headers_for(employee_id: uuid.UUID) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(employee_id)}"}


@pytest.fixture(autouse=True)
def _leave_event_handlers():
    """Service-level tests get the same event wiring as the app."""
    from leavedesk.leave.events import dispatcher
    from leavedesk.notifications.service import handle_leave_event

    dispatcher.subscribe(handle_leave_event)
    yield
