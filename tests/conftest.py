"""Shared test fixtures: async DB, client, auth helpers, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from leavedesk.common.constants import UserRole
from leavedesk.config import settings
from leavedesk.database import Base, get_db
from leavedesk.main import create_app

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
import leavedesk.auth.models  # noqa: F401
import leavedesk.common.audit  # noqa: F401
import leavedesk.core_hr.models  # noqa: F401
import leavedesk.holidays.models  # noqa: F401
import leavedesk.leave.models  # noqa: F401
import leavedesk.notifications.models  # noqa: F401
import leavedesk.organization.models  # noqa: F401

from leavedesk.auth.models import RoleAssignment
from leavedesk.core_hr.models import Department, Employee
from leavedesk.leave.models import LeaveBalance, LeaveType

# ── SQLite compat: compile PG-specific types ────────────────────────

from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _jsonb_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine.sync_engine, "connect")
def _register_sqlite_functions(dbapi_conn, connection_record):
    """Register NOW() and uuid_generate_v4() as SQLite custom functions."""
    dbapi_conn.create_function(
        "NOW", 0, lambda: datetime.now(timezone.utc).isoformat(),
    )
    dbapi_conn.create_function(
        "uuid_generate_v4", 0, lambda: str(uuid.uuid4()),
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
    """Clear slowapi's in-memory counters so limits never leak across tests."""
    from leavedesk.common.rate_limit import limiter

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


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(employee_id: uuid.UUID, expired: bool = False) -> str:
    """Mint a bearer token the way the identity provider does."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
    payload = {"sub": str(employee_id), "exp": exp}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def auth_headers(employee: Employee) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(employee.id)}"}


# ── Model factories ─────────────────────────────────────────────────
# Each factory commits so API requests (separate sessions) see the row.


async def make_department(db: AsyncSession, name: str = "Engineering") -> Department:
    dept = Department(id=uuid.uuid4(), name=name)
    db.add(dept)
    await db.commit()
    return dept


async def make_employee(
    db: AsyncSession,
    *,
    role: UserRole = UserRole.employee,
    first_name: str = "Test",
    last_name: str = "User",
    email: Optional[str] = None,
    department_id: Optional[uuid.UUID] = None,
    manager_id: Optional[uuid.UUID] = None,
    state: Optional[str] = None,
    is_active: bool = True,
    date_of_joining: date = date(2024, 1, 15),
) -> Employee:
    """Insert an employee; non-employee roles also get a ``user_roles`` row."""
    code = f"EMP-{uuid.uuid4().hex[:6].upper()}"
    emp = Employee(
        id=uuid.uuid4(),
        employee_code=code,
        first_name=first_name,
        last_name=last_name,
        email=email or f"{code.lower()}@example.com",
        department_id=department_id,
        reporting_manager_id=manager_id,
        state=state,
        date_of_joining=date_of_joining,
        is_active=is_active,
    )
    db.add(emp)
    await db.flush()
    if role != UserRole.employee:
        db.add(RoleAssignment(employee_id=emp.id, role=role))
    await db.commit()
    return emp


async def make_leave_type(
    db: AsyncSession,
    *,
    code: str = "CL",
    name: str = "Casual Leave",
    default_days: Decimal = Decimal("12"),
    is_paid: bool = True,
    is_active: bool = True,
) -> LeaveType:
    lt = LeaveType(
        id=uuid.uuid4(),
        code=code,
        name=name,
        default_days=default_days,
        is_paid=is_paid,
        is_active=is_active,
    )
    db.add(lt)
    await db.commit()
    return lt


async def make_balance(
    db: AsyncSession,
    employee: Employee,
    leave_type: LeaveType,
    *,
    year: int = 2025,
    entitled: Decimal = Decimal("12"),
    used: Decimal = Decimal("0"),
    carried_forward: Decimal = Decimal("0"),
    adjusted: Decimal = Decimal("0"),
) -> LeaveBalance:
    balance = LeaveBalance(
        id=uuid.uuid4(),
        employee_id=employee.id,
        leave_type_id=leave_type.id,
        year=year,
        entitled_days=entitled,
        used_days=used,
        carried_forward_days=carried_forward,
        adjusted_days=adjusted,
    )
    db.add(balance)
    await db.commit()
    return balance
