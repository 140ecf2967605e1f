from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from timeoff_admin.db import build_engine, get_session
from timeoff_admin.main import app
from timeoff_admin.models import Company, LeaveType, SQLModel, User
from timeoff_admin.repository import SqlPolicyRepository
from timeoff_admin.services.directory import (
    InMemoryDirectoryAuthenticator,
    get_directory_authenticator,
    set_directory_authenticator,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

LDAP_URL = "ldap://ldap.acme.example:389"
LDAP_PASSWORD = "correct horse battery staple"


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Fresh in-memory database per test, shared by every connection of the test."""
    _engine = build_engine("sqlite+aiosqlite://")
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Session used both by the test and by the application under test.

    Pipelines commit and roll back for real, so objects loaded before a
    rejected request are expired afterwards: re-query them by id.
    """
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def repository(db_session: AsyncSession) -> SqlPolicyRepository:
    return SqlPolicyRepository(db_session)


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def company(db_session: AsyncSession) -> Company:
    company = Company(name="Acme Corp", country="GB", timezone="Europe/London")
    db_session.add(company)
    await db_session.commit()
    return company


@pytest.fixture
async def admin(db_session: AsyncSession, company: Company) -> User:
    user = User(company_id=company.id, email="ada@acme.com", name="Ada", lastname="Admin", is_admin=True)
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
async def employee(db_session: AsyncSession, company: Company) -> User:
    user = User(company_id=company.id, email="bob@acme.com", name="Bob", lastname="Builder")
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
async def holiday_type(db_session: AsyncSession, company: Company) -> LeaveType:
    leave_type = LeaveType(company_id=company.id, name="Holiday", color="leave_type_color_1")
    db_session.add(leave_type)
    await db_session.commit()
    return leave_type


@pytest.fixture
def admin_headers(company: Company, admin: User) -> dict[str, str]:
    return {"X-Company-Id": str(company.id), "X-User-Id": str(admin.id), "X-Role": "admin"}


@pytest.fixture
def directory(admin: User) -> Iterator[InMemoryDirectoryAuthenticator]:
    """In-memory directory knowing the admin's account, installed for the test."""
    authenticator = InMemoryDirectoryAuthenticator()
    authenticator.seed(LDAP_URL, admin.email, LDAP_PASSWORD)
    previous = get_directory_authenticator()
    set_directory_authenticator(authenticator)
    yield authenticator
    set_directory_authenticator(previous)
