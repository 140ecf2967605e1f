"""Tests for the user administration endpoints."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import select

from timeoff_admin.models import AuditRecord, UserFeed

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from timeoff_admin.models import User


async def test_get_user(async_client: AsyncClient, admin_headers: dict[str, str], employee: User) -> None:
    resp = await async_client.get(f"/users/{employee.id}", headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["email"] == "bob@acme.com"
    assert data["is_admin"] is False
    assert data["default_allowance"] == 20


async def test_get_unknown_user(async_client: AsyncClient, admin_headers: dict[str, str]) -> None:
    resp = await async_client.get(f"/users/{uuid.uuid4()}", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "User not found"


async def test_update_user_is_audited(
    async_client: AsyncClient,
    admin_headers: dict[str, str],
    db_session: AsyncSession,
    admin: User,
    employee: User,
) -> None:
    admin_id, employee_id = admin.id, employee.id
    resp = await async_client.put(
        f"/users/{employee_id}",
        json={"name": "Robert", "email": "Robert@Acme.com", "default_allowance": 25},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "Robert"
    assert data["email"] == "robert@acme.com"
    assert data["lastname"] == "Builder"

    audit = (await db_session.execute(select(AuditRecord))).scalars().all()
    changes = {r.attribute: (r.old_value, r.new_value) for r in audit}
    assert changes == {
        "name": ("Bob", "Robert"),
        "email": ("bob@acme.com", "robert@acme.com"),
        "default_allowance": ("20", "25"),
    }
    assert {r.entity_id for r in audit} == {employee_id}
    assert {r.by_user_id for r in audit} == {admin_id}


async def test_update_user_duplicate_email(
    async_client: AsyncClient,
    admin_headers: dict[str, str],
    db_session: AsyncSession,
    employee: User,
) -> None:
    employee_id = employee.id
    resp = await async_client.put(
        f"/users/{employee_id}",
        json={"email": "ada@acme.com"},
        headers=admin_headers,
    )
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Email is already in use"
    assert (await db_session.execute(select(AuditRecord))).scalars().all() == []


async def test_update_user_requires_admin(
    async_client: AsyncClient,
    admin_headers: dict[str, str],
    employee: User,
) -> None:
    resp = await async_client.put(
        f"/users/{employee.id}",
        json={"is_admin": True},
        headers={**admin_headers, "X-Role": "employee"},
    )
    assert resp.status_code == 403


async def test_create_user_feeds(
    async_client: AsyncClient,
    admin_headers: dict[str, str],
    db_session: AsyncSession,
    employee: User,
) -> None:
    resp = await async_client.post(f"/users/{employee.id}/feeds", headers=admin_headers)
    assert resp.status_code == 200
    items = resp.json()["items"]
    assert [item["type"] for item in items] == ["calendar", "teamview"]
    for item in items:
        assert item["url"] == f"/feed/{item['feed_token']}/ical.ics"

    again = await async_client.post(f"/users/{employee.id}/feeds", headers=admin_headers)
    assert again.json()["items"] == items
    assert len((await db_session.execute(select(UserFeed))).scalars().all()) == 2
