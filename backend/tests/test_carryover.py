"""Tests for carrying unused allowance into the next year."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy import select

from timeoff_admin.models import Leave, LeaveType, UserAllowanceAdjustment
from timeoff_admin.models.company import CARRY_OVER_ALL
from timeoff_admin.models.enums import DayPart, LeaveStatus
from timeoff_admin.repository import SqlPolicyRepository
from timeoff_admin.services.carryover import calculate_carry_over_allowance, carry_over_amount
from timeoff_admin.services.settings import carry_over_unused_allowance

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from timeoff_admin.models import Company, User


async def _book_previous_year(db_session: AsyncSession, user: User, leave_type: LeaveType) -> None:
    """3.5 working days of approved leave in 2025."""
    db_session.add_all(
        [
            # Monday to Wednesday
            Leave(
                user_id=user.id,
                leave_type_id=leave_type.id,
                status=LeaveStatus.APPROVED,
                date_start=date(2025, 3, 3),
                date_end=date(2025, 3, 5),
            ),
            Leave(
                user_id=user.id,
                leave_type_id=leave_type.id,
                status=LeaveStatus.APPROVED,
                date_start=date(2025, 3, 7),
                date_end=date(2025, 3, 7),
                day_part_start=DayPart.MORNING,
                day_part_end=DayPart.MORNING,
            ),
            Leave(
                user_id=user.id,
                leave_type_id=leave_type.id,
                status=LeaveStatus.REJECTED,
                date_start=date(2025, 4, 7),
                date_end=date(2025, 4, 11),
            ),
        ]
    )
    await db_session.commit()


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("remaining", "policy_days", "expected"),
    [
        (16.5, 0, 0),
        (16.5, 5, 5),
        (3.5, 5, 3.5),
        (16.5, CARRY_OVER_ALL, 16.5),
        (-2, 5, 0),
        (-2, CARRY_OVER_ALL, 0),
    ],
)
def test_carry_over_amount(remaining: float, policy_days: int, expected: float) -> None:
    assert carry_over_amount(remaining, policy_days) == expected


# ---------------------------------------------------------------------------
# Calculation
# ---------------------------------------------------------------------------


async def test_carry_over_is_capped_by_policy(
    repository: SqlPolicyRepository,
    db_session: AsyncSession,
    company: Company,
    employee: User,
    holiday_type: LeaveType,
) -> None:
    await _book_previous_year(db_session, employee, holiday_type)
    company.carry_over = 5

    result = await calculate_carry_over_allowance(repository, company, [employee], year=2026)
    assert result.processed == 1
    assert result.details[0]["remaining"] == 16.5
    assert result.details[0]["carried_over"] == 5

    adjustment = (await db_session.execute(select(UserAllowanceAdjustment))).scalars().one()
    assert (adjustment.year, adjustment.carried_over_allowance) == (2026, 5)


async def test_carry_over_all(
    repository: SqlPolicyRepository,
    db_session: AsyncSession,
    company: Company,
    employee: User,
    holiday_type: LeaveType,
) -> None:
    await _book_previous_year(db_session, employee, holiday_type)
    company.carry_over = CARRY_OVER_ALL

    await calculate_carry_over_allowance(repository, company, [employee], year=2026)
    adjustment = (await db_session.execute(select(UserAllowanceAdjustment))).scalars().one()
    assert adjustment.carried_over_allowance == 16.5


async def test_previous_year_adjustments_count(
    repository: SqlPolicyRepository,
    db_session: AsyncSession,
    company: Company,
    employee: User,
    holiday_type: LeaveType,
) -> None:
    await _book_previous_year(db_session, employee, holiday_type)
    db_session.add(UserAllowanceAdjustment(user_id=employee.id, year=2025, adjustment=2, carried_over_allowance=1))
    await db_session.commit()
    company.carry_over = CARRY_OVER_ALL

    result = await calculate_carry_over_allowance(repository, company, [employee], year=2026)
    assert result.details[0]["carried_over"] == 19.5


async def test_leave_types_without_allowance_are_ignored(
    repository: SqlPolicyRepository,
    db_session: AsyncSession,
    company: Company,
    employee: User,
) -> None:
    sick = LeaveType(company_id=company.id, name="Sick", use_allowance=False)
    db_session.add(sick)
    await db_session.commit()
    await _book_previous_year(db_session, employee, sick)
    company.carry_over = CARRY_OVER_ALL

    result = await calculate_carry_over_allowance(repository, company, [employee], year=2026)
    assert result.details[0]["carried_over"] == 20


async def test_existing_adjustment_is_updated(
    repository: SqlPolicyRepository,
    db_session: AsyncSession,
    company: Company,
    employee: User,
) -> None:
    db_session.add(UserAllowanceAdjustment(user_id=employee.id, year=2026, adjustment=2, carried_over_allowance=7))
    await db_session.commit()
    company.carry_over = 3

    await calculate_carry_over_allowance(repository, company, [employee], year=2026)
    adjustment = (await db_session.execute(select(UserAllowanceAdjustment))).scalars().one()
    assert adjustment.adjustment == 2
    assert adjustment.carried_over_allowance == 3


# ---------------------------------------------------------------------------
# Failure reporting
# ---------------------------------------------------------------------------


class BrokenRepository(SqlPolicyRepository):
    async def create(self, kind: type[Any], attrs: Any) -> Any:
        msg = "connection reset"
        raise ConnectionError(msg)


async def test_failure_reports_incident_id(
    db_session: AsyncSession,
    company: Company,
    admin: User,
    caplog: pytest.LogCaptureFixture,
) -> None:
    company.carry_over = 5
    await db_session.commit()

    outcome = await carry_over_unused_allowance(BrokenRepository(db_session), admin)
    (error,) = outcome.errors
    prefix = "Failed to carry over unused allowances, please contact customer service and provide incident ID: "
    assert error.startswith(prefix)
    marker = error.removeprefix(prefix)
    assert marker in caplog.text
    assert outcome.messages == []
    assert outcome.redirect_to == "/settings/general/"
