"""Tests for the year start carry-over worker."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from timeoff_admin.models import Company, User, UserAllowanceAdjustment
from timeoff_admin.repository import SqlPolicyRepository
from timeoff_admin.worker import run_year_start_carry_over

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


async def _adjustments(db_session: AsyncSession) -> list[UserAllowanceAdjustment]:
    return list((await db_session.execute(select(UserAllowanceAdjustment))).scalars().all())


async def test_runs_on_first_day_of_year(
    repository: SqlPolicyRepository,
    db_session: AsyncSession,
    company: Company,
    employee: User,
) -> None:
    company.carry_over = 5
    await db_session.commit()

    processed = await run_year_start_carry_over(repository, today=date(2026, 1, 1))
    assert processed == 1
    (adjustment,) = await _adjustments(db_session)
    assert (adjustment.year, adjustment.carried_over_allowance) == (2026, 5)


async def test_skips_other_days(
    repository: SqlPolicyRepository,
    db_session: AsyncSession,
    company: Company,
    employee: User,
) -> None:
    company.carry_over = 5
    await db_session.commit()

    assert await run_year_start_carry_over(repository, today=date(2026, 1, 2)) == 0
    assert await _adjustments(db_session) == []


async def test_skips_companies_without_carry_over(
    repository: SqlPolicyRepository,
    db_session: AsyncSession,
    company: Company,
    employee: User,
) -> None:
    assert await run_year_start_carry_over(repository, today=date(2026, 1, 1)) == 0
    assert await _adjustments(db_session) == []


class FailingForCompany(SqlPolicyRepository):
    """Fails every user lookup of one company."""

    def __init__(self, session: AsyncSession, failing_id: Any) -> None:
        super().__init__(session)
        self.failing_id = failing_id

    async def find_all(self, kind: Any, filters: Any, order_by: Any = ()) -> Any:
        if kind is User and filters.get("company_id") == self.failing_id:
            msg = "replica lag"
            raise RuntimeError(msg)
        return await super().find_all(kind, filters, order_by)


async def test_failing_company_does_not_stop_the_run(
    db_session: AsyncSession,
    company: Company,
    employee: User,
) -> None:
    other = Company(name="Globex", carry_over=3)
    company.carry_over = 5
    db_session.add(other)
    await db_session.commit()
    db_session.add(User(company_id=other.id, email="hank@globex.example", name="Hank", lastname="Scorpio"))
    await db_session.commit()

    repository = FailingForCompany(db_session, other.id)
    processed = await run_year_start_carry_over(repository, today=date(2026, 1, 1))
    assert processed == 1
    (adjustment,) = await _adjustments(db_session)
    assert adjustment.carried_over_allowance == 5
