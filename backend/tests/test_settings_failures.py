"""Settings pipelines whose final commit fails."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from timeoff_admin.models import AuditRecord, BankHoliday, Company, LeaveType, Schedule
from timeoff_admin.repository import SqlPolicyRepository
from timeoff_admin.schemas.holiday import BankHolidayRowUpdate, BankHolidaysForm
from timeoff_admin.schemas.leave_type import LeaveTypeRowInput, LeaveTypeRowUpdate, LeaveTypesForm
from timeoff_admin.schemas.settings import CompanyProfileForm, ScheduleForm
from timeoff_admin.services.settings import (
    LEAVE_TYPES_FAILURE,
    update_bank_holidays,
    update_company,
    update_leave_types,
    update_schedule,
)

if TYPE_CHECKING:
    import pytest
    from sqlalchemy.ext.asyncio import AsyncSession

    from timeoff_admin.models import User


class CommitFails(SqlPolicyRepository):
    async def commit(self) -> None:
        msg = "database went away"
        raise ConnectionError(msg)


async def _audit_records(db_session: AsyncSession) -> list[AuditRecord]:
    return list((await db_session.execute(select(AuditRecord))).scalars().all())


async def test_update_company_commit_failure(
    db_session: AsyncSession,
    company: Company,
    admin: User,
    caplog: pytest.LogCaptureFixture,
) -> None:
    company_id = company.id
    form = CompanyProfileForm(
        name="Acme Ltd", country="FR", timezone="Europe/Paris", carry_over="3", date_format="YYYY-MM-DD"
    )

    outcome = await update_company(CommitFails(db_session), admin, form)

    assert outcome.errors == ["Failed to update company details, please contact customer service"]
    assert outcome.messages == []
    assert "Failed to update company details" in caplog.text
    assert "database went away" in caplog.text

    reloaded = (await db_session.execute(select(Company).where(col(Company.id) == company_id))).scalars().one()
    assert (reloaded.name, reloaded.country, reloaded.carry_over) == ("Acme Corp", "GB", 0)
    assert await _audit_records(db_session) == []


async def test_update_schedule_commit_failure(
    db_session: AsyncSession,
    admin: User,
    caplog: pytest.LogCaptureFixture,
) -> None:
    form = ScheduleForm(monday="on", tuesday="on", saturday="on")

    outcome = await update_schedule(CommitFails(db_session), admin, form)

    assert outcome.errors == ["Failed to save company schedule"]
    assert "Failed to save schedule for company" in caplog.text
    assert (await db_session.execute(select(Schedule))).scalars().all() == []
    assert await _audit_records(db_session) == []


async def test_update_bank_holidays_commit_failure(
    db_session: AsyncSession,
    company: Company,
    admin: User,
    caplog: pytest.LogCaptureFixture,
) -> None:
    company_id = company.id
    may_day = BankHoliday(company_id=company_id, name="May Day", date=date(2026, 5, 1))
    labour_day = BankHoliday(company_id=company_id, name="Labour Day", date=date(2026, 5, 2))
    db_session.add_all([may_day, labour_day])
    await db_session.commit()
    form = BankHolidaysForm(
        rows=[
            BankHolidayRowUpdate(id=may_day.id, name="May Day", date="2026-05-02"),
            BankHolidayRowUpdate(id=labour_day.id, name="Labour Day", date="2026-05-01"),
        ]
    )

    outcome = await update_bank_holidays(CommitFails(db_session), admin, form)

    assert outcome.errors == ["Failed to update bank holidayes details, please contact customer service"]
    assert "Failed to edit bank holidays" in caplog.text
    result = await db_session.execute(
        select(BankHoliday).where(col(BankHoliday.company_id) == company_id).order_by(col(BankHoliday.date))
    )
    assert [(h.name, h.date) for h in result.scalars().all()] == [
        ("May Day", date(2026, 5, 1)),
        ("Labour Day", date(2026, 5, 2)),
    ]
    assert await _audit_records(db_session) == []


async def test_update_leave_types_commit_failure(
    db_session: AsyncSession,
    company: Company,
    admin: User,
    holiday_type: LeaveType,
    caplog: pytest.LogCaptureFixture,
) -> None:
    company_id = company.id
    form = LeaveTypesForm(
        rows=[LeaveTypeRowUpdate(id=holiday_type.id, name="Vacation", color="leave_type_color_2", limit="5")],
        new=LeaveTypeRowInput(name="Sick", limit="10"),
    )

    outcome = await update_leave_types(CommitFails(db_session), admin, form)

    assert outcome.errors == [LEAVE_TYPES_FAILURE]
    assert outcome.messages == []
    assert "Failed to edit leave types" in caplog.text
    result = await db_session.execute(select(LeaveType).where(col(LeaveType.company_id) == company_id))
    assert [(lt.name, lt.color, lt.limit) for lt in result.scalars().all()] == [
        ("Holiday", "leave_type_color_1", 0)
    ]
    assert await _audit_records(db_session) == []
