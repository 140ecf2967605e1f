"""Resolve leaves into per-day morning/afternoon absence flags."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING

from timeoff_admin.models.enums import LeaveStatus
from timeoff_admin.models.holiday import BankHoliday
from timeoff_admin.models.leave import Leave
from timeoff_admin.models.schedule import Schedule

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable

    from timeoff_admin.models.user import User
    from timeoff_admin.repository import PolicyRepository

VISIBLE_STATUSES = (LeaveStatus.NEW.value, LeaveStatus.APPROVED.value)


@dataclass
class LeaveDay:
    """One calendar day of a user with the halves they are away."""

    user: User
    day: date
    is_leave_morning: bool = False
    is_leave_afternoon: bool = False

    @property
    def is_leave(self) -> bool:
        return self.is_leave_morning or self.is_leave_afternoon


def date_range(start: date, end: date) -> Iterable[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


async def get_company_schedule(repository: PolicyRepository, company_id: uuid.UUID) -> Schedule:
    """Company-wide schedule, or an unsaved Monday-Friday default."""
    schedule = await repository.find_one(Schedule, {"company_id": company_id})
    if schedule is None:
        schedule = Schedule(company_id=company_id)
    return schedule


async def get_schedule_for_user(repository: PolicyRepository, user: User) -> Schedule:
    """The schedule a user obeys: their own if present, otherwise the company's."""
    schedule = await repository.find_one(Schedule, {"user_id": user.id})
    if schedule is not None:
        return schedule
    return await get_company_schedule(repository, user.company_id)


async def get_bank_holiday_dates(repository: PolicyRepository, company_id: uuid.UUID) -> set[date]:
    holidays = await repository.find_all(BankHoliday, {"company_id": company_id})
    return {holiday.date for holiday in holidays}


def day_flags(leaves: Iterable[Leave], day: date) -> tuple[bool, bool]:
    morning = afternoon = False
    for leave in leaves:
        leave_morning, leave_afternoon = leave.covers(day)
        morning = morning or leave_morning
        afternoon = afternoon or leave_afternoon
    return morning, afternoon


def deducted_days(
    leave: Leave,
    schedule: Schedule,
    holidays: set[date],
    *,
    start: date | None = None,
    end: date | None = None,
) -> float:
    """Working days a leave takes within ``[start, end]``, half days counting 0.5."""
    first = max(leave.date_start, start) if start is not None else leave.date_start
    last = min(leave.date_end, end) if end is not None else leave.date_end
    total = 0.0
    for day in date_range(first, last):
        if not schedule.is_working_day(day) or day in holidays:
            continue
        morning, afternoon = leave.covers(day)
        total += (int(morning) + int(afternoon)) / 2
    return total


async def resolve_leave_days(
    repository: PolicyRepository,
    user: User,
    start: date,
    end: date,
    *,
    holidays: set[date] | None = None,
    statuses: Iterable[str] = VISIBLE_STATUSES,
) -> list[LeaveDay]:
    """Every day in ``[start, end]`` for ``user`` with its leave flags.

    Non-working days and bank holidays never carry leave flags.
    """
    schedule = await get_schedule_for_user(repository, user)
    if holidays is None:
        holidays = await get_bank_holiday_dates(repository, user.company_id)
    leaves = [
        leave
        for leave in await repository.find_all(Leave, {"user_id": user.id, "status": list(statuses)})
        if leave.date_start <= end and leave.date_end >= start
    ]

    days = []
    for day in date_range(start, end):
        leave_day = LeaveDay(user=user, day=day)
        if schedule.is_working_day(day) and day not in holidays:
            leave_day.is_leave_morning, leave_day.is_leave_afternoon = day_flags(leaves, day)
        days.append(leave_day)
    return days
