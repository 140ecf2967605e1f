"""Carry unused allowance of the previous leave year into the next one."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from timeoff_admin.models.company import CARRY_OVER_ALL
from timeoff_admin.models.enums import LeaveStatus
from timeoff_admin.models.leave import Leave
from timeoff_admin.models.leave_type import LeaveType
from timeoff_admin.models.user import UserAllowanceAdjustment
from timeoff_admin.services.calendar import deducted_days, get_bank_holiday_dates, get_schedule_for_user

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable

    from timeoff_admin.models.company import Company
    from timeoff_admin.models.user import User
    from timeoff_admin.repository import PolicyRepository

logger = logging.getLogger(__name__)


@dataclass
class CarryoverRunResult:
    """Result of carrying allowance over for a set of users."""

    year: int
    processed: int = 0
    details: list[dict[str, object]] = field(default_factory=list)


def carry_over_amount(remaining: float, policy_days: int) -> float:
    """Days that may be carried over under the company policy.

    ``policy_days`` of 0 carries nothing, ``CARRY_OVER_ALL`` carries
    everything left; negative remainders never carry.
    """
    remaining = max(remaining, 0)
    if policy_days <= 0:
        return 0
    if policy_days >= CARRY_OVER_ALL:
        return remaining
    return min(remaining, policy_days)


async def remaining_allowance(
    repository: PolicyRepository,
    user: User,
    year: int,
    *,
    holidays: set[date],
    allowance_leave_type_ids: set[uuid.UUID],
) -> float:
    """Allowance ``user`` had left at the end of ``year``."""
    adjustment = await repository.find_one(UserAllowanceAdjustment, {"user_id": user.id, "year": year})
    total = user.default_allowance
    if adjustment is not None:
        total += adjustment.adjustment + adjustment.carried_over_allowance

    schedule = await get_schedule_for_user(repository, user)
    year_start, year_end = date(year, 1, 1), date(year, 12, 31)
    leaves = await repository.find_all(Leave, {"user_id": user.id, "status": LeaveStatus.APPROVED.value})
    used = sum(
        deducted_days(leave, schedule, holidays, start=year_start, end=year_end)
        for leave in leaves
        if leave.leave_type_id in allowance_leave_type_ids
        and leave.date_start <= year_end
        and leave.date_end >= year_start
    )
    return total - used


async def calculate_carry_over_allowance(
    repository: PolicyRepository,
    company: Company,
    users: Iterable[User],
    *,
    year: int | None = None,
) -> CarryoverRunResult:
    """Compute and persist the carried over allowance of ``users`` for ``year``.

    ``year`` defaults to the company's current year; the remainder of the
    year before it is carried. Any failure propagates to the caller.
    """
    if year is None:
        year = company.get_today().year
    result = CarryoverRunResult(year=year)

    holidays = await get_bank_holiday_dates(repository, company.id)
    leave_types = await repository.find_all(LeaveType, {"company_id": company.id})
    allowance_leave_type_ids = {lt.id for lt in leave_types if lt.use_allowance}

    for user in users:
        remaining = await remaining_allowance(
            repository,
            user,
            year - 1,
            holidays=holidays,
            allowance_leave_type_ids=allowance_leave_type_ids,
        )
        carried = carry_over_amount(remaining, company.carry_over)

        adjustment = await repository.find_one(UserAllowanceAdjustment, {"user_id": user.id, "year": year})
        if adjustment is None:
            await repository.create(
                UserAllowanceAdjustment,
                {"user_id": user.id, "year": year, "carried_over_allowance": carried},
            )
        else:
            await repository.update(adjustment, {"carried_over_allowance": carried})

        result.processed += 1
        result.details.append({"user_id": str(user.id), "remaining": remaining, "carried_over": carried})
        logger.debug("User %s carries %.1f day(s) into %d", user.id, carried, year)

    await repository.commit()
    logger.info("Carried over allowance of %d user(s) of company %s into %d", result.processed, company.id, year)
    return result
