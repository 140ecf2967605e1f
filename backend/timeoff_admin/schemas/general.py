from __future__ import annotations

from pydantic import BaseModel

from timeoff_admin.schemas.holiday import BankHolidayResponse
from timeoff_admin.schemas.leave_type import LeaveTypeResponse
from timeoff_admin.schemas.settings import CarryOverOption, CompanyResponse, CountryOption, ScheduleResponse


class GeneralSettingsResponse(BaseModel):
    """Everything the general settings page shows."""

    company: CompanyResponse
    schedule: ScheduleResponse | None
    bank_holidays: list[BankHolidayResponse]
    leave_types: list[LeaveTypeResponse]
    countries: list[CountryOption]
    timezones_available: list[str]
    date_formats: list[str]
    carry_over_options: list[CarryOverOption]
    year_current: int
    year_prev: int
