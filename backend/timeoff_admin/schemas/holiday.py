# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel

from timeoff_admin.schemas.settings import RawValue


class BankHolidayRowInput(BaseModel):
    """Raw form values of one bank holiday row."""

    name: RawValue = None
    date: RawValue = None


class BankHolidayRowUpdate(BankHolidayRowInput):
    """Edit of an existing bank holiday, keyed by its id."""

    id: uuid.UUID


class BankHolidaysForm(BaseModel):
    """Ordered row updates plus an optional new bank holiday."""

    rows: list[BankHolidayRowUpdate] = []
    new: BankHolidayRowInput | None = None


class BankHolidayResponse(BaseModel):
    """Response schema for a bank holiday."""

    id: uuid.UUID
    company_id: uuid.UUID
    date: date
    name: str
