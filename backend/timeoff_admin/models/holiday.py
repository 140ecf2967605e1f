# ruff: noqa: TC003
import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field

from timeoff_admin.models.base import UUIDBase


class BankHoliday(UUIDBase, table=True):
    """A company-wide non-working day."""

    __tablename__ = "bank_holiday"
    __table_args__ = (sa.UniqueConstraint("company_id", "date", name="uq_bank_holiday_company_date"),)

    company_id: uuid.UUID = Field(foreign_key="company.id", index=True)
    date: datetime.date
    name: str = Field(max_length=255)
