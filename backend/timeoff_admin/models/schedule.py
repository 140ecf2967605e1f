# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

import sqlalchemy as sa
from sqlmodel import Field

from timeoff_admin.models.base import TimestampMixin, UUIDBase

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class Schedule(UUIDBase, TimestampMixin, table=True):
    """Working-day pattern, either company wide or specific to one user."""

    __tablename__ = "schedule"
    __table_args__ = (
        sa.CheckConstraint(
            "(company_id IS NULL) <> (user_id IS NULL)",
            name="ck_schedule_owner",
        ),
    )

    company_id: uuid.UUID | None = Field(default=None, foreign_key="company.id", index=True)
    user_id: uuid.UUID | None = Field(default=None, foreign_key="users.id", index=True, unique=True)
    monday: bool = True
    tuesday: bool = True
    wednesday: bool = True
    thursday: bool = True
    friday: bool = True
    saturday: bool = False
    sunday: bool = False

    def is_user_specific(self) -> bool:
        return self.user_id is not None

    def is_working_day(self, day: date) -> bool:
        return bool(getattr(self, WEEKDAYS[day.weekday()]))
