# ruff: noqa: TC003
import datetime
import uuid
from typing import TYPE_CHECKING, Optional

from sqlmodel import Field, Relationship

from timeoff_admin.models.base import TimestampMixin, UUIDBase
from timeoff_admin.models.enums import DayPart, LeaveStatus

if TYPE_CHECKING:
    from timeoff_admin.models.leave_type import LeaveType


class Leave(UUIDBase, TimestampMixin, table=True):
    """An employee's absence over a date range."""

    __tablename__ = "leave"

    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)
    leave_type_id: uuid.UUID = Field(foreign_key="leave_type.id", index=True)
    status: str = Field(default=LeaveStatus.NEW, max_length=20, index=True)
    date_start: datetime.date
    day_part_start: str = Field(default=DayPart.ALL, max_length=20)
    date_end: datetime.date
    day_part_end: str = Field(default=DayPart.ALL, max_length=20)
    employee_comment: str | None = None

    leave_type: Optional["LeaveType"] = Relationship(back_populates="leaves")

    def covers(self, day: datetime.date) -> tuple[bool, bool]:
        """Return (morning, afternoon) flags this leave sets on ``day``."""
        if day < self.date_start or day > self.date_end:
            return False, False
        morning = afternoon = True
        if self.date_start == self.date_end:
            if self.day_part_start == DayPart.MORNING:
                afternoon = False
            elif self.day_part_start == DayPart.AFTERNOON:
                morning = False
            return morning, afternoon
        if day == self.date_start and self.day_part_start == DayPart.AFTERNOON:
            morning = False
        if day == self.date_end and self.day_part_end == DayPart.MORNING:
            afternoon = False
        return morning, afternoon
