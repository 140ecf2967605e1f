from sqlmodel import SQLModel

from timeoff_admin.models.audit import AuditRecord
from timeoff_admin.models.base import TimestampMixin, UUIDBase
from timeoff_admin.models.company import Company
from timeoff_admin.models.enums import AuditEntityType, DayPart, FeedType, LeaveStatus
from timeoff_admin.models.feed import UserFeed
from timeoff_admin.models.holiday import BankHoliday
from timeoff_admin.models.leave import Leave
from timeoff_admin.models.leave_type import LeaveType
from timeoff_admin.models.schedule import Schedule
from timeoff_admin.models.user import User, UserAllowanceAdjustment

__all__ = [
    "AuditEntityType",
    "AuditRecord",
    "BankHoliday",
    "Company",
    "DayPart",
    "FeedType",
    "Leave",
    "LeaveStatus",
    "LeaveType",
    "SQLModel",
    "Schedule",
    "TimestampMixin",
    "UUIDBase",
    "User",
    "UserAllowanceAdjustment",
    "UserFeed",
]
