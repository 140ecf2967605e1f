from __future__ import annotations

import enum


class LeaveStatus(enum.StrEnum):
    """Approval state of a leave."""

    NEW = "NEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELED = "CANCELED"


class DayPart(enum.StrEnum):
    """Which part of a day a leave boundary covers."""

    ALL = "ALL"
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"


class FeedType(enum.StrEnum):
    """Kind of iCalendar feed a token grants access to."""

    CALENDAR = "calendar"
    TEAMVIEW = "teamview"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit trail."""

    USER = "USER"
    COMPANY = "COMPANY"
    SCHEDULE = "SCHEDULE"
    BANK_HOLIDAY = "BANK_HOLIDAY"
    LEAVE_TYPE = "LEAVE_TYPE"
