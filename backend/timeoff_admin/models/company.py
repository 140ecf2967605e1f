# ruff: noqa: TC003
import re
import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo

import sqlalchemy as sa
from sqlmodel import Field, Relationship

from timeoff_admin.models.base import TimestampMixin, UUIDBase

if TYPE_CHECKING:
    from timeoff_admin.models.holiday import BankHoliday
    from timeoff_admin.models.leave_type import LeaveType

# Display format -> strptime pattern.
DATE_FORMATS: dict[str, str] = {
    "YYYY-MM-DD": "%Y-%m-%d",
    "YYYY/MM/DD": "%Y/%m/%d",
    "YYYY/M/D": "%Y/%m/%d",
    "DD/MM/YY": "%d/%m/%y",
    "DD/MM/YYYY": "%d/%m/%Y",
    "MM/DD/YY": "%m/%d/%y",
    "MM/DD/YYYY": "%m/%d/%Y",
    "DD.MM.YYYY": "%d.%m.%Y",
}

CARRY_OVER_ALL = 1000


class Company(UUIDBase, TimestampMixin, table=True):
    """Aggregate root for company-wide leave policy."""

    __tablename__ = "company"

    name: str = Field(max_length=255)
    country: str = Field(default="GB", max_length=10)
    date_format: str = Field(default="YYYY-MM-DD", max_length=20)
    timezone: str = Field(default="Europe/London", max_length=64)
    carry_over: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    share_all_absences: bool = False
    is_team_view_hidden: bool = False
    integration_api_enabled: bool = False
    integration_api_token: uuid.UUID = Field(default_factory=uuid.uuid4, sa_type=sa.Uuid)
    ldap_auth_enabled: bool = False
    ldap_auth_config: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)

    bank_holidays: list["BankHoliday"] = Relationship(
        sa_relationship_kwargs={"order_by": "BankHoliday.date", "cascade": "all, delete-orphan"},
    )
    leave_types: list["LeaveType"] = Relationship(
        back_populates="company",
        sa_relationship_kwargs={"order_by": "LeaveType.name", "cascade": "all, delete-orphan"},
    )

    @staticmethod
    def get_available_date_formats() -> list[str]:
        return list(DATE_FORMATS)

    def get_today(self) -> date:
        """Current date in the company's time zone."""
        return datetime.now(ZoneInfo(self.timezone)).date()

    def normalise_date(self, value: str | date | None) -> date | None:
        """Parse a user supplied date using the company date format.

        ISO dates are accepted as well. Returns None when nothing matches.
        """
        if value is None or isinstance(value, date):
            return value
        value = value.strip()
        if not value:
            return None
        patterns = [DATE_FORMATS.get(self.date_format, "%Y-%m-%d"), "%Y-%m-%d"]
        for pattern in patterns:
            try:
                return datetime.strptime(value, pattern).date()
            except ValueError:
                continue
        return None

    def name_for_machine(self) -> str:
        return re.sub(r"\s+", "_", self.name.strip()).lower()
