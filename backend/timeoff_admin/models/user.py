# ruff: noqa: TC003
import uuid

import sqlalchemy as sa
from sqlmodel import Field

from timeoff_admin.models.base import TimestampMixin, UUIDBase


class User(UUIDBase, TimestampMixin, table=True):
    """An employee account belonging to one company."""

    __tablename__ = "users"
    __table_args__ = (sa.UniqueConstraint("email", name="uq_users_email"),)

    company_id: uuid.UUID = Field(foreign_key="company.id", index=True)
    email: str = Field(max_length=255)
    name: str = Field(max_length=255)
    lastname: str = Field(default="", max_length=255)
    is_admin: bool = False
    activated: bool = True
    default_allowance: float = Field(default=20, ge=0)

    def full_name(self) -> str:
        return f"{self.name} {self.lastname}".strip()


class UserAllowanceAdjustment(UUIDBase, table=True):
    """Per-year manual adjustment and carried over allowance of a user."""

    __tablename__ = "user_allowance_adjustment"
    __table_args__ = (sa.UniqueConstraint("user_id", "year", name="uq_allowance_adjustment_user_year"),)

    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)
    year: int
    adjustment: float = 0
    carried_over_allowance: float = 0
