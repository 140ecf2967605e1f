# ruff: noqa: TC003
import uuid
from typing import TYPE_CHECKING, Optional

from sqlmodel import Field, Relationship

from timeoff_admin.models.base import TimestampMixin, UUIDBase

if TYPE_CHECKING:
    from timeoff_admin.models.company import Company
    from timeoff_admin.models.leave import Leave

DEFAULT_COLOR = "leave_type_color_1"


class LeaveType(UUIDBase, TimestampMixin, table=True):
    """A category of absence with its own allowance and approval rules."""

    __tablename__ = "leave_type"

    company_id: uuid.UUID = Field(foreign_key="company.id", index=True)
    name: str = Field(max_length=255)
    color: str = Field(default=DEFAULT_COLOR, max_length=50)
    use_allowance: bool = True
    limit: float = Field(default=0, ge=0)
    sort_order: int = 0
    auto_approve: bool = False

    company: Optional["Company"] = Relationship(back_populates="leave_types")
    leaves: list["Leave"] = Relationship(back_populates="leave_type")
