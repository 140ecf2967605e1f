# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

from timeoff_admin.schemas.settings import RawValue


class LeaveTypeRowInput(BaseModel):
    """Raw form values of one leave type row."""

    name: RawValue = None
    color: RawValue = None
    limit: RawValue = None
    use_allowance: RawValue = None
    auto_approve: RawValue = None


class LeaveTypeRowUpdate(LeaveTypeRowInput):
    """Edit of an existing leave type, keyed by its id."""

    id: uuid.UUID


class LeaveTypesForm(BaseModel):
    """Ordered row updates, an optional new leave type and the row listed first.

    ``first_record`` holds the id of the row to sort first, or ``"new"``.
    """

    rows: list[LeaveTypeRowUpdate] = []
    new: LeaveTypeRowInput | None = None
    first_record: str | None = None


class LeaveTypeResponse(BaseModel):
    """Response schema for a leave type."""

    id: uuid.UUID
    company_id: uuid.UUID
    name: str
    color: str
    use_allowance: bool
    limit: float
    sort_order: int
    auto_approve: bool
