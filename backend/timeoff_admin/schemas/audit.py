# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel


class AuditRecordResponse(BaseModel):
    """A single attribute change."""

    id: uuid.UUID
    company_id: uuid.UUID
    by_user_id: uuid.UUID
    entity_type: str
    entity_id: uuid.UUID
    attribute: str
    old_value: str | None
    new_value: str | None
    created_at: datetime


class AuditRecordListResponse(BaseModel):
    """Paginated list of audit records."""

    items: list[AuditRecordResponse]
    total: int
