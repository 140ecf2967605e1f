# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from timeoff_admin.models.base import UUIDBase, now_utc


class AuditRecord(UUIDBase, table=True):
    """Immutable record of one attribute change made by a user."""

    __tablename__ = "audit"
    __table_args__ = (sa.Index("ix_audit_entity", "entity_type", "entity_id"),)

    company_id: uuid.UUID = Field(index=True)
    by_user_id: uuid.UUID
    entity_type: str = Field(max_length=50)
    entity_id: uuid.UUID
    attribute: str = Field(max_length=255)
    old_value: str | None = None
    new_value: str | None = None
    created_at: datetime = Field(
        default_factory=now_utc,
        index=True,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
