from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlmodel import col

from timeoff_admin.config import get_settings
from timeoff_admin.models.audit import AuditRecord
from timeoff_admin.models.enums import AuditEntityType
from timeoff_admin.schemas.audit import AuditRecordListResponse, AuditRecordResponse

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy.ext.asyncio import AsyncSession

    from timeoff_admin.models.user import User
    from timeoff_admin.repository import PolicyRepository

logger = logging.getLogger(__name__)


def stringify(value: Any) -> str:
    """Text form used to compare and store audited values.

    Equality is decided on this text only, so values of different types with
    the same text (``1``, ``1.0`` and ``"1"``; ``True`` and ``"true"``) are
    treated as unchanged.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def changed_attributes(old_state: Mapping[str, Any], new_state: Mapping[str, Any]) -> list[str]:
    """Keys of ``new_state`` whose text differs from ``old_state``."""
    return [key for key in new_state if stringify(new_state[key]) != stringify(old_state.get(key))]


async def record_changes(
    repository: PolicyRepository,
    *,
    company_id: uuid.UUID,
    by_user_id: uuid.UUID,
    entity_type: AuditEntityType,
    entity_id: uuid.UUID,
    old_state: Mapping[str, Any],
    new_state: Mapping[str, Any],
    concurrency: int | None = None,
) -> list[AuditRecord]:
    """Persist one audit record per attribute that changed.

    Writes are issued concurrently with at most ``concurrency`` in flight.
    The first failing write fails the whole call.
    """
    attributes = changed_attributes(old_state, new_state)
    if not attributes:
        return []

    semaphore = asyncio.Semaphore(concurrency or get_settings().audit_write_concurrency)

    async def _write(attribute: str) -> AuditRecord:
        async with semaphore:
            return await repository.create(
                AuditRecord,
                {
                    "company_id": company_id,
                    "by_user_id": by_user_id,
                    "entity_type": entity_type.value,
                    "entity_id": entity_id,
                    "attribute": attribute,
                    "old_value": stringify(old_state.get(attribute)),
                    "new_value": stringify(new_state[attribute]),
                },
            )

    records = await asyncio.gather(*(_write(attribute) for attribute in attributes))
    logger.debug("Recorded %d change(s) on %s %s", len(records), entity_type.value, entity_id)
    return list(records)


async def capture_user_changes(
    repository: PolicyRepository,
    *,
    by_user: User,
    for_user: User,
    new_attributes: Mapping[str, Any],
) -> list[AuditRecord]:
    """Audit an edit of ``for_user`` made by ``by_user``."""
    return await record_changes(
        repository,
        company_id=by_user.company_id,
        by_user_id=by_user.id,
        entity_type=AuditEntityType.USER,
        entity_id=for_user.id,
        old_state=for_user.attributes(*new_attributes),
        new_state=new_attributes,
    )


async def query_audit_log(
    session: AsyncSession,
    company_id: uuid.UUID,
    *,
    entity_type: str | None = None,
    entity_id: uuid.UUID | None = None,
    by_user_id: uuid.UUID | None = None,
    attribute: str | None = None,
    offset: int = 0,
    limit: int = 50,
) -> AuditRecordListResponse:
    """Query audit records with optional filters, newest first."""
    filters = [col(AuditRecord.company_id) == company_id]

    if entity_type is not None:
        filters.append(col(AuditRecord.entity_type) == entity_type)
    if entity_id is not None:
        filters.append(col(AuditRecord.entity_id) == entity_id)
    if by_user_id is not None:
        filters.append(col(AuditRecord.by_user_id) == by_user_id)
    if attribute is not None:
        filters.append(col(AuditRecord.attribute) == attribute)

    count_result = await session.execute(select(func.count()).select_from(AuditRecord).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(AuditRecord)
        .where(*filters)
        .order_by(col(AuditRecord.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    return AuditRecordListResponse(
        items=[AuditRecordResponse.model_validate(record, from_attributes=True) for record in result.scalars()],
        total=total,
    )
