"""Persistence seam for the settings pipeline.

Services talk to a ``PolicyRepository`` instead of the session so the
pipeline logic can be exercised against any store. ``SqlPolicyRepository``
is the production implementation on top of an ``AsyncSession``: creates and
updates are staged in the unit of work and written by ``save``/``commit``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from sqlalchemy import select
from sqlalchemy.orm import selectinload
from sqlmodel import SQLModel, col

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm.strategy_options import _AbstractLoad

ModelT = TypeVar("ModelT", bound=SQLModel)


@runtime_checkable
class PolicyRepository(Protocol):
    """CRUD and query-by-filter over company policy aggregates."""

    async def find_one(
        self,
        kind: type[ModelT],
        filters: Mapping[str, Any],
        includes: Sequence[str] = (),
    ) -> ModelT | None: ...

    async def find_all(
        self,
        kind: type[ModelT],
        filters: Mapping[str, Any],
        order_by: Sequence[str] = (),
    ) -> list[ModelT]: ...

    async def create(self, kind: type[ModelT], attrs: Mapping[str, Any]) -> ModelT: ...

    async def bulk_create(self, kind: type[ModelT], attrs_list: Iterable[Mapping[str, Any]]) -> list[ModelT]: ...

    async def update(self, entity: ModelT, attrs: Mapping[str, Any]) -> ModelT: ...

    async def destroy(self, entity: SQLModel) -> None: ...

    async def save(self, entity: ModelT) -> ModelT: ...

    async def flush(self) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


def _loader(kind: type[SQLModel], path: str) -> _AbstractLoad:
    """Build a chained ``selectinload`` for a dotted relationship path."""
    current: type[SQLModel] = kind
    option: Any = None
    for name in path.split("."):
        attribute = getattr(current, name)
        option = selectinload(attribute) if option is None else option.selectinload(attribute)
        current = attribute.property.mapper.class_
    return option


class SqlPolicyRepository:
    """``PolicyRepository`` backed by an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_one(
        self,
        kind: type[ModelT],
        filters: Mapping[str, Any],
        includes: Sequence[str] = (),
    ) -> ModelT | None:
        query = select(kind).where(*(col(getattr(kind, k)) == v for k, v in filters.items()))
        if includes:
            # Entities already in the identity map must get their collections too
            query = query.options(*(_loader(kind, path) for path in includes))
            query = query.execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalars().first()

    async def find_all(
        self,
        kind: type[ModelT],
        filters: Mapping[str, Any],
        order_by: Sequence[str] = (),
    ) -> list[ModelT]:
        query = select(kind)
        for key, value in filters.items():
            column = col(getattr(kind, key))
            if isinstance(value, (list, tuple, set, frozenset)):
                query = query.where(column.in_(value))
            else:
                query = query.where(column == value)
        query = query.order_by(*(col(getattr(kind, name)) for name in order_by))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def create(self, kind: type[ModelT], attrs: Mapping[str, Any]) -> ModelT:
        entity = kind(**attrs)
        self.session.add(entity)
        return entity

    async def bulk_create(self, kind: type[ModelT], attrs_list: Iterable[Mapping[str, Any]]) -> list[ModelT]:
        entities = [kind(**attrs) for attrs in attrs_list]
        self.session.add_all(entities)
        return entities

    async def update(self, entity: ModelT, attrs: Mapping[str, Any]) -> ModelT:
        for key, value in attrs.items():
            setattr(entity, key, value)
        self.session.add(entity)
        return entity

    async def destroy(self, entity: SQLModel) -> None:
        await self.session.delete(entity)

    async def save(self, entity: ModelT) -> ModelT:
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def flush(self) -> None:
        await self.session.flush()

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
