"""Shared persistence helpers for the typed repositories."""

from __future__ import annotations

from typing import Any, Generic, Optional, Sequence, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookmarkd.database import Base

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """Thin typed wrapper around an ``AsyncSession`` for a single table."""

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, entity_id: int) -> Optional[ModelT]:
        return await self.session.get(self.model, entity_id)

    async def get_for_update(self, entity_id: int) -> Optional[ModelT]:
        """Load a row under a write lock so read-modify-write on it is atomic."""
        result = await self.session.execute(
            select(self.model)
            .where(self.model.id == entity_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_all(self, *order_by: Any) -> Sequence[ModelT]:
        query = select(self.model)
        if order_by:
            query = query.order_by(*order_by)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def add(self, entity: ModelT) -> ModelT:
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def delete(self, entity: ModelT) -> None:
        await self.session.delete(entity)
        await self.session.flush()
