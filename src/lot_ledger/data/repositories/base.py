"""Base repository class with common CRUD operations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import select

from lot_ledger.data.models import Base

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """
    Generic repository over one ORM model.

    Repositories flush but never commit on their own; the caller owns the unit of work so a
    rebuild can replace wallets and cash-flow caches together.
    """

    model: type[T]

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with a database session."""
        self._session = session

    async def get(self, pk: Any) -> T | None:
        """Get a single entity by primary key."""
        return await self._session.get(self.model, pk)

    async def get_all(self) -> Sequence[T]:
        stmt = select(self.model)
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def add(self, entity: T, *, flush: bool = True) -> T:
        """Add a new entity (primary key is populated on flush)."""
        self._session.add(entity)
        if flush:
            await self._session.flush()
        return entity

    async def delete(self, entity: T) -> None:
        await self._session.delete(entity)
        await self._session.flush()

    async def commit(self) -> None:
        await self._session.commit()
