"""Security repository for data access."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from lot_ledger.data.models import SecurityRecord
from lot_ledger.data.repositories.base import BaseRepository
from lot_ledger.exceptions import SecurityNotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence


class SecurityRepository(BaseRepository[SecurityRecord]):
    """Repository for SecurityRecord entities."""

    model = SecurityRecord

    async def get_by_symbol(self, symbol: str) -> SecurityRecord | None:
        stmt = select(SecurityRecord).where(SecurityRecord.symbol == symbol.upper())
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def require(self, symbol: str) -> SecurityRecord:
        """Get a security by symbol.

        Raises:
            SecurityNotFoundError: If no security has this symbol.
        """
        record = await self.get_by_symbol(symbol)
        if record is None:
            raise SecurityNotFoundError(symbol.upper())
        return record

    async def list_all(self, *, include_archived: bool = False) -> Sequence[SecurityRecord]:
        """List securities ordered by symbol."""
        stmt = select(SecurityRecord)
        if not include_archived:
            stmt = stmt.where(SecurityRecord.is_archived.is_(False))
        stmt = stmt.order_by(SecurityRecord.symbol)
        result = await self._session.execute(stmt)
        return result.scalars().all()
