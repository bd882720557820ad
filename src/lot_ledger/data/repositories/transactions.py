"""Transaction repository for data access."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, select

from lot_ledger.data.models import TransactionRecord
from lot_ledger.data.repositories.base import BaseRepository

if TYPE_CHECKING:
    from collections.abc import Sequence


class TransactionRepository(BaseRepository[TransactionRecord]):
    """Repository for TransactionRecord entities."""

    model = TransactionRecord

    async def list_for_security(self, security_id: int) -> Sequence[TransactionRecord]:
        """List a security's transactions by date, then insertion order."""
        stmt = (
            select(TransactionRecord)
            .where(TransactionRecord.security_id == security_id)
            .order_by(TransactionRecord.txn_date, TransactionRecord.id)
        )
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def delete_for_security(self, security_id: int) -> None:
        """Delete a security's whole history (flushes, does not commit)."""
        await self._session.execute(
            delete(TransactionRecord).where(TransactionRecord.security_id == security_id)
        )
        await self._session.flush()
