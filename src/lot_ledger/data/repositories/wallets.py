"""Wallet repository for data access."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, select

from lot_ledger.data.models import WalletRecord
from lot_ledger.data.repositories.base import BaseRepository

if TYPE_CHECKING:
    from collections.abc import Sequence


class WalletRepository(BaseRepository[WalletRecord]):
    """Repository for WalletRecord entities."""

    model = WalletRecord

    async def list_for_security(
        self, security_id: int, *, active_only: bool = False
    ) -> Sequence[WalletRecord]:
        """List a security's wallets by strategy then buy price."""
        stmt = select(WalletRecord).where(WalletRecord.security_id == security_id)
        if active_only:
            stmt = stmt.where(WalletRecord.remaining_shares > 0)
        stmt = stmt.order_by(WalletRecord.strategy, WalletRecord.buy_price)
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def replace_for_security(self, security_id: int, wallets: list[WalletRecord]) -> None:
        """Delete a security's wallets and insert a new set (flushes, does not commit)."""
        await self._session.execute(
            delete(WalletRecord).where(WalletRecord.security_id == security_id)
        )
        self._session.add_all(wallets)
        await self._session.flush()

    async def delete_for_security(self, security_id: int) -> None:
        await self._session.execute(
            delete(WalletRecord).where(WalletRecord.security_id == security_id)
        )
        await self._session.flush()
