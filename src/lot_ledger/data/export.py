"""JSON export of the stored ledger."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from lot_ledger import __version__
from lot_ledger.data.repositories import (
    SecurityRepository,
    TransactionRepository,
    WalletRepository,
)
from lot_ledger.data.schemas import LedgerExport, SecurityOut, TransactionIn, WalletOut

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from lot_ledger.data.models import SecurityRecord, TransactionRecord, WalletRecord

logger = structlog.get_logger()


async def export_ledger(session: AsyncSession, *, include_archived: bool = True) -> LedgerExport:
    """
    Collect every stored security with its transactions and persisted wallets.

    The exported transactions are a valid import file; the wallets and cash-flow fields are the
    cached values from the last rebuild.
    """
    txn_repo = TransactionRepository(session)
    wallet_repo = WalletRepository(session)
    securities: list[SecurityOut] = []

    for record in await SecurityRepository(session).list_all(include_archived=include_archived):
        txns = await txn_repo.list_for_security(record.id)
        wallets = await wallet_repo.list_for_security(record.id)
        securities.append(_security_out(record, txns, wallets))

    logger.info("Exported ledger", securities=len(securities))
    return LedgerExport(version=__version__, securities=securities)


def _security_out(
    record: SecurityRecord,
    txns: Sequence[TransactionRecord],
    wallets: Sequence[WalletRecord],
) -> SecurityOut:
    return SecurityOut(
        symbol=record.symbol,
        name=record.name,
        stock_type=record.stock_type,
        region=record.region,
        market_category=record.market_category,
        risk_growth_profile=record.risk_growth_profile,
        swing_hold_ratio=record.swing_hold_ratio,
        pdp=record.pdp,
        plr=record.plr,
        stp=record.stp,
        htp=record.htp,
        commission=record.commission,
        budget=record.budget,
        test_price=record.test_price,
        is_hidden=record.is_hidden,
        is_archived=record.is_archived,
        transactions=[
            TransactionIn(
                txn_date=t.txn_date,
                action=t.action,
                price=t.price,
                investment=t.investment,
                quantity=t.quantity,
                swing_shares=t.swing_shares,
                hold_shares=t.hold_shares,
                amount=t.amount,
                txn_type=t.txn_type,
                wallet_price=t.wallet_price,
                split_ratio=t.split_ratio,
                signal=t.signal,
            )
            for t in txns
        ],
        total_out_of_pocket=record.total_out_of_pocket,
        current_cash_balance=record.current_cash_balance,
        split_adjustment_factor=record.split_adjustment_factor,
        wallets=[
            WalletOut(
                strategy=w.strategy,
                buy_price=w.buy_price,
                target_price=w.target_price,
                total_investment=w.total_investment,
                total_shares=w.total_shares,
                remaining_shares=w.remaining_shares,
                shares_sold=w.shares_sold,
                sell_txn_count=w.sell_txn_count,
                realized_pl=w.realized_pl,
                realized_pl_percent=w.realized_pl_percent,
            )
            for w in wallets
        ],
    )
