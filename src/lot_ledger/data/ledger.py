"""Load stored history, rebuild it, and persist the derived state.

The rebuild runs entirely in memory before anything is written. If the history is invalid the
engine raises and the stored wallets and cash-flow caches stay as they were; otherwise wallets,
caches and per-sell P/L are replaced in a single commit. The first successful rebuild after a
Buy is entered also records its Swing/Hold shares, so a later change to the security's ratio
only affects new Buys.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from lot_ledger.data._converters import (
    security_record_to_domain,
    transaction_record_to_domain,
    wallet_to_record,
)
from lot_ledger.data.repositories import (
    SecurityRepository,
    TransactionRepository,
    WalletRepository,
)
from lot_ledger.portfolio import TransactionAction, rebuild_security
from lot_ledger.precision import round_currency, round_percent

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from lot_ledger.data.models import SecurityRecord
    from lot_ledger.portfolio import SecurityLedger

logger = structlog.get_logger()


async def load_security_ledger(session: AsyncSession, record: SecurityRecord) -> SecurityLedger:
    """Rebuild a security's ledger from stored history without writing anything."""
    txn_records = await TransactionRepository(session).list_for_security(record.id)
    return rebuild_security(
        security_record_to_domain(record),
        [transaction_record_to_domain(t) for t in txn_records],
    )


async def load_all_ledgers(
    session: AsyncSession, *, include_archived: bool = False
) -> list[SecurityLedger]:
    records = await SecurityRepository(session).list_all(include_archived=include_archived)
    return [await load_security_ledger(session, record) for record in records]


async def rebuild_and_store(session: AsyncSession, record: SecurityRecord) -> SecurityLedger:
    """
    Rebuild a security and persist wallets, cash-flow caches, per-sell P/L and Buy allocations.

    Args:
        session: Open session; this function commits it on success.
        record: Security to rebuild.

    Returns:
        The rebuilt ledger.

    Raises:
        InvalidTransactionError: If a stored transaction is malformed (nothing is written).
        InconsistentStateError: If stored Sells cannot be applied (nothing is written).
    """
    txn_records = await TransactionRepository(session).list_for_security(record.id)
    ledger = rebuild_security(
        security_record_to_domain(record),
        [transaction_record_to_domain(t) for t in txn_records],
    )

    try:
        await WalletRepository(session).replace_for_security(
            record.id, [wallet_to_record(w, record.id) for w in ledger.wallets]
        )

        cash_flow = ledger.cash_flow.rounded()
        record.total_out_of_pocket = cash_flow.total_out_of_pocket
        record.current_cash_balance = cash_flow.current_cash_balance
        record.split_adjustment_factor = ledger.split_factor

        by_id = {str(t.id): t for t in txn_records}
        for adjusted in ledger.adjusted:
            txn = adjusted.original
            txn_record = by_id.get(txn.id or "")
            if txn_record is None or txn.action is not TransactionAction.BUY:
                continue
            if txn_record.swing_shares is None or txn_record.hold_shares is None:
                txn_record.swing_shares = txn.swing_shares
                txn_record.hold_shares = txn.hold_shares

        for sell in ledger.sells:
            txn_record = by_id.get(sell.transaction.id or "")
            if txn_record is None:
                continue
            txn_record.txn_profit = round_currency(sell.realized_pl)
            percent = sell.realized_pl_percent
            txn_record.txn_profit_percent = None if percent is None else round_percent(percent)

        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "Stored rebuilt wallets",
        symbol=record.symbol,
        wallets=len(ledger.wallets),
        total_out_of_pocket=record.total_out_of_pocket,
        current_cash_balance=record.current_cash_balance,
    )
    return ledger
