"""Conversion helpers between database records and engine models."""

from __future__ import annotations

from typing import TYPE_CHECKING

from lot_ledger.data.models import TransactionRecord, WalletRecord
from lot_ledger.portfolio import Security, Transaction, TransactionAction, TxnType
from lot_ledger.precision import (
    round_currency,
    round_percent,
    round_shares,
    round_target_price,
)
from lot_ledger.pricing import calculate_lbd

if TYPE_CHECKING:
    from lot_ledger.data.models import SecurityRecord
    from lot_ledger.portfolio import Wallet


def security_record_to_domain(record: SecurityRecord) -> Security:
    """Convert a stored security to the engine's Security."""
    return Security(
        symbol=record.symbol,
        swing_hold_ratio=record.swing_hold_ratio,
        pdp=record.pdp,
        plr=record.plr,
        stp=record.stp,
        htp=record.htp,
        commission=record.commission,
        budget=record.budget,
        name=record.name,
        stock_type=record.stock_type,
        region=record.region,
        market_category=record.market_category,
        risk_growth_profile=record.risk_growth_profile,
        test_price=record.test_price,
        is_hidden=record.is_hidden,
        is_archived=record.is_archived,
    )


def transaction_record_to_domain(record: TransactionRecord) -> Transaction:
    """Convert a stored transaction to the engine's Transaction."""
    return Transaction(
        id=str(record.id),
        action=TransactionAction(record.action),
        date=record.txn_date,
        price=record.price,
        investment=record.investment,
        quantity=record.quantity,
        swing_shares=record.swing_shares,
        hold_shares=record.hold_shares,
        amount=record.amount,
        txn_type=TxnType(record.txn_type) if record.txn_type else None,
        wallet_price=record.wallet_price,
        split_ratio=record.split_ratio,
        signal=record.signal,
    )


def wallet_to_record(wallet: Wallet, security_id: int) -> WalletRecord:
    """Convert a derived wallet to a record at storage precision.

    Shares keep 5 decimals, currency 2 and target prices 4. Buy prices are stored unrounded so
    that post-split prices stay exact.
    """
    realized_pl_percent = wallet.realized_pl_percent
    return WalletRecord(
        security_id=security_id,
        strategy=wallet.strategy.value,
        buy_price=wallet.buy_price,
        target_price=round_target_price(wallet.target_price),
        total_investment=round_currency(wallet.total_investment),
        total_shares=round_shares(wallet.total_shares),
        remaining_shares=round_shares(wallet.remaining_shares),
        shares_sold=round_shares(wallet.shares_sold),
        sell_txn_count=wallet.sell_txn_count,
        realized_pl=round_currency(wallet.realized_pl),
        realized_pl_percent=(
            None if realized_pl_percent is None else round_percent(realized_pl_percent)
        ),
    )


def transaction_to_record(
    txn: Transaction, security_id: int, security: Security
) -> TransactionRecord:
    """Build a new record for an entered transaction.

    Buys get their entry-time LBD from the security's current PDP and commission. A Buy's
    Swing/Hold shares are kept when already allocated (an imported export); otherwise the first
    rebuild fills them in.
    """
    lbd = None
    if txn.action is TransactionAction.BUY and txn.price and security.pdp is not None:
        lbd = calculate_lbd(txn.price, security.pdp, security.commission)
    return TransactionRecord(
        security_id=security_id,
        txn_date=txn.date,
        action=txn.action.value,
        signal=txn.signal,
        txn_type=txn.txn_type.value if txn.txn_type else None,
        price=txn.price,
        investment=txn.investment,
        quantity=txn.quantity,
        swing_shares=txn.swing_shares,
        hold_shares=txn.hold_shares,
        amount=txn.amount,
        wallet_price=txn.wallet_price,
        split_ratio=txn.split_ratio,
        lbd=lbd,
    )
