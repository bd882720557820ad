"""Full re-derivation of one security's wallets and cash flow.

A rebuild takes the complete stored history and returns every derived value at once. Nothing is
returned until the whole history has been applied, so a failed rebuild leaves callers with their
previous state untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from lot_ledger.portfolio._allocation import with_allocation
from lot_ledger.portfolio._models import TransactionAction, sort_transactions
from lot_ledger.portfolio.cashflow import replay_cash_flow
from lot_ledger.portfolio.splits import (
    derive_effective_transactions,
    extract_stock_splits,
    total_split_factor,
)
from lot_ledger.portfolio.validation import validate_transactions
from lot_ledger.portfolio.wallets import build_wallets

if TYPE_CHECKING:
    from collections.abc import Iterable

    from lot_ledger.portfolio._models import CashFlowState, Security, Transaction, Wallet
    from lot_ledger.portfolio.splits import AdjustedTransaction
    from lot_ledger.portfolio.wallets import SellResult

logger = structlog.get_logger()


@dataclass
class SecurityLedger:
    """Everything derived from one security's transaction history."""

    security: Security
    adjusted: list[AdjustedTransaction]
    wallets: list[Wallet]
    sells: list[SellResult]
    cash_flow: CashFlowState
    split_factor: float

    @property
    def effective_transactions(self) -> list[Transaction]:
        return [a.effective for a in self.adjusted]

    @property
    def active_wallets(self) -> list[Wallet]:
        return [w for w in self.wallets if w.is_active]

    @property
    def last_buy(self) -> Transaction | None:
        """Most recent Buy in post-split units."""
        buys = [t for t in self.effective_transactions if t.action is TransactionAction.BUY]
        return buys[-1] if buys else None

    @property
    def tied_up(self) -> float:
        return sum(w.tied_up_investment for w in self.wallets)


def rebuild_security(security: Security, transactions: Iterable[Transaction]) -> SecurityLedger:
    """
    Re-derive wallets and cash flow from a security's full history.

    Steps: order by date, validate every entry, fix each Buy's Swing/Hold allocation in the
    units it was recorded in, express the history in post-split units, build wallets, and
    replay cash flow. Running it twice on the same history gives identical results.

    Args:
        security: Security configuration.
        transactions: Stored history in any order (same-date entries in insertion order).

    Returns:
        SecurityLedger with wallets, per-sell results and cash-flow state.

    Raises:
        InvalidTransactionError: If any transaction is malformed.
        InconsistentStateError: If a Sell has no wallet or oversells it.
    """
    ordered = sort_transactions(transactions)
    validate_transactions(ordered)

    allocated = [with_allocation(txn, security) for txn in ordered]
    adjusted = derive_effective_transactions(allocated)
    build = build_wallets([a.effective for a in adjusted], security)
    cash_flow = replay_cash_flow(ordered).state

    ledger = SecurityLedger(
        security=security,
        adjusted=adjusted,
        wallets=build.wallets,
        sells=build.sells,
        cash_flow=cash_flow,
        split_factor=total_split_factor(extract_stock_splits(ordered)),
    )
    logger.info(
        "Rebuilt security ledger",
        symbol=security.symbol,
        transactions=len(ordered),
        wallets=len(ledger.wallets),
        active_wallets=len(ledger.active_wallets),
        total_out_of_pocket=cash_flow.total_out_of_pocket,
        current_cash_balance=cash_flow.current_cash_balance,
    )
    return ledger
