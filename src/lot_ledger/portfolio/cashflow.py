"""Cash-flow state machine: out-of-pocket capital and reinvestable cash.

The state is a fold over a security's transaction history. Persisted values are a cache and are
recomputed by replaying every transaction whenever the history changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from lot_ledger.portfolio._models import CashFlowState, TransactionAction
from lot_ledger.portfolio.validation import validate_transaction

if TYPE_CHECKING:
    from collections.abc import Iterable

    from lot_ledger.portfolio._models import Transaction

logger = structlog.get_logger()


@dataclass(frozen=True)
class CashFlowStep:
    """State after applying one transaction."""

    transaction: Transaction
    before: CashFlowState
    after: CashFlowState


@dataclass(frozen=True)
class CashFlowReplay:
    """Result of replaying a transaction history."""

    state: CashFlowState
    steps: list[CashFlowStep]


def apply_transaction(state: CashFlowState, txn: Transaction) -> CashFlowState:
    """
    Apply one transaction to a cash-flow state.

    Rules:
    - Buy of A: paid from cash first; any shortfall is new out-of-pocket and cash drops to 0.
    - Sell with proceeds P >= 0: cash += P. Negative proceeds reduce cash, floored at 0.
    - Div/SLP of D: cash += D.
    - StockSplit: no effect.

    Both fields are clamped to >= 0 afterwards.

    Raises:
        InvalidTransactionError: If the transaction lacks the fields its action needs.
    """
    validate_transaction(txn)

    oop = state.total_out_of_pocket
    cash = state.current_cash_balance

    if txn.action is TransactionAction.BUY:
        investment = txn.buy_investment or 0.0
        if cash >= investment:
            cash -= investment
        else:
            oop += investment - cash
            cash = 0.0
    elif txn.action is TransactionAction.SELL:
        proceeds = txn.sale_proceeds or 0.0
        if proceeds >= 0:
            cash += proceeds
        else:
            cash = max(0.0, cash - abs(proceeds))
    elif txn.action in (TransactionAction.DIVIDEND, TransactionAction.SLP):
        cash += txn.amount or 0.0

    return CashFlowState(total_out_of_pocket=max(0.0, oop), current_cash_balance=max(0.0, cash))


def replay_cash_flow(
    transactions: Iterable[Transaction],
    initial: CashFlowState | None = None,
) -> CashFlowReplay:
    """Replay transactions (already in chronological order) from an empty state."""
    state = initial or CashFlowState()
    steps: list[CashFlowStep] = []
    for txn in transactions:
        after = apply_transaction(state, txn)
        steps.append(CashFlowStep(transaction=txn, before=state, after=after))
        state = after

    logger.debug(
        "Replayed cash flow",
        transactions=len(steps),
        total_out_of_pocket=state.total_out_of_pocket,
        current_cash_balance=state.current_cash_balance,
    )
    return CashFlowReplay(state=state, steps=steps)


def should_highlight_cash_balance(sale_proceeds: float | None) -> bool:
    """Negative proceeds draw down cash and are highlighted in the transaction form."""
    return sale_proceeds is not None and sale_proceeds < 0
