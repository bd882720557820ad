"""Field validation for transactions before they reach the engine.

Missing numeric fields are never coerced to zero; they raise InvalidTransactionError so that a
malformed entry cannot corrupt wallet totals.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from lot_ledger.exceptions import InvalidTransactionError
from lot_ledger.portfolio._models import TransactionAction, TxnType

if TYPE_CHECKING:
    from collections.abc import Iterable

    from lot_ledger.portfolio._models import Transaction


def validate_transaction(txn: Transaction) -> None:
    """
    Check that a transaction carries the fields its action requires.

    Args:
        txn: Transaction to check.

    Raises:
        InvalidTransactionError: If a required field is missing or out of range.
    """
    if txn.action is TransactionAction.BUY:
        _require_positive(txn, "price", txn.price)
        investment = txn.buy_investment
        if investment is None:
            raise InvalidTransactionError("Buy requires an investment or quantity", txn_id=txn.id)
        _require_positive(txn, "investment", investment)
    elif txn.action is TransactionAction.SELL:
        _require_positive(txn, "price", txn.price)
        _require_positive(txn, "quantity", txn.quantity)
        if txn.txn_type is None or txn.txn_type is TxnType.SPLIT:
            raise InvalidTransactionError("Sell requires txn_type Swing or Hold", txn_id=txn.id)
        _require_positive(txn, "wallet_price", txn.wallet_price)
        if txn.amount is not None and math.isnan(txn.amount):
            raise InvalidTransactionError("Sell amount must be a number", txn_id=txn.id)
    elif txn.action in (TransactionAction.DIVIDEND, TransactionAction.SLP):
        if txn.amount is None or math.isnan(txn.amount):
            raise InvalidTransactionError(
                f"{txn.action.value} requires an amount", txn_id=txn.id
            )
    elif txn.action is TransactionAction.STOCK_SPLIT:
        _require_positive(txn, "split_ratio", txn.split_ratio)
    else:
        raise InvalidTransactionError(f"Unknown action {txn.action!r}", txn_id=txn.id)


def validate_transactions(transactions: Iterable[Transaction]) -> None:
    for txn in transactions:
        validate_transaction(txn)


def _require_positive(txn: Transaction, name: str, value: float | None) -> None:
    if value is None:
        raise InvalidTransactionError(
            f"{txn.action.value} requires {name}", txn_id=txn.id
        )
    if math.isnan(value) or value <= 0:
        raise InvalidTransactionError(
            f"{txn.action.value} {name} must be positive (got {value})", txn_id=txn.id
        )
