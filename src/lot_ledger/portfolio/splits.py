"""Stock-split propagation as a pure transform.

Stored transactions are never rewritten. Instead the history is mapped to an "effective" history
in post-split units: every Buy and Sell dated strictly before a split has its prices divided by
the split ratio and its share counts multiplied by it. Investment, proceeds and income amounts
are unit-independent and pass through unchanged, so total investment and realized P/L are the
same before and after a split-aware rebuild.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import TYPE_CHECKING

from lot_ledger.portfolio._models import TransactionAction

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import date

    from lot_ledger.portfolio._models import Transaction


@dataclass(frozen=True)
class AdjustedTransaction:
    """A stored transaction alongside its split-adjusted form."""

    original: Transaction
    effective: Transaction
    split_factor: float

    @property
    def was_adjusted(self) -> bool:
        return self.split_factor != 1.0


def extract_stock_splits(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Return StockSplit transactions in date order."""
    splits = [t for t in transactions if t.action is TransactionAction.STOCK_SPLIT]
    return sorted(splits, key=lambda t: t.date)


def cumulative_split_factor(on: date, splits: Sequence[Transaction]) -> float:
    """Product of the ratios of all splits dated strictly after ``on``."""
    factor = 1.0
    for split in splits:
        if split.date > on and split.split_ratio:
            factor *= split.split_ratio
    return factor


def total_split_factor(splits: Sequence[Transaction]) -> float:
    """Product of every split ratio (a security's current adjustment factor)."""
    factor = 1.0
    for split in splits:
        if split.split_ratio:
            factor *= split.split_ratio
    return factor


def split_adjust_price(price: float, factor: float) -> float:
    return price / factor


def split_adjust_shares(shares: float, factor: float) -> float:
    return shares * factor


def adjust_transaction(txn: Transaction, factor: float) -> Transaction:
    """
    Express a transaction in post-split units.

    Buy: price / factor, quantity and allocated shares * factor.
    Sell: price and wallet price / factor, quantity * factor.
    Both record the factor in ``split_factor`` so their recorded units stay recoverable.
    Other actions are returned unchanged.
    """
    if factor == 1.0:
        return txn

    if txn.action is TransactionAction.BUY:
        return dataclasses.replace(
            txn,
            price=_scale_price(txn.price, factor),
            quantity=_scale_shares(txn.quantity, factor),
            swing_shares=_scale_shares(txn.swing_shares, factor),
            hold_shares=_scale_shares(txn.hold_shares, factor),
            split_factor=txn.split_factor * factor,
        )
    if txn.action is TransactionAction.SELL:
        return dataclasses.replace(
            txn,
            price=_scale_price(txn.price, factor),
            quantity=_scale_shares(txn.quantity, factor),
            wallet_price=_scale_price(txn.wallet_price, factor),
            split_factor=txn.split_factor * factor,
        )
    return txn


def derive_effective_transactions(
    transactions: Sequence[Transaction],
) -> list[AdjustedTransaction]:
    """
    Map a chronologically ordered history to split-adjusted form.

    A split dated D applies to transactions dated strictly before D; same-day entries are taken
    to be recorded in post-split units already.

    Args:
        transactions: Validated history in chronological order.

    Returns:
        One AdjustedTransaction per input, in the same order.
    """
    splits = extract_stock_splits(transactions)
    adjusted: list[AdjustedTransaction] = []
    for txn in transactions:
        factor = cumulative_split_factor(txn.date, splits)
        adjusted.append(
            AdjustedTransaction(
                original=txn,
                effective=adjust_transaction(txn, factor),
                split_factor=factor,
            )
        )
    return adjusted


def split_adjusted_test_price(test_price: float | None, ratio: float) -> float | None:
    """Rescale a manually entered test price when a new split is recorded."""
    if test_price is None:
        return None
    return split_adjust_price(test_price, ratio)


def _scale_price(price: float | None, factor: float) -> float | None:
    return None if price is None else split_adjust_price(price, factor)


def _scale_shares(shares: float | None, factor: float) -> float | None:
    return None if shares is None else split_adjust_shares(shares, factor)
