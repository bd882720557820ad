"""Buy allocation between the Swing and Hold strategies."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

from lot_ledger.constants import DEFAULT_SWING_HOLD_RATIO, SHARE_EPSILON
from lot_ledger.portfolio._models import BuyAllocation, TransactionAction, TxnType
from lot_ledger.precision import is_zero_shares, round_shares

if TYPE_CHECKING:
    from lot_ledger.portfolio._models import Security, Transaction


def swing_fraction(txn_type: TxnType | None, swing_hold_ratio: float | None) -> float:
    """
    Fraction of a Buy routed to Swing.

    Swing and Hold Buys go entirely to that strategy. Ratio-split Buys (and Buys without a type)
    use the security's ratio, falling back to 50% when the ratio is missing or outside 0..100.
    """
    if txn_type is TxnType.SWING:
        return 1.0
    if txn_type is TxnType.HOLD:
        return 0.0
    if swing_hold_ratio is None or not 0 <= swing_hold_ratio <= 100:
        return DEFAULT_SWING_HOLD_RATIO / 100
    return swing_hold_ratio / 100


def allocate_buy(txn: Transaction, security: Security) -> BuyAllocation:
    """
    Split a Buy's shares and investment between Swing and Hold.

    A Buy that already carries ``swing_shares`` and ``hold_shares`` keeps them; investment is
    then divided in the same proportion. Otherwise shares are ``investment / price`` at share
    precision (or the recorded quantity), the Swing and Hold parts are rounded independently,
    and the Hold part absorbs any drift larger than a tenth of SHARE_EPSILON.

    Args:
        txn: A validated Buy transaction.
        security: Owning security (for its swing/hold ratio).

    Returns:
        BuyAllocation for the Buy.
    """
    price = txn.price or 0.0
    investment = txn.buy_investment or 0.0

    if txn.swing_shares is not None and txn.hold_shares is not None:
        swing_shares = txn.swing_shares
        hold_shares = txn.hold_shares
        quantity = swing_shares + hold_shares
        if quantity > 0:
            ratio = swing_shares / quantity
        else:
            ratio = swing_fraction(txn.txn_type, security.swing_hold_ratio)
    else:
        if txn.quantity is not None:
            quantity = txn.quantity
        else:
            quantity = round_shares(investment / price) if price > 0 else 0.0
        if is_zero_shares(quantity):
            quantity = 0.0

        ratio = swing_fraction(txn.txn_type, security.swing_hold_ratio)
        swing_shares = round_shares(quantity * ratio)
        hold_shares = round_shares(quantity * (1 - ratio))
        if abs(swing_shares + hold_shares - quantity) > SHARE_EPSILON / 10:
            hold_shares = round_shares(quantity - swing_shares)

    swing_investment = investment * ratio
    return BuyAllocation(
        quantity=quantity,
        swing_shares=swing_shares,
        hold_shares=hold_shares,
        swing_investment=swing_investment,
        hold_investment=investment - swing_investment,
    )


def with_allocation(txn: Transaction, security: Security) -> Transaction:
    """Return a Buy with its quantity and Swing/Hold shares filled in; other actions unchanged."""
    if txn.action is not TransactionAction.BUY:
        return txn
    allocation = allocate_buy(txn, security)
    return dataclasses.replace(
        txn,
        quantity=allocation.quantity,
        swing_shares=allocation.swing_shares,
        hold_shares=allocation.hold_shares,
    )
