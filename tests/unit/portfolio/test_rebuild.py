"""Tests for full security rebuilds."""

from __future__ import annotations

from datetime import date

import pytest

from lot_ledger.exceptions import (
    InconsistentStateError,
    InvalidTransactionError,
    WalletNotFoundError,
)
from lot_ledger.constants import SHARE_EPSILON
from lot_ledger.portfolio import (
    TransactionAction,
    TxnType,
    cumulative_split_factor,
    extract_stock_splits,
    rebuild_security,
)
from lot_ledger.precision import round_shares

JAN_1 = date(2024, 1, 1)
JAN_2 = date(2024, 1, 2)
JAN_3 = date(2024, 1, 3)


def _snapshot(ledger):
    return (
        [
            (w.buy_price, w.strategy, w.remaining_shares, w.realized_pl, w.target_price)
            for w in ledger.wallets
        ],
        ledger.cash_flow,
    )


def test_rebuild_is_idempotent(make_security, buy, sell, make_txn) -> None:
    history = [
        buy(JAN_1, 100.0, 1000.0),
        make_txn(TransactionAction.DIVIDEND, JAN_2, amount=10.0),
        sell(JAN_3, 112.0, 3.0, wallet_price=100.0),
    ]

    first = rebuild_security(make_security(), history)
    second = rebuild_security(make_security(), history)

    assert _snapshot(first) == _snapshot(second)


def test_history_order_of_input_does_not_matter(make_security, buy, sell) -> None:
    b = buy(JAN_1, 100.0, 1000.0)
    s = sell(JAN_2, 110.0, 1.0, wallet_price=100.0)

    ledger = rebuild_security(make_security(), [s, b])

    assert ledger.sells[0].realized_pl == pytest.approx(10.0)
    assert [a.original.id for a in ledger.adjusted] == [b.id, s.id]


def test_same_date_entries_keep_insertion_order(make_security, buy, sell) -> None:
    b = buy(JAN_1, 100.0, 1000.0)
    s = sell(JAN_1, 110.0, 1.0, wallet_price=100.0)

    ledger = rebuild_security(make_security(), [b, s])

    assert len(ledger.sells) == 1

    with pytest.raises(WalletNotFoundError):
        rebuild_security(make_security(), [s, b])


def test_invalid_history_raises_before_building(make_security, buy, make_txn) -> None:
    history = [buy(JAN_1, 100.0, 1000.0), make_txn(TransactionAction.STOCK_SPLIT, JAN_2)]

    with pytest.raises(InvalidTransactionError, match="split_ratio"):
        rebuild_security(make_security(), history)


def test_inconsistent_history_raises(make_security, buy, sell) -> None:
    history = [buy(JAN_1, 100.0, 1000.0), sell(JAN_2, 110.0, 50.0, wallet_price=100.0)]

    with pytest.raises(InconsistentStateError):
        rebuild_security(make_security(), history)


def test_commission_adjusted_target_nets_exact_profit(make_security, buy, sell) -> None:
    security = make_security(stp=None, pdp=3.0, plr=2.0, commission=10.0)
    history = [
        buy(JAN_1, 100.0, 300.0, txn_type=TxnType.SWING),
        sell(JAN_2, 117.7778, 3.0, wallet_price=100.0),
    ]

    ledger = rebuild_security(security, history)

    assert ledger.wallets[0].target_price == 117.7778
    assert round(ledger.sells[0].realized_pl, 2) == 18.00


def test_ledger_derived_views(make_security, buy, sell) -> None:
    history = [
        buy(JAN_1, 100.0, 1000.0),
        buy(JAN_2, 90.0, 900.0, txn_type=TxnType.SWING),
        sell(JAN_3, 110.0, 5.0, wallet_price=100.0),
    ]

    ledger = rebuild_security(make_security(), history)

    assert ledger.last_buy is not None
    assert ledger.last_buy.price == 90.0
    assert ledger.tied_up == pytest.approx(500.0 + 900.0)
    assert len(ledger.active_wallets) == 2
    assert ledger.cash_flow.total_out_of_pocket == 1900.0
    assert ledger.cash_flow.current_cash_balance == 550.0
    assert ledger.split_factor == 1.0


def test_empty_history(make_security) -> None:
    ledger = rebuild_security(make_security(), [])

    assert ledger.wallets == []
    assert ledger.last_buy is None
    assert ledger.cash_flow.total_out_of_pocket == 0.0


def _expected_remaining(history) -> float:
    """Buy shares minus Sell shares, each scaled into post-split units."""
    splits = extract_stock_splits(history)
    total = 0.0
    for txn in history:
        factor = cumulative_split_factor(txn.date, splits)
        if txn.action is TransactionAction.BUY:
            total += round_shares(txn.investment / txn.price) * factor
        elif txn.action is TransactionAction.SELL:
            total -= txn.quantity * factor
    return total


def test_active_shares_net_to_buys_minus_sells_after_every_step(
    make_security, buy, sell, split
) -> None:
    security = make_security(swing_hold_ratio=33.0)
    history = [
        buy(JAN_1, 3.0, 100.0),
        buy(JAN_2, 7.0, 100.0, txn_type=TxnType.HOLD),
        sell(JAN_3, 3.5, 4.5, wallet_price=3.0),
        split(date(2024, 2, 1), 2.0),
        buy(date(2024, 3, 1), 1.5, 50.0),
        sell(date(2024, 3, 2), 4.0, 10.0, wallet_price=3.5, strategy=TxnType.HOLD),
        sell(date(2024, 3, 3), 1.8, 24.0, wallet_price=1.5),
        sell(date(2024, 3, 4), 1.7, 20.5, wallet_price=1.5, strategy=TxnType.HOLD),
    ]

    for step in range(1, len(history) + 1):
        prefix = history[:step]
        ledger = rebuild_security(security, prefix)

        remaining = sum(w.remaining_shares for w in ledger.active_wallets)
        assert remaining == pytest.approx(_expected_remaining(prefix), abs=SHARE_EPSILON)
        assert all(w.remaining_shares >= 0 for w in ledger.wallets)

    assert len(ledger.wallets) == 3
    assert [w.strategy for w in ledger.active_wallets] == [TxnType.HOLD.to_strategy()] * 2
