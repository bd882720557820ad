"""Tests for the cash-flow state machine."""

from __future__ import annotations

from datetime import date

import pytest

from lot_ledger.exceptions import InvalidTransactionError
from lot_ledger.portfolio import (
    CashFlowState,
    TransactionAction,
    TxnType,
    apply_transaction,
    replay_cash_flow,
    should_highlight_cash_balance,
)

D = date(2024, 1, 2)


class TestApplyTransaction:
    def test_buy_from_empty_state_is_out_of_pocket(self, buy) -> None:
        state = apply_transaction(CashFlowState(), buy(D, 100.0, 300.0))

        assert state == CashFlowState(300.0, 0.0)

    def test_buy_paid_from_cash_first(self, buy) -> None:
        state = apply_transaction(CashFlowState(300.0, 400.0), buy(D, 100.0, 250.0))

        assert state == CashFlowState(300.0, 150.0)

    def test_buy_shortfall_adds_out_of_pocket(self, buy) -> None:
        state = apply_transaction(CashFlowState(300.0, 150.0), buy(D, 100.0, 200.0))

        assert state == CashFlowState(350.0, 0.0)

    def test_buy_with_quantity_only_uses_price_times_quantity(self, make_txn) -> None:
        txn = make_txn(TransactionAction.BUY, D, price=20.0, quantity=5.0)

        assert apply_transaction(CashFlowState(), txn) == CashFlowState(100.0, 0.0)

    def test_sell_adds_gross_proceeds(self, sell) -> None:
        state = apply_transaction(CashFlowState(300.0, 0.0), sell(D, 100.0, 4.0, wallet_price=90.0))

        assert state == CashFlowState(300.0, 400.0)

    def test_sell_explicit_amount_overrides_proceeds(self, sell) -> None:
        txn = sell(D, 100.0, 4.0, wallet_price=90.0, amount=396.0)

        assert apply_transaction(CashFlowState(300.0, 0.0), txn) == CashFlowState(300.0, 396.0)

    def test_negative_proceeds_reduce_cash(self, sell) -> None:
        txn = sell(D, 100.0, 4.0, wallet_price=90.0, amount=-50.0)

        assert apply_transaction(CashFlowState(300.0, 80.0), txn) == CashFlowState(300.0, 30.0)

    def test_negative_proceeds_floor_cash_at_zero(self, sell) -> None:
        txn = sell(D, 100.0, 4.0, wallet_price=90.0, amount=-50.0)

        assert apply_transaction(CashFlowState(300.0, 20.0), txn) == CashFlowState(300.0, 0.0)

    @pytest.mark.parametrize("action", [TransactionAction.DIVIDEND, TransactionAction.SLP])
    def test_income_adds_to_cash(self, make_txn, action) -> None:
        txn = make_txn(action, D, amount=12.5)

        assert apply_transaction(CashFlowState(300.0, 0.0), txn) == CashFlowState(300.0, 12.5)

    def test_split_has_no_effect(self, split) -> None:
        state = CashFlowState(300.0, 25.0)

        assert apply_transaction(state, split(D, 2.0)) == state

    def test_invalid_transaction_raises(self, make_txn) -> None:
        txn = make_txn(TransactionAction.DIVIDEND, D)

        with pytest.raises(InvalidTransactionError, match="requires an amount"):
            apply_transaction(CashFlowState(), txn)


class TestReplayCashFlow:
    def test_buy_sell_buy_buy_scenario(self, buy, sell) -> None:
        history = [
            buy(date(2024, 1, 1), 100.0, 300.0),
            sell(date(2024, 1, 2), 100.0, 4.0, wallet_price=100.0),
            buy(date(2024, 1, 3), 100.0, 250.0),
            buy(date(2024, 1, 4), 100.0, 200.0),
        ]

        replay = replay_cash_flow(history)

        assert [step.after for step in replay.steps] == [
            CashFlowState(300.0, 0.0),
            CashFlowState(300.0, 400.0),
            CashFlowState(300.0, 150.0),
            CashFlowState(350.0, 0.0),
        ]
        assert replay.state == CashFlowState(350.0, 0.0)
        assert replay.steps[0].before == CashFlowState()

    def test_replay_is_deterministic(self, buy, sell, make_txn) -> None:
        history = [
            buy(date(2024, 1, 1), 10.0, 1000.0),
            make_txn(TransactionAction.DIVIDEND, date(2024, 1, 5), amount=15.0),
            sell(date(2024, 1, 9), 12.0, 50.0, wallet_price=10.0, strategy=TxnType.HOLD),
        ]

        assert replay_cash_flow(history).state == replay_cash_flow(history).state

    def test_empty_history(self) -> None:
        assert replay_cash_flow([]).state == CashFlowState(0.0, 0.0)

    def test_rounded(self) -> None:
        state = CashFlowState(100.004, 0.3333333)

        assert state.rounded() == CashFlowState(100.0, 0.33)


@pytest.mark.parametrize(
    ("proceeds", "expected"),
    [(-0.01, True), (0.0, False), (25.0, False), (None, False)],
)
def test_should_highlight_cash_balance(proceeds, expected) -> None:
    assert should_highlight_cash_balance(proceeds) is expected
