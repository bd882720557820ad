"""Unit tests for engine dataclasses."""

from __future__ import annotations

from datetime import date

from lot_ledger.portfolio import (
    StrategyType,
    Transaction,
    TransactionAction,
    TxnType,
    Wallet,
    sort_transactions,
    wallet_key,
)


class TestSecurityTargetPercent:
    def test_swing_uses_stp(self, make_security) -> None:
        assert make_security(stp=8.0).target_percent_for(StrategyType.SWING) == 8.0

    def test_swing_falls_back_to_pdp_times_plr(self, make_security) -> None:
        security = make_security(stp=None, pdp=3.0, plr=2.0)

        assert security.target_percent_for(StrategyType.SWING) == 6.0

    def test_hold_uses_htp(self, make_security) -> None:
        assert make_security(htp=25.0).target_percent_for(StrategyType.HOLD) == 25.0

    def test_unset_is_zero(self, make_security) -> None:
        security = make_security(stp=None, plr=None, htp=None)

        assert security.target_percent_for(StrategyType.SWING) == 0.0
        assert security.target_percent_for(StrategyType.HOLD) == 0.0


class TestTransaction:
    def test_buy_investment_falls_back_to_price_times_quantity(self) -> None:
        txn = Transaction(TransactionAction.BUY, date(2024, 1, 1), price=20.0, quantity=3.0)

        assert txn.buy_investment == 60.0

    def test_sale_proceeds_prefers_amount(self) -> None:
        txn = Transaction(
            TransactionAction.SELL, date(2024, 1, 1), price=20.0, quantity=3.0, amount=-5.0
        )

        assert txn.sale_proceeds == -5.0

    def test_txn_type_to_strategy(self) -> None:
        assert TxnType.SWING.to_strategy() is StrategyType.SWING
        assert TxnType.HOLD.to_strategy() is StrategyType.HOLD
        assert TxnType.SPLIT.to_strategy() is None


class TestWallet:
    def test_realized_pl_percent(self) -> None:
        wallet = Wallet(buy_price=100.0, strategy=StrategyType.SWING, target_price=110.0)
        wallet.shares_sold = 5.0
        wallet.realized_pl = 50.0

        assert wallet.realized_pl_percent == 10.0

    def test_realized_pl_percent_without_sales_is_zero(self) -> None:
        wallet = Wallet(buy_price=100.0, strategy=StrategyType.SWING, target_price=110.0)

        assert wallet.realized_pl_percent == 0.0

    def test_realized_pl_percent_without_cost_basis_is_none(self) -> None:
        wallet = Wallet(buy_price=0.0, strategy=StrategyType.SWING, target_price=0.0)
        wallet.realized_pl = 3.0

        assert wallet.realized_pl_percent is None

    def test_tiny_remainder_is_inactive(self) -> None:
        wallet = Wallet(
            buy_price=100.0,
            strategy=StrategyType.HOLD,
            target_price=120.0,
            remaining_shares=0.00000001,
        )

        assert wallet.is_active is False
        assert wallet.tied_up_investment == 0.0

    def test_tied_up_investment(self) -> None:
        wallet = Wallet(
            buy_price=100.0, strategy=StrategyType.HOLD, target_price=120.0, remaining_shares=2.5
        )

        assert wallet.tied_up_investment == 250.0


def test_wallet_key_rounds_price_to_four_decimals() -> None:
    assert wallet_key(100.00004, StrategyType.SWING) == wallet_key(100.0, StrategyType.SWING)
    assert wallet_key(100.0001, StrategyType.SWING) != wallet_key(100.0, StrategyType.SWING)
    assert wallet_key(100.0, StrategyType.SWING) != wallet_key(100.0, StrategyType.HOLD)


def test_sort_transactions_is_stable_within_a_date() -> None:
    a = Transaction(TransactionAction.BUY, date(2024, 1, 2), id="a")
    b = Transaction(TransactionAction.SELL, date(2024, 1, 2), id="b")
    c = Transaction(TransactionAction.BUY, date(2024, 1, 1), id="c")

    assert [t.id for t in sort_transactions([a, b, c])] == ["c", "a", "b"]
