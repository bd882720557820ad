"""Tests for P&L calculations."""

from __future__ import annotations

import dataclasses
from datetime import date

import pytest

from lot_ledger.portfolio import PnLCalculator, StrategyType, TxnType, Wallet, rebuild_security

JAN_1 = date(2024, 1, 1)
JAN_2 = date(2024, 1, 2)


class TestPnLCalculator:
    def test_unrealized_pl(self) -> None:
        wallet = Wallet(
            buy_price=100.0, strategy=StrategyType.SWING, target_price=110.0, remaining_shares=4.0
        )

        assert PnLCalculator().calculate_unrealized(wallet, 105.0) == pytest.approx(20.0)

    def test_unrealized_unknown_without_price(self) -> None:
        wallet = Wallet(
            buy_price=100.0, strategy=StrategyType.SWING, target_price=110.0, remaining_shares=4.0
        )

        assert PnLCalculator().calculate_unrealized(wallet, None) is None

    def test_sold_out_wallet_has_no_unrealized(self) -> None:
        wallet = Wallet(buy_price=100.0, strategy=StrategyType.HOLD, target_price=120.0)

        assert PnLCalculator().calculate_unrealized(wallet, None) == 0.0

    def test_realized_by_strategy(self) -> None:
        swing = Wallet(buy_price=10.0, strategy=StrategyType.SWING, target_price=11.0)
        swing.realized_pl = 12.346
        hold = Wallet(buy_price=10.0, strategy=StrategyType.HOLD, target_price=12.0)
        hold.realized_pl = -2.0
        calc = PnLCalculator()

        assert calc.calculate_realized([swing, hold]) == 10.35
        assert calc.calculate_realized([swing, hold], StrategyType.SWING) == 12.35
        assert calc.calculate_realized([swing, hold], StrategyType.HOLD) == -2.0


class TestSummary:
    def test_summary_from_rebuild(self, make_security, buy, sell) -> None:
        history = [
            buy(JAN_1, 100.0, 1000.0),
            sell(JAN_2, 110.0, 2.0, wallet_price=100.0),
            sell(JAN_2, 95.0, 1.0, wallet_price=100.0, strategy=TxnType.HOLD),
        ]
        ledger = rebuild_security(make_security(), history)

        summary = PnLCalculator().calculate_summary(ledger.wallets, ledger.sells, 105.0)

        assert summary.realized_pl == 15.0
        assert summary.realized_swing_pl == 20.0
        assert summary.realized_hold_pl == -5.0
        # 3 swing + 4 hold shares left, 5 above cost each
        assert summary.unrealized_pl == 35.0
        assert summary.total_pl == 50.0
        assert summary.total_sells == 2
        assert [f.name for f in dataclasses.fields(summary)] == [
            "realized_pl",
            "realized_swing_pl",
            "realized_hold_pl",
            "unrealized_pl",
            "total_pl",
            "total_sells",
        ]

    def test_total_unknown_without_price(self, make_security, buy) -> None:
        ledger = rebuild_security(make_security(), [buy(JAN_1, 100.0, 1000.0)])

        summary = PnLCalculator().calculate_summary(ledger.wallets, ledger.sells, None)

        assert summary.unrealized_pl is None
        assert summary.total_pl is None
        assert summary.total_sells == 0
