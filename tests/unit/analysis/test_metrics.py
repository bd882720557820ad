"""Tests for portfolio roll-up metrics."""

from __future__ import annotations

from datetime import date

import pytest

from lot_ledger.analysis import (
    GroupBy,
    calculate_grouped_metrics,
    calculate_portfolio_totals,
    calculate_roic,
    calculate_security_overview,
    normalize_group_by,
)
from lot_ledger.portfolio import rebuild_security

JAN_1 = date(2024, 1, 1)
JAN_2 = date(2024, 1, 2)


@pytest.fixture
def ledgers(make_security, buy):
    """US, hidden EU, archived US and an unknown-region security."""
    return [
        rebuild_security(
            make_security("AAA", region="US", budget=2000.0),
            [buy(JAN_1, 100.0, 1000.0)],
        ),
        rebuild_security(
            make_security("BBB", region="EU", budget=500.0, is_hidden=True),
            [buy(JAN_1, 10.0, 200.0)],
        ),
        rebuild_security(
            make_security("CCC", region="US", budget=999.0, is_archived=True),
            [buy(JAN_1, 10.0, 100.0)],
        ),
        rebuild_security(
            make_security("DDD", region="Mars", budget=100.0),
            [buy(JAN_1, 10.0, 100.0)],
        ),
    ]


class TestRoic:
    def test_roic(self) -> None:
        assert calculate_roic(50.0, 1100.0, 1000.0) == pytest.approx(15.0)

    def test_zero_oop_is_zero(self) -> None:
        assert calculate_roic(25.0, None, 0.0) == 0.0

    def test_unknown_market_value(self) -> None:
        assert calculate_roic(0.0, None, 100.0) is None


class TestSecurityOverview:
    def test_with_price(self, make_security, buy, sell) -> None:
        ledger = rebuild_security(
            make_security(budget=3000.0),
            [buy(JAN_1, 100.0, 1000.0), sell(JAN_2, 120.0, 5.0, wallet_price=100.0)],
        )

        overview = calculate_security_overview(ledger, 110.0)

        assert overview.total_out_of_pocket == 1000.0
        assert overview.current_cash_balance == 600.0
        assert overview.tied_up == pytest.approx(500.0)
        assert overview.market_value == pytest.approx(550.0)
        assert overview.roic == pytest.approx(15.0)
        assert overview.budget_used == 400.0
        assert overview.budget_available == 2600.0
        assert overview.realized_pl == 100.0
        assert overview.unrealized_pl == 50.0
        assert overview.active_wallets == 1

    def test_falls_back_to_test_price(self, make_security, buy) -> None:
        ledger = rebuild_security(make_security(test_price=90.0), [buy(JAN_1, 100.0, 1000.0)])

        overview = calculate_security_overview(ledger, None)

        assert overview.current_price == 90.0
        assert overview.market_value == pytest.approx(900.0)

    def test_without_any_price(self, make_security, buy) -> None:
        ledger = rebuild_security(make_security(), [buy(JAN_1, 100.0, 1000.0)])

        overview = calculate_security_overview(ledger, None)

        assert overview.market_value is None
        assert overview.roic is None
        assert overview.unrealized_pl is None
        assert overview.budget_available is None


class TestGroupedMetrics:
    def test_every_group_in_canonical_order(self, ledgers) -> None:
        groups = calculate_grouped_metrics(ledgers, {}, GroupBy.REGION)

        assert [g.group_name for g in groups] == ["APAC", "EU", "Intl", "US"]

    def test_empty_groups_are_zero(self, ledgers) -> None:
        apac = calculate_grouped_metrics(ledgers, {}, GroupBy.REGION)[0]

        assert apac.securities == 0
        assert apac.oop == 0.0
        assert apac.roic == 0.0
        assert apac.budget_available == 0.0

    def test_group_figures(self, ledgers) -> None:
        prices = {"AAA": 110.0, "BBB": 12.0, "CCC": 50.0}

        metrics = calculate_grouped_metrics(ledgers, prices, GroupBy.REGION)
        groups = {g.group_name: g for g in metrics}

        us = groups["US"]
        assert us.securities == 1
        assert us.max_risk == 2000.0
        assert us.oop == 1000.0
        assert us.market_value == pytest.approx(1100.0)
        assert us.roic == pytest.approx(10.0)
        assert us.budget_available == 1000.0

        eu = groups["EU"]
        assert eu.max_risk == 0.0
        assert eu.oop == 200.0
        assert eu.market_value == pytest.approx(240.0)
        assert eu.roic == pytest.approx(20.0)
        assert eu.budget_available == -200.0

    def test_missing_price_is_skipped(self, ledgers) -> None:
        us = calculate_grouped_metrics(ledgers, {}, GroupBy.REGION)[3]

        assert us.market_value == 0.0
        assert us.oop == 1000.0

    def test_market_category_display_names(self, make_security, buy) -> None:
        ledger = rebuild_security(
            make_security(market_category="US_Index"), [buy(JAN_1, 10.0, 100.0)]
        )

        groups = calculate_grouped_metrics([ledger], {}, GroupBy.MARKET_CATEGORY)

        us_index = next(g for g in groups if g.group_name == "US_Index")
        assert us_index.display_name == "US Index"
        assert us_index.securities == 1

    def test_portfolio_totals_skip_archived(self, ledgers) -> None:
        total = calculate_portfolio_totals(ledgers, {})

        assert total.securities == 3
        assert total.oop == 1300.0
        assert total.max_risk == 2100.0


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("region", GroupBy.REGION),
        ("Category", GroupBy.MARKET_CATEGORY),
        (" risk ", GroupBy.RISK_GROWTH_PROFILE),
        ("market-category", GroupBy.MARKET_CATEGORY),
        ("sector", None),
    ],
)
def test_normalize_group_by(value, expected) -> None:
    assert normalize_group_by(value) is expected
