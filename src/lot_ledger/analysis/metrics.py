"""Portfolio roll-up metrics.

Per-security and per-group figures derived from rebuilt ledgers and a symbol→price map:

- OOP and cash balance come from each security's cash-flow state.
- Tied-up capital is the cost of shares still held (buy price * remaining shares).
- Market value is remaining shares * effective price over active wallets.
- ROIC = (cash + market value - OOP) / OOP * 100, defined as 0 when OOP is 0.
- Budget used = OOP - cash; budget available = (budget - OOP) + cash.

A missing price is a normal state: the security's market value and ROIC become None, and group
totals skip it rather than failing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from lot_ledger.analysis.groups import GROUP_ORDERS, format_group_name, group_key
from lot_ledger.portfolio import PnLCalculator
from lot_ledger.precision import is_zero_currency
from lot_ledger.pricing import get_effective_price

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from lot_ledger.analysis.groups import GroupBy
    from lot_ledger.portfolio import SecurityLedger

logger = structlog.get_logger()


@dataclass(frozen=True)
class SecurityOverview:
    """Overview figures for one security."""

    symbol: str
    current_price: float | None
    budget: float | None
    total_out_of_pocket: float
    current_cash_balance: float
    tied_up: float
    market_value: float | None
    roic: float | None
    budget_used: float
    budget_available: float | None
    realized_pl: float
    unrealized_pl: float | None
    active_wallets: int


@dataclass(frozen=True)
class GroupMetrics:
    """Roll-up figures for one group of securities."""

    group_name: str
    display_name: str
    max_risk: float
    oop: float
    cash_balance: float
    tied_up: float
    market_value: float
    roic: float
    budget_used: float
    budget_available: float
    securities: int


def calculate_roic(cash_balance: float, market_value: float | None, oop: float) -> float | None:
    """Return on initial capital in percent; 0 when OOP is 0, None without market value."""
    if is_zero_currency(oop):
        return 0.0
    if market_value is None:
        return None
    return (cash_balance + market_value - oop) / oop * 100


def calculate_market_value(ledger: SecurityLedger, current_price: float | None) -> float | None:
    """Market value of active wallets; None if there are holdings but no price."""
    active = ledger.active_wallets
    if not active:
        return 0.0
    if current_price is None:
        return None
    return sum(w.remaining_shares * current_price for w in active)


def calculate_security_overview(
    ledger: SecurityLedger, current_price: float | None
) -> SecurityOverview:
    """
    Calculate overview figures for a single security.

    Args:
        ledger: Rebuilt ledger for the security.
        current_price: Fetched price; the security's test price is used when this is
            missing or zero.
    """
    security = ledger.security
    price = get_effective_price(current_price, security.test_price)
    oop = ledger.cash_flow.total_out_of_pocket
    cash = ledger.cash_flow.current_cash_balance
    market_value = calculate_market_value(ledger, price)
    summary = PnLCalculator().calculate_summary(ledger.wallets, ledger.sells, price)

    budget_available = None
    if security.budget is not None:
        budget_available = (security.budget - oop) + cash

    return SecurityOverview(
        symbol=security.symbol,
        current_price=price,
        budget=security.budget,
        total_out_of_pocket=oop,
        current_cash_balance=cash,
        tied_up=ledger.tied_up,
        market_value=market_value,
        roic=calculate_roic(cash, market_value, oop),
        budget_used=oop - cash,
        budget_available=budget_available,
        realized_pl=summary.realized_pl,
        unrealized_pl=summary.unrealized_pl,
        active_wallets=len(ledger.active_wallets),
    )


def calculate_grouped_metrics(
    ledgers: Sequence[SecurityLedger],
    prices: Mapping[str, float | None],
    group_by: GroupBy,
) -> list[GroupMetrics]:
    """
    Roll ledgers up by region, market category or risk/growth profile.

    Every group in the canonical order is returned, including empty ones. Archived securities
    are left out entirely; hidden securities do not count towards max risk. Securities whose
    group value is missing or unknown are dropped with a debug log.

    Args:
        ledgers: Rebuilt ledgers, one per security.
        prices: Symbol→fetched price map (test prices fill gaps).
        group_by: Grouping dimension.

    Returns:
        GroupMetrics in canonical group order.
    """
    order = GROUP_ORDERS[group_by]
    members: dict[str, list[SecurityLedger]] = {name: [] for name in order}

    for ledger in ledgers:
        security = ledger.security
        if security.is_archived:
            continue
        key = group_key(security, group_by)
        if key not in members:
            logger.debug(
                "Skipping security with unknown group",
                symbol=security.symbol,
                group_by=group_by.value,
                group=key,
            )
            continue
        members[key].append(ledger)

    return [
        _roll_up(name, format_group_name(name, group_by), members[name], prices) for name in order
    ]


def calculate_portfolio_totals(
    ledgers: Sequence[SecurityLedger], prices: Mapping[str, float | None]
) -> GroupMetrics:
    """Roll up every non-archived security into a single total row."""
    active = [ledger for ledger in ledgers if not ledger.security.is_archived]
    return _roll_up("Total", "Total", active, prices)


def _roll_up(
    name: str,
    display_name: str,
    ledgers: Sequence[SecurityLedger],
    prices: Mapping[str, float | None],
) -> GroupMetrics:
    max_risk = 0.0
    oop = 0.0
    cash = 0.0
    tied_up = 0.0
    market_value = 0.0

    for ledger in ledgers:
        security = ledger.security
        if not security.is_hidden:
            max_risk += security.budget or 0.0
        oop += ledger.cash_flow.total_out_of_pocket
        cash += ledger.cash_flow.current_cash_balance
        tied_up += ledger.tied_up

        price = get_effective_price(prices.get(security.symbol), security.test_price)
        security_value = calculate_market_value(ledger, price)
        if security_value is not None:
            market_value += security_value

    return GroupMetrics(
        group_name=name,
        display_name=display_name,
        max_risk=max_risk,
        oop=oop,
        cash_balance=cash,
        tied_up=tied_up,
        market_value=market_value,
        roic=calculate_roic(cash, market_value, oop) or 0.0,
        budget_used=oop - cash,
        budget_available=(max_risk - oop) + cash,
        securities=len(ledgers),
    )
