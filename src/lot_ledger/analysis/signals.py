"""Per-security entry and exit signals for the signals view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from lot_ledger.portfolio import StrategyType
from lot_ledger.pricing import (
    SignalColor,
    calculate_5d_pullback,
    calculate_days_since,
    calculate_pct_to_target,
    calculate_pullback_percent,
    get_days_since_color,
    get_pct_to_target_color,
    is_htp_signal_active,
    is_pullback_triggered,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date

    from lot_ledger.portfolio import SecurityLedger
    from lot_ledger.pricing import DailyClose


@dataclass(frozen=True)
class SecuritySignals:
    """Signals derived from one security's ledger and its effective price."""

    symbol: str
    effective_price: float | None
    last_buy_date: date | None
    days_since_last_buy: int | None
    days_since_color: SignalColor
    pullback_percent: float | None
    pullback_triggered: bool
    five_day_pullback: float | None
    swing_pct_to_target: float | None
    swing_target_color: SignalColor
    htp_triggered: bool
    budget_available: float | None


def calculate_security_signals(
    ledger: SecurityLedger,
    effective_price: float | None,
    closes: Sequence[DailyClose] | None = None,
    today: date | None = None,
) -> SecuritySignals:
    """
    Evaluate entry and exit signals for one security.

    - Pullback is measured from the last Buy (post-split price) against PDP as the entry target.
    - The five-day pullback looks for the highest recent close the price has dipped from by PDP.
    - The Swing target is the active Swing wallet closest to (or furthest past) its target.
    - HTP is triggered when any active Hold wallet has reached its Hold take-profit price.
    - Budget available is floored at 0.
    """
    security = ledger.security
    last_buy = ledger.last_buy
    last_buy_date = last_buy.date if last_buy is not None else None
    last_buy_price = last_buy.price if last_buy is not None else None

    pullback = calculate_pullback_percent(effective_price, last_buy_price)
    days = calculate_days_since(last_buy_date, today)

    swing_pcts = [
        pct
        for w in ledger.active_wallets
        if w.strategy is StrategyType.SWING
        and (pct := calculate_pct_to_target(effective_price, w.target_price)) is not None
    ]
    swing_pct = max(swing_pcts) if swing_pcts else None

    htp_triggered = any(
        is_htp_signal_active(w.buy_price, security.htp, effective_price, security.commission)
        for w in ledger.active_wallets
        if w.strategy is StrategyType.HOLD
    )

    budget_available = None
    if security.budget is not None:
        cash_flow = ledger.cash_flow
        budget_available = max(
            0.0,
            (security.budget - cash_flow.total_out_of_pocket) + cash_flow.current_cash_balance,
        )

    return SecuritySignals(
        symbol=security.symbol,
        effective_price=effective_price,
        last_buy_date=last_buy_date,
        days_since_last_buy=days,
        days_since_color=get_days_since_color(days),
        pullback_percent=pullback,
        pullback_triggered=is_pullback_triggered(pullback, security.pdp),
        five_day_pullback=calculate_5d_pullback(effective_price, closes, security.pdp),
        swing_pct_to_target=swing_pct,
        swing_target_color=get_pct_to_target_color(swing_pct),
        htp_triggered=htp_triggered,
        budget_available=budget_available,
    )
