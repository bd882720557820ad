"""Pricing math: dip, take-profit, pullback and signal helpers.

Every function here is pure. Inputs that make a percentage undefined (missing prices, a zero
reference price) produce ``None`` rather than raising, so callers can propagate "no value" into
tables and roll-ups.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING

import structlog

from lot_ledger.constants import (
    DAYS_SINCE_RED_THRESHOLD,
    DAYS_SINCE_YELLOW_THRESHOLD,
    PCT_TO_TARGET_GREEN_THRESHOLD,
    PCT_TO_TARGET_YELLOW_THRESHOLD,
    PERCENT_EPSILON,
    PULLBACK_WINDOW_DAYS,
)
from lot_ledger.precision import round_currency, round_percent, round_target_price

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

logger = structlog.get_logger()


class SignalColor(str, Enum):
    """Colour classification used by signal tables."""

    DEFAULT = "default"
    YELLOW = "yellow"
    RED = "red"
    GREEN = "green"


@dataclass(frozen=True)
class DailyClose:
    """A historical daily closing price."""

    date: date
    close: float


@dataclass(frozen=True)
class HtpSignal:
    """Hold take-profit signal for one position."""

    trigger_price: float
    is_triggered: bool
    current_percent: float


# =============================================================================
# Entry and exit prices
# =============================================================================


def calculate_lbd(
    price: float, pdp_percent: float, commission_percent: float | None = None
) -> float:
    """
    Calculate the last-buy-dip (re-entry) price.

    The dip target is ``price * (1 - pdp/100)``. With a commission, the target is divided by
    ``1 + commission/100`` so that the buy plus commission nets out at the dip target.

    Args:
        price: Reference buy price.
        pdp_percent: Price drop percent (e.g. 5 for 5%).
        commission_percent: Commission percent charged on the buy.

    Returns:
        LBD price rounded to currency precision.
    """
    target_lbd = price - (price * pdp_percent / 100)
    if commission_percent and commission_percent > 0:
        rate = commission_percent / 100
        if rate >= 1:
            logger.warning(
                "Commission rate >= 100%; using LBD without commission adjustment",
                commission_percent=commission_percent,
            )
        else:
            target_lbd = target_lbd / (1 + rate)
    return round_currency(target_lbd)


def calculate_target_price(
    buy_price: float,
    target_percent: float,
    commission_percent: float | None = None,
) -> float:
    """
    Calculate a commission-adjusted take-profit price.

    ``buy_price * (1 + target/100)`` is divided by ``1 - commission/100`` so that selling at the
    returned price nets the intended profit after commission. The result keeps 4 decimals;
    rounding to 2 shifts realized P/L by a cent per lot.

    Args:
        buy_price: Wallet buy price.
        target_percent: Take-profit percent (STP for Swing, HTP for Hold).
        commission_percent: Commission percent charged on the sale.

    Returns:
        Target price rounded to 4 decimals.
    """
    base_target = buy_price * (1 + target_percent / 100)
    if commission_percent and commission_percent > 0:
        rate = commission_percent / 100
        if rate >= 1:
            logger.warning(
                "Commission rate >= 100%; using target price without commission adjustment",
                commission_percent=commission_percent,
            )
        else:
            base_target = base_target / (1 - rate)
    return round_target_price(base_target)


def calculate_target_percent(target_price: float, buy_price: float) -> float | None:
    """Percent gain from ``buy_price`` to ``target_price`` (2 decimals), or None if buy is 0."""
    if not buy_price:
        return None
    return round_percent((target_price - buy_price) / buy_price * 100)


def calculate_profit_percent(buy_price: float, current_price: float) -> float | None:
    """Percent gain of ``current_price`` over ``buy_price`` (unrounded), or None if buy is 0."""
    if not buy_price:
        return None
    return (current_price - buy_price) / buy_price * 100


def calculate_profit_target_price(buy_price: float, target_percent: float) -> float:
    """Target price without commission adjustment."""
    return buy_price * (1 + target_percent / 100)


def calculate_sale_pl(
    buy_price: float,
    sell_price: float,
    quantity: float,
    commission_percent: float | None = None,
) -> float:
    """
    Calculate realized P/L for a single sale.

    Commission is charged on the sale value: ``(sell - buy) * qty - sell * qty * commission/100``.
    The result is not rounded so that it can be accumulated across sells.
    """
    gross = (sell_price - buy_price) * quantity
    if commission_percent and commission_percent > 0:
        gross -= sell_price * quantity * commission_percent / 100
    return gross


# =============================================================================
# Pullback and target proximity
# =============================================================================


def calculate_pullback_percent(
    current_price: float | None, last_buy_price: float | None
) -> float | None:
    """Percent move from the last buy price, or None if either price is missing or zero."""
    if current_price is None or last_buy_price is None or last_buy_price == 0:
        return None
    return (current_price - last_buy_price) / last_buy_price * 100


def is_pullback_triggered(
    pullback_percent: float | None, entry_target_percent: float | None
) -> bool:
    """
    Return True if a pullback reaches the entry target.

    The entry target is stored as a positive magnitude; a pullback of -5% triggers an entry
    target of 5.
    """
    if pullback_percent is None or entry_target_percent is None:
        return False
    return _meets_dip_threshold(pullback_percent, entry_target_percent)


def calculate_pct_to_target(
    current_price: float | None, target_price: float | None
) -> float | None:
    if current_price is None or target_price is None or target_price == 0:
        return None
    return (current_price - target_price) / target_price * 100


def calculate_5d_pullback(
    effective_price: float | None,
    closes: Sequence[DailyClose] | None,
    entry_target_percent: float | None,
) -> float | None:
    """
    Calculate the pullback from the highest recent close that meets the entry target.

    The most recent PULLBACK_WINDOW_DAYS closes are considered (closes <= 0 are skipped as bad
    data). A close is a hit when ``(effective - close) / close * 100 <= -|entry_target|``.

    Args:
        effective_price: Live or test price.
        closes: Historical daily closes in any order.
        entry_target_percent: Entry target magnitude.

    Returns:
        Dip percent against the highest-close hit, or None if nothing qualifies.
    """
    if effective_price is None or not closes or entry_target_percent is None:
        return None

    recent = sorted(closes, key=lambda c: c.date, reverse=True)[:PULLBACK_WINDOW_DAYS]

    best_close: float | None = None
    for daily in recent:
        if daily.close <= 0:
            continue
        dip = (effective_price - daily.close) / daily.close * 100
        if _meets_dip_threshold(dip, entry_target_percent) and (
            best_close is None or daily.close > best_close
        ):
            best_close = daily.close

    if best_close is None:
        return None
    return (effective_price - best_close) / best_close * 100


def _meets_dip_threshold(dip_percent: float, entry_target_percent: float) -> bool:
    return dip_percent <= -abs(entry_target_percent) + PERCENT_EPSILON


# =============================================================================
# Colour classifiers
# =============================================================================


def calculate_days_since(since: date | None, today: date | None = None) -> int | None:
    """Whole days elapsed since ``since`` (None if no date)."""
    if since is None:
        return None
    return ((today or date.today()) - since).days


def get_days_since_color(days: int | None) -> SignalColor:
    """Classify days since the last buy: red from 31 days, yellow from 25."""
    if days is None:
        return SignalColor.DEFAULT
    if days >= DAYS_SINCE_RED_THRESHOLD:
        return SignalColor.RED
    if days >= DAYS_SINCE_YELLOW_THRESHOLD:
        return SignalColor.YELLOW
    return SignalColor.DEFAULT


def get_pct_to_target_color(pct_to_target: float | None) -> SignalColor:
    """Classify proximity to the target price: green at/above 0%, yellow at/above -1%."""
    if pct_to_target is None:
        return SignalColor.DEFAULT
    if pct_to_target >= PCT_TO_TARGET_GREEN_THRESHOLD:
        return SignalColor.GREEN
    if pct_to_target >= PCT_TO_TARGET_YELLOW_THRESHOLD:
        return SignalColor.YELLOW
    return SignalColor.DEFAULT


# =============================================================================
# Hold take-profit signal
# =============================================================================


def calculate_htp_signal(
    buy_price: float,
    htp_percent: float,
    current_price: float,
    commission_percent: float | None = None,
) -> HtpSignal:
    """
    Evaluate whether a Hold position has reached its take-profit price.

    The trigger uses the same commission adjustment as wallet target prices.

    Raises:
        ValueError: If buy price or HTP percent is not positive.
    """
    if not buy_price or buy_price <= 0 or math.isnan(buy_price):
        raise ValueError(f"Buy price must be positive (got {buy_price})")
    if not htp_percent or htp_percent <= 0 or math.isnan(htp_percent):
        raise ValueError(f"HTP percent must be positive (got {htp_percent})")

    trigger = calculate_target_price(buy_price, htp_percent, commission_percent)
    return HtpSignal(
        trigger_price=trigger,
        is_triggered=current_price >= trigger,
        current_percent=round_percent((current_price - buy_price) / buy_price * 100),
    )


def is_htp_signal_active(
    buy_price: float | None,
    htp_percent: float | None,
    current_price: float | None,
    commission_percent: float | None = None,
) -> bool:
    """Return True if the HTP signal is triggered; False for missing or invalid inputs."""
    if buy_price is None or htp_percent is None or current_price is None:
        return False
    try:
        signal = calculate_htp_signal(buy_price, htp_percent, current_price, commission_percent)
    except ValueError:
        return False
    return signal.is_triggered


def htp_display_value(
    buy_price: float | None,
    htp_percent: float | None,
    current_price: float | None,
    commission_percent: float | None = None,
) -> str:
    """Return ``"HTP"`` when triggered, otherwise ``"-"``."""
    active = is_htp_signal_active(buy_price, htp_percent, current_price, commission_percent)
    return "HTP" if active else "-"


# =============================================================================
# Effective prices
# =============================================================================


def get_effective_price(fetched_price: float | None, test_price: float | None) -> float | None:
    """Use the fetched price unless it is missing or zero, then fall back to the test price."""
    if fetched_price is not None and fetched_price != 0:
        return fetched_price
    return test_price


def merge_test_prices(
    real_prices: Mapping[str, float | None],
    test_prices: Mapping[str, float | None],
) -> tuple[dict[str, float | None], set[str]]:
    """
    Overlay positive test prices on real prices.

    Returns:
        Tuple of (merged symbol→price map, symbols whose price came from a test price).
    """
    merged: dict[str, float | None] = dict(real_prices)
    overridden: set[str] = set()
    for symbol, test_price in test_prices.items():
        if test_price is not None and test_price > 0:
            merged[symbol] = test_price
            overridden.add(symbol)
    return merged, overridden


__all__ = [
    "DailyClose",
    "HtpSignal",
    "SignalColor",
    "calculate_5d_pullback",
    "calculate_days_since",
    "calculate_htp_signal",
    "calculate_lbd",
    "calculate_pct_to_target",
    "calculate_profit_percent",
    "calculate_profit_target_price",
    "calculate_pullback_percent",
    "calculate_sale_pl",
    "calculate_target_percent",
    "calculate_target_price",
    "get_days_since_color",
    "get_effective_price",
    "get_pct_to_target_color",
    "htp_display_value",
    "is_htp_signal_active",
    "is_pullback_triggered",
    "merge_test_prices",
]
