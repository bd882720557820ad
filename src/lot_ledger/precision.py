"""Epsilon comparisons and rounding for shares, currency and percentages.

All "is this effectively zero" checks in the package go through these helpers.
"""

from __future__ import annotations

from lot_ledger.constants import (
    CURRENCY_EPSILON,
    CURRENCY_PRECISION,
    PERCENT_EPSILON,
    PERCENT_PRECISION,
    SHARE_EPSILON,
    SHARE_PRECISION,
    TARGET_PRICE_PRECISION,
)


def is_zero_shares(value: float) -> bool:
    """Return True if a share quantity is within SHARE_EPSILON of zero."""
    return abs(value) < SHARE_EPSILON


def is_zero_currency(value: float) -> bool:
    """Return True if a currency amount is within CURRENCY_EPSILON of zero."""
    return abs(value) < CURRENCY_EPSILON


def is_zero_percent(value: float) -> bool:
    """Return True if a percentage is within PERCENT_EPSILON of zero."""
    return abs(value) < PERCENT_EPSILON


def is_positive_shares(value: float) -> bool:
    """Return True if a share quantity is meaningfully above zero."""
    return value > SHARE_EPSILON


def round_shares(value: float) -> float:
    return _round(value, SHARE_PRECISION)


def round_currency(value: float) -> float:
    return _round(value, CURRENCY_PRECISION)


def round_percent(value: float) -> float:
    return _round(value, PERCENT_PRECISION)


def round_target_price(value: float) -> float:
    return _round(value, TARGET_PRICE_PRECISION)


def _round(value: float, digits: int) -> float:
    # Normalise -0.0 so rounded outputs compare and serialise cleanly.
    rounded = round(value, digits)
    return 0.0 if rounded == 0 else rounded


__all__ = [
    "is_positive_shares",
    "is_zero_currency",
    "is_zero_percent",
    "is_zero_shares",
    "round_currency",
    "round_percent",
    "round_shares",
    "round_target_price",
]
