"""Display formatting for currency, shares and percentages."""

from __future__ import annotations

from lot_ledger.constants import (
    CURRENCY_PRECISION,
    PERCENT_PRECISION,
    SHARE_PRECISION,
    WALLET_PRICE_KEY_PRECISION,
)

MISSING_VALUE = "-"


def format_currency(value: float | None) -> str:
    """Format as US dollars, e.g. ``-$1,234.50``."""
    if value is None:
        return MISSING_VALUE
    rounded = round(value, CURRENCY_PRECISION)
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,.{CURRENCY_PRECISION}f}"


def format_signed_currency(value: float | None) -> str:
    """Format currency with an explicit ``+`` for gains."""
    if value is None:
        return MISSING_VALUE
    if round(value, CURRENCY_PRECISION) > 0:
        return f"+{format_currency(value)}"
    return format_currency(value)


def format_shares(value: float | None) -> str:
    if value is None:
        return MISSING_VALUE
    return f"{value:.{SHARE_PRECISION}f}"


def format_percent(value: float | None) -> str:
    if value is None:
        return MISSING_VALUE
    return f"{value:.{PERCENT_PRECISION}f}%"


def format_wallet_price(value: float | None) -> str:
    """Format a wallet buy or target price at wallet-key precision, e.g. ``0.1235``.

    This is the value a Sell gives as its wallet price.
    """
    if value is None:
        return MISSING_VALUE
    return f"{value:.{WALLET_PRICE_KEY_PRECISION}f}"
