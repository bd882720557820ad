"""Tests for display formatting."""

from __future__ import annotations

from lot_ledger.formatting import (
    MISSING_VALUE,
    format_currency,
    format_percent,
    format_shares,
    format_signed_currency,
    format_wallet_price,
)


class TestFormatCurrency:
    def test_thousands_separator(self) -> None:
        assert format_currency(1234.5) == "$1,234.50"

    def test_negative_sign_before_dollar(self) -> None:
        assert format_currency(-1234.5) == "-$1,234.50"

    def test_rounds_to_cents(self) -> None:
        assert format_currency(18.00006) == "$18.00"

    def test_tiny_negative_is_not_signed(self) -> None:
        assert format_currency(-0.001) == "$0.00"

    def test_none(self) -> None:
        assert format_currency(None) == MISSING_VALUE


class TestFormatSignedCurrency:
    def test_gain_has_plus(self) -> None:
        assert format_signed_currency(18.01) == "+$18.01"

    def test_loss(self) -> None:
        assert format_signed_currency(-5) == "-$5.00"

    def test_zero(self) -> None:
        assert format_signed_currency(0.0) == "$0.00"


def test_format_shares_uses_five_decimals() -> None:
    assert format_shares(3.333333) == "3.33333"
    assert format_shares(None) == MISSING_VALUE


def test_format_wallet_price_uses_key_precision() -> None:
    assert format_wallet_price(0.123456) == "0.1235"
    assert format_wallet_price(10 / 3) == "3.3333"
    assert format_wallet_price(None) == MISSING_VALUE


def test_format_percent_uses_two_decimals() -> None:
    assert format_percent(-6.8627) == "-6.86%"
    assert format_percent(None) == MISSING_VALUE
