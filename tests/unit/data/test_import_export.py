"""Tests for JSON import/export of the ledger."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from lot_ledger.data import (
    LedgerFile,
    PriceFile,
    SecurityRepository,
    TransactionRepository,
    WalletRepository,
    export_ledger,
    import_ledger,
)
from lot_ledger.exceptions import WalletNotFoundError


def _ledger_file(symbol: str = "aaa", *, sell_wallet_price: float = 100.0) -> LedgerFile:
    return LedgerFile.model_validate(
        {
            "securities": [
                {
                    "symbol": symbol,
                    "region": "US",
                    "swing_hold_ratio": 50,
                    "pdp": 5,
                    "stp": 10,
                    "htp": 20,
                    "budget": 2000,
                    "transactions": [
                        {
                            "date": "2024-01-01",
                            "action": "Buy",
                            "price": 100,
                            "investment": 1000,
                            "txn_type": "Split",
                        },
                        {
                            "date": "2024-01-05",
                            "action": "Sell",
                            "price": 110,
                            "quantity": 2,
                            "txn_type": "Swing",
                            "wallet_price": sell_wallet_price,
                        },
                        {"date": "2024-01-06", "action": "Div", "amount": 7.5},
                    ],
                }
            ]
        }
    )


class TestSchemas:
    def test_unknown_transaction_field_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LedgerFile.model_validate(
                {
                    "securities": [
                        {
                            "symbol": "AAA",
                            "transactions": [
                                {"date": "2024-01-01", "action": "Div", "amout": 1}
                            ],
                        }
                    ]
                }
            )

    def test_unknown_action_is_rejected(self) -> None:
        txn = {"date": "2024-01-01", "action": "Gift"}

        with pytest.raises(ValidationError):
            LedgerFile.model_validate({"securities": [{"symbol": "AAA", "transactions": [txn]}]})

    def test_ratio_out_of_range_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LedgerFile.model_validate({"securities": [{"symbol": "AAA", "swing_hold_ratio": 120}]})

    def test_blank_symbol_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LedgerFile.model_validate({"securities": [{"symbol": "  "}]})

    def test_price_file(self) -> None:
        prices = PriceFile.model_validate(
            {
                "prices": {"aaa": 101.5, "BBB": None},
                "closes": {"aaa": [{"date": "2024-01-02", "close": 99.0}]},
            }
        )

        assert prices.normalized() == {"AAA": 101.5, "BBB": None}
        closes = prices.daily_closes()["AAA"]
        assert closes[0].close == 99.0
        assert closes[0].date.isoformat() == "2024-01-02"


@pytest.mark.asyncio
async def test_import_rebuilds_each_security(db_session) -> None:
    result = await import_ledger(db_session, _ledger_file())

    assert result.imported == ["AAA"]
    assert result.skipped == []
    record = await SecurityRepository(db_session).require("AAA")
    assert record.total_out_of_pocket == 1000.0
    assert record.current_cash_balance == 227.5
    wallets = await WalletRepository(db_session).list_for_security(record.id)
    assert len(wallets) == 2
    txns = await TransactionRepository(db_session).list_for_security(record.id)
    assert [t.action for t in txns] == ["Buy", "Sell", "Div"]
    assert txns[1].txn_profit == 20.0


@pytest.mark.asyncio
async def test_existing_security_is_skipped(db_session) -> None:
    await import_ledger(db_session, _ledger_file())

    result = await import_ledger(db_session, _ledger_file())

    assert result.imported == []
    assert result.skipped == ["AAA"]
    record = await SecurityRepository(db_session).require("AAA")
    assert len(await TransactionRepository(db_session).list_for_security(record.id)) == 3


@pytest.mark.asyncio
async def test_replace_recreates_security(db_session) -> None:
    await import_ledger(db_session, _ledger_file())

    result = await import_ledger(db_session, _ledger_file(), replace=True)

    assert result.imported == ["AAA"]
    record = await SecurityRepository(db_session).require("AAA")
    assert len(await TransactionRepository(db_session).list_for_security(record.id)) == 3
    assert len(await WalletRepository(db_session).list_for_security(record.id)) == 2


@pytest.mark.asyncio
async def test_invalid_history_imports_nothing(db_session) -> None:
    with pytest.raises(WalletNotFoundError):
        await import_ledger(db_session, _ledger_file(sell_wallet_price=99.0))

    assert await SecurityRepository(db_session).get_by_symbol("AAA") is None


@pytest.mark.asyncio
async def test_export_round_trips_through_import(db_session) -> None:
    await import_ledger(db_session, _ledger_file())

    exported = await export_ledger(db_session)
    payload = exported.model_dump(mode="json", by_alias=True)

    security = payload["securities"][0]
    assert security["symbol"] == "AAA"
    assert security["total_out_of_pocket"] == 1000.0
    assert len(security["wallets"]) == 2
    assert security["transactions"][0]["date"] == "2024-01-01"

    reparsed = LedgerFile.model_validate(payload)
    buy, *rest = reparsed.securities[0].transactions
    original = _ledger_file().securities[0].transactions
    assert (buy.swing_shares, buy.hold_shares) == (5.0, 5.0)
    assert buy.model_copy(update={"swing_shares": None, "hold_shares": None}) == original[0]
    assert rest == original[1:]


@pytest.mark.asyncio
async def test_import_keeps_recorded_buy_allocation(db_session) -> None:
    ledger_file = LedgerFile.model_validate(
        {
            "securities": [
                {
                    "symbol": "BBB",
                    "swing_hold_ratio": 50,
                    "transactions": [
                        {
                            "date": "2024-01-01",
                            "action": "Buy",
                            "price": 10,
                            "investment": 100,
                            "txn_type": "Split",
                            "swing_shares": 2,
                            "hold_shares": 8,
                        }
                    ],
                }
            ]
        }
    )

    await import_ledger(db_session, ledger_file)

    record = await SecurityRepository(db_session).require("BBB")
    wallets = await WalletRepository(db_session).list_for_security(record.id)
    assert sorted((w.strategy, w.total_shares) for w in wallets) == [("Hold", 8.0), ("Swing", 2.0)]
