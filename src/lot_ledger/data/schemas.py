"""Pydantic models for ledger JSON files (import, export and price files)."""

from __future__ import annotations

from datetime import date  # noqa: TC003 - Required at runtime for pydantic

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lot_ledger.portfolio import Transaction, TransactionAction, TxnType
from lot_ledger.pricing import DailyClose


class TransactionIn(BaseModel):
    """One transaction in an import file."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    txn_date: date = Field(alias="date")
    action: TransactionAction
    price: float | None = None
    investment: float | None = None
    quantity: float | None = None
    swing_shares: float | None = None
    hold_shares: float | None = None
    """Swing/Hold split of a Buy as first allocated; recomputed from the ratio when absent."""

    amount: float | None = None
    txn_type: TxnType | None = None
    wallet_price: float | None = None
    """Buy price of the wallet a Sell closes against."""

    split_ratio: float | None = None
    signal: str | None = None

    def to_domain(self, txn_id: str | None = None) -> Transaction:
        return Transaction(
            id=txn_id,
            action=self.action,
            date=self.txn_date,
            price=self.price,
            investment=self.investment,
            quantity=self.quantity,
            swing_shares=self.swing_shares,
            hold_shares=self.hold_shares,
            amount=self.amount,
            txn_type=self.txn_type,
            wallet_price=self.wallet_price,
            split_ratio=self.split_ratio,
            signal=self.signal,
        )


class SecurityIn(BaseModel):
    """A security and its history in an import file.

    Derived fields present in an export (wallets, cash-flow caches) are ignored on import and
    recomputed by the rebuild.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    symbol: str
    name: str | None = None
    stock_type: str | None = None
    region: str | None = None
    market_category: str | None = None
    risk_growth_profile: str | None = None
    swing_hold_ratio: float | None = Field(default=None, ge=0, le=100)
    pdp: float | None = None
    plr: float | None = None
    stp: float | None = None
    htp: float | None = None
    commission: float | None = Field(default=None, ge=0)
    budget: float | None = None
    test_price: float | None = None
    is_hidden: bool = False
    is_archived: bool = False
    transactions: list[TransactionIn] = Field(default_factory=list)

    @field_validator("symbol")
    @classmethod
    def _upper_symbol(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("symbol must not be empty")
        return value


class LedgerFile(BaseModel):
    """Top-level import file: ``{"securities": [...]}``."""

    model_config = ConfigDict(frozen=True)

    securities: list[SecurityIn]


class CloseIn(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    close_date: date = Field(alias="date")
    close: float


class PriceFile(BaseModel):
    """
    Current prices file.

    ``{"prices": {"SYMBOL": 123.45}, "closes": {"SYMBOL": [{"date": "2024-01-02", "close": 120}]}}``

    ``closes`` is optional and only feeds the five-day pullback signal.
    """

    model_config = ConfigDict(frozen=True)

    prices: dict[str, float | None]
    closes: dict[str, list[CloseIn]] = Field(default_factory=dict)

    def normalized(self) -> dict[str, float | None]:
        return {symbol.upper(): price for symbol, price in self.prices.items()}

    def daily_closes(self) -> dict[str, list[DailyClose]]:
        return {
            symbol.upper(): [DailyClose(date=c.close_date, close=c.close) for c in closes]
            for symbol, closes in self.closes.items()
        }


class WalletOut(BaseModel):
    """Exported wallet, rounded to storage precision."""

    model_config = ConfigDict(frozen=True)

    strategy: str
    buy_price: float
    target_price: float
    total_investment: float
    total_shares: float
    remaining_shares: float
    shares_sold: float
    sell_txn_count: int
    realized_pl: float
    realized_pl_percent: float | None


class SecurityOut(SecurityIn):
    """Exported security with derived cash flow and wallets."""

    total_out_of_pocket: float
    current_cash_balance: float
    split_adjustment_factor: float
    wallets: list[WalletOut] = Field(default_factory=list)


class LedgerExport(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: str
    securities: list[SecurityOut]
