"""Ledger data models.

These dataclasses are the engine's in-memory representation and represent:
- Security configuration (Security)
- Transaction history entries (Transaction)
- Derived lots (Wallet)
- Derived cash-flow totals (CashFlowState)
- A Buy split between strategies (BuyAllocation)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from lot_ledger.constants import WALLET_PRICE_KEY_PRECISION
from lot_ledger.precision import is_positive_shares, round_currency

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date


class TransactionAction(str, Enum):
    """Kind of transaction recorded against a security."""

    BUY = "Buy"
    SELL = "Sell"
    DIVIDEND = "Div"
    SLP = "SLP"
    STOCK_SPLIT = "StockSplit"


class StrategyType(str, Enum):
    """Strategy a wallet belongs to."""

    SWING = "Swing"
    HOLD = "Hold"


class TxnType(str, Enum):
    """Strategy routing of a Buy or Sell.

    ``SPLIT`` applies only to Buys and divides the Buy by the security's swing/hold ratio.
    """

    SWING = "Swing"
    HOLD = "Hold"
    SPLIT = "Split"

    def to_strategy(self) -> StrategyType | None:
        if self is TxnType.SPLIT:
            return None
        return StrategyType(self.value)


@dataclass(frozen=True)
class Security:
    """A tracked stock, ETF or crypto asset and its strategy configuration."""

    symbol: str
    swing_hold_ratio: float | None = None  # percent of each Buy sent to Swing
    pdp: float | None = None
    plr: float | None = None  # legacy profit/loss multiple of pdp
    stp: float | None = None
    htp: float | None = None
    commission: float | None = None  # percent
    budget: float | None = None
    name: str | None = None
    stock_type: str | None = None
    region: str | None = None
    market_category: str | None = None
    risk_growth_profile: str | None = None
    test_price: float | None = None
    is_hidden: bool = False
    is_archived: bool = False

    def target_percent_for(self, strategy: StrategyType) -> float:
        """
        Take-profit percent for a strategy: STP for Swing, HTP for Hold.

        A Swing security without STP falls back to the legacy ``pdp * plr``; anything else
        unset is 0.
        """
        if strategy is StrategyType.HOLD:
            return self.htp or 0.0
        if self.stp:
            return self.stp
        if self.pdp and self.plr:
            return self.pdp * self.plr
        return 0.0


@dataclass(frozen=True)
class Transaction:
    """
    One entry in a security's transaction history.

    Field use by action:
    - Buy: price, investment (or quantity), txn_type; swing_shares and hold_shares once allocated
    - Sell: price, quantity, txn_type (Swing/Hold), wallet_price, optional amount override
    - Div/SLP: amount
    - StockSplit: split_ratio

    ``split_factor`` divides the prices and multiplies the share counts of a split-adjusted
    entry; multiplying a price back by it gives the price in the units it was recorded in.
    """

    action: TransactionAction
    date: date
    id: str | None = None
    price: float | None = None
    investment: float | None = None
    quantity: float | None = None
    swing_shares: float | None = None
    hold_shares: float | None = None
    amount: float | None = None
    txn_type: TxnType | None = None
    wallet_price: float | None = None  # buy price of the wallet a Sell closes against
    split_ratio: float | None = None
    signal: str | None = None
    split_factor: float = 1.0  # applied to reach post-split units; 1.0 as recorded

    @property
    def buy_investment(self) -> float | None:
        """Investment of a Buy, falling back to price * quantity."""
        if self.investment is not None:
            return self.investment
        if self.price is not None and self.quantity is not None:
            return self.price * self.quantity
        return None

    @property
    def sale_proceeds(self) -> float | None:
        """Proceeds of a Sell: explicit amount if given, else price * quantity."""
        if self.amount is not None:
            return self.amount
        if self.price is not None and self.quantity is not None:
            return self.price * self.quantity
        return None


@dataclass
class Wallet:
    """A lot: all Buy allocations at one (price, strategy) pair.

    Remaining shares are decremented by Sells; a wallet at or below SHARE_EPSILON remaining is
    inactive but retained so its sell history stays attributable.
    """

    buy_price: float
    strategy: StrategyType
    target_price: float
    total_investment: float = 0.0
    total_shares: float = 0.0
    remaining_shares: float = 0.0
    shares_sold: float = 0.0
    sell_txn_count: int = 0
    realized_pl: float = 0.0
    buy_txn_ids: list[str] = field(default_factory=list)
    sell_txn_ids: list[str] = field(default_factory=list)

    @property
    def key(self) -> tuple[float, StrategyType]:
        return wallet_key(self.buy_price, self.strategy)

    @property
    def is_active(self) -> bool:
        return is_positive_shares(self.remaining_shares)

    @property
    def realized_pl_percent(self) -> float | None:
        """Realized P/L as a percent of the cost basis of the shares sold."""
        cost_basis = self.buy_price * self.shares_sold
        if cost_basis == 0:
            return 0.0 if round_currency(self.realized_pl) == 0 else None
        return self.realized_pl / cost_basis * 100

    @property
    def tied_up_investment(self) -> float:
        """Cost of the shares still held (buy price * remaining shares)."""
        if not self.is_active:
            return 0.0
        return self.buy_price * self.remaining_shares


@dataclass(frozen=True)
class CashFlowState:
    """Out-of-pocket capital and reinvestable cash for one security, both >= 0."""

    total_out_of_pocket: float = 0.0
    current_cash_balance: float = 0.0

    def rounded(self) -> CashFlowState:
        return CashFlowState(
            total_out_of_pocket=round_currency(self.total_out_of_pocket),
            current_cash_balance=round_currency(self.current_cash_balance),
        )


@dataclass(frozen=True)
class BuyAllocation:
    """Shares and investment of one Buy split between Swing and Hold."""

    quantity: float
    swing_shares: float
    hold_shares: float
    swing_investment: float
    hold_investment: float


def wallet_key(price: float, strategy: StrategyType) -> tuple[float, StrategyType]:
    """Identity of a wallet: buy price rounded to 4 decimals plus strategy."""
    return round(price, WALLET_PRICE_KEY_PRECISION), strategy


def sort_transactions(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Order transactions by date; same-date entries keep their insertion order."""
    return sorted(transactions, key=lambda t: t.date)
