"""Wallet allocation engine.

Derives a security's wallets from its complete (split-adjusted, chronologically ordered)
transaction history. Wallets are keyed by (rounded buy price, strategy): Buys at the same price
and strategy consolidate into a single wallet. Every Sell closes against exactly one wallet,
identified by its strategy and wallet price; there is no FIFO draining across wallets.

Prices are matched against wallets in the units each entry was recorded in (the wallet's buy
price multiplied back by the entry's split factor). Adding a later split rescales every price
by the same ratio, so it never changes which wallet a Buy joins or a Sell closes against.

The engine never patches an existing wallet set. Any edit to the history means calling
``build_wallets`` again on the full history.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from lot_ledger.constants import (
    SHARE_EPSILON,
    WALLET_PRICE_KEY_PRECISION,
    WALLET_PRICE_MATCH_TOLERANCE,
)
from lot_ledger.exceptions import InvalidTransactionError, OversellError, WalletNotFoundError
from lot_ledger.portfolio._allocation import allocate_buy
from lot_ledger.portfolio._models import StrategyType, TransactionAction, Wallet, wallet_key
from lot_ledger.portfolio.validation import validate_transaction
from lot_ledger.precision import is_positive_shares, is_zero_shares
from lot_ledger.pricing import calculate_sale_pl, calculate_target_price

if TYPE_CHECKING:
    from collections.abc import Iterable

    from lot_ledger.portfolio._models import Security, Transaction

logger = structlog.get_logger()


@dataclass(frozen=True)
class SellResult:
    """Realized outcome of one Sell against its wallet."""

    transaction: Transaction
    wallet_key: tuple[float, StrategyType]
    buy_price: float
    realized_pl: float

    @property
    def realized_pl_percent(self) -> float | None:
        cost_basis = self.buy_price * (self.transaction.quantity or 0.0)
        if cost_basis == 0:
            return None
        return self.realized_pl / cost_basis * 100


@dataclass
class WalletBuildResult:
    """Wallets derived from a transaction history, in creation order."""

    wallets: list[Wallet]
    sells: list[SellResult] = field(default_factory=list)

    @property
    def active_wallets(self) -> list[Wallet]:
        return [w for w in self.wallets if w.is_active]

    def get(self, price: float, strategy: StrategyType) -> Wallet | None:
        key = wallet_key(price, strategy)
        return next((w for w in self.wallets if w.key == key), None)


def build_wallets(transactions: Iterable[Transaction], security: Security) -> WalletBuildResult:
    """
    Build the wallet set for one security.

    Buys are split between Swing and Hold and accumulated into their (price, strategy) wallet;
    a new wallet's target price uses the strategy's take-profit percent and the security's
    commission. Sells reduce the remaining shares of their wallet and accumulate realized P/L
    net of commission. Div, SLP and StockSplit entries do not touch wallets.

    Args:
        transactions: Split-adjusted history in chronological order.
        security: Owning security (ratio, take-profit percents, commission).

    Returns:
        WalletBuildResult with every wallet (active or fully sold) and per-sell results.

    Raises:
        InvalidTransactionError: If a Buy or Sell lacks required fields.
        WalletNotFoundError: If a Sell targets a (price, strategy) with no wallet.
        OversellError: If a Sell exceeds its wallet's remaining shares.
    """
    wallets: list[Wallet] = []
    sells: list[SellResult] = []

    for txn in transactions:
        if txn.action is TransactionAction.BUY:
            validate_transaction(txn)
            _apply_buy(wallets, txn, security)
        elif txn.action is TransactionAction.SELL:
            validate_transaction(txn)
            sells.append(_apply_sell(wallets, txn, security))

    logger.debug(
        "Built wallets",
        symbol=security.symbol,
        wallets=len(wallets),
        sells=len(sells),
    )
    return WalletBuildResult(wallets=wallets, sells=sells)


def _apply_buy(
    wallets: list[Wallet],
    txn: Transaction,
    security: Security,
) -> None:
    price = txn.price or 0.0
    allocation = allocate_buy(txn, security)

    parts = (
        (StrategyType.SWING, allocation.swing_shares, allocation.swing_investment),
        (StrategyType.HOLD, allocation.hold_shares, allocation.hold_investment),
    )
    for strategy, shares, investment in parts:
        if not is_positive_shares(shares):
            continue

        wallet = _find_wallet(wallets, price, strategy, txn.split_factor)
        if wallet is None:
            wallet = Wallet(
                buy_price=price,
                strategy=strategy,
                target_price=calculate_target_price(
                    price, security.target_percent_for(strategy), security.commission
                ),
            )
            wallets.append(wallet)

        wallet.total_investment += investment
        wallet.total_shares += shares
        wallet.remaining_shares += shares
        if txn.id is not None:
            wallet.buy_txn_ids.append(txn.id)


def _apply_sell(
    wallets: list[Wallet],
    txn: Transaction,
    security: Security,
) -> SellResult:
    strategy = txn.txn_type.to_strategy() if txn.txn_type else None
    wallet_price = txn.wallet_price or 0.0
    quantity = txn.quantity or 0.0
    sell_price = txn.price or 0.0
    if strategy is None:
        raise InvalidTransactionError("Sell requires txn_type Swing or Hold", txn_id=txn.id)

    wallet = _find_sell_wallet(wallets, wallet_price, strategy, txn.split_factor)
    if wallet is None:
        raise WalletNotFoundError(
            wallet_price * txn.split_factor, strategy.value, txn_id=txn.id
        )

    if quantity > wallet.remaining_shares + SHARE_EPSILON:
        raise OversellError(
            quantity,
            wallet.remaining_shares,
            price=wallet.buy_price,
            strategy=strategy.value,
            txn_id=txn.id,
        )

    realized = calculate_sale_pl(wallet.buy_price, sell_price, quantity, security.commission)

    wallet.shares_sold += quantity
    wallet.remaining_shares -= quantity
    if is_zero_shares(wallet.remaining_shares) or wallet.remaining_shares < 0:
        wallet.remaining_shares = 0.0
    wallet.realized_pl += realized
    wallet.sell_txn_count += 1
    if txn.id is not None:
        wallet.sell_txn_ids.append(txn.id)

    return SellResult(
        transaction=txn,
        wallet_key=wallet.key,
        buy_price=wallet.buy_price,
        realized_pl=realized,
    )


def _recorded_key(price: float, factor: float) -> float:
    return round(price * factor, WALLET_PRICE_KEY_PRECISION)


def _find_wallet(
    wallets: list[Wallet], price: float, strategy: StrategyType, factor: float
) -> Wallet | None:
    """Wallet of ``strategy`` whose key matches ``price`` in the entry's recorded units."""
    target = _recorded_key(price, factor)
    return next(
        (
            w
            for w in wallets
            if w.strategy is strategy and _recorded_key(w.buy_price, factor) == target
        ),
        None,
    )


def _find_sell_wallet(
    wallets: list[Wallet], wallet_price: float, strategy: StrategyType, factor: float
) -> Wallet | None:
    wallet = _find_wallet(wallets, wallet_price, strategy, factor)
    if wallet is not None:
        return wallet

    candidates = [w for w in wallets if w.strategy is strategy]
    nearest = min(candidates, key=lambda w: abs(w.buy_price - wallet_price), default=None)
    if nearest is None:
        return None
    if abs(nearest.buy_price - wallet_price) * factor > WALLET_PRICE_MATCH_TOLERANCE:
        return None
    return nearest
