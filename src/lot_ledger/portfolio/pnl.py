"""P&L (Profit and Loss) calculator for wallets.

Realized P/L is recorded on each wallet as Sells close against it, and is also available per
Sell from the wallet build. The two views must agree to the cent; ``calculate_summary`` checks
this and logs a warning if they drift.

Unrealized P/L is ``(current_price - buy_price) * remaining_shares`` for each active wallet and
is unknown (not zero) when no current price is available.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from lot_ledger.portfolio._models import StrategyType
from lot_ledger.precision import is_zero_currency, round_currency

if TYPE_CHECKING:
    from collections.abc import Iterable

    from lot_ledger.portfolio._models import Wallet
    from lot_ledger.portfolio.wallets import SellResult

logger = structlog.get_logger()


@dataclass
class PnLSummary:
    """Summary of one security's profit and loss."""

    realized_pl: float
    realized_swing_pl: float
    realized_hold_pl: float
    unrealized_pl: float | None
    total_pl: float | None
    total_sells: int


class PnLCalculator:
    """Calculate profit/loss on wallets and sells."""

    def calculate_unrealized(self, wallet: Wallet, current_price: float | None) -> float | None:
        """
        Calculate unrealized P/L for a wallet.

        Returns 0 for a fully sold wallet and None when the current price is unknown.
        """
        if not wallet.is_active:
            return 0.0
        if current_price is None:
            return None
        return (current_price - wallet.buy_price) * wallet.remaining_shares

    def calculate_realized(
        self, wallets: Iterable[Wallet], strategy: StrategyType | None = None
    ) -> float:
        """Sum realized P/L recorded on wallets, optionally for one strategy (2 decimals)."""
        return round_currency(
            sum(w.realized_pl for w in wallets if strategy is None or w.strategy is strategy)
        )

    def calculate_realized_from_sells(
        self, sells: Iterable[SellResult], strategy: StrategyType | None = None
    ) -> float:
        """Sum realized P/L per Sell, optionally for one strategy (2 decimals)."""
        return round_currency(
            sum(s.realized_pl for s in sells if strategy is None or s.wallet_key[1] is strategy)
        )

    def calculate_summary(
        self,
        wallets: list[Wallet],
        sells: list[SellResult],
        current_price: float | None,
    ) -> PnLSummary:
        """
        Calculate a complete P&L summary for one security.

        Args:
            wallets: Every wallet of the security.
            sells: Per-sell results from the same build.
            current_price: Effective price, or None if unknown.
        """
        realized = self.calculate_realized(wallets)
        realized_from_sells = self.calculate_realized_from_sells(sells)
        if not is_zero_currency(realized - realized_from_sells):
            logger.warning(
                "Realized P/L from wallets and sells disagree",
                wallets=realized,
                sells=realized_from_sells,
            )

        unrealized: float | None = 0.0
        for wallet in wallets:
            wallet_unrealized = self.calculate_unrealized(wallet, current_price)
            if wallet_unrealized is None:
                unrealized = None
                break
            unrealized += wallet_unrealized
        if unrealized is not None:
            unrealized = round_currency(unrealized)

        return PnLSummary(
            realized_pl=realized,
            realized_swing_pl=self.calculate_realized(wallets, StrategyType.SWING),
            realized_hold_pl=self.calculate_realized(wallets, StrategyType.HOLD),
            unrealized_pl=unrealized,
            total_pl=None if unrealized is None else round_currency(realized + unrealized),
            total_sells=len(sells),
        )
