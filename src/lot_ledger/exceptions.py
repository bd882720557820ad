"""Exception hierarchy for lot-ledger.

Numeric edge conditions (zero OOP, zero target price, missing prices) are not errors: the
functions that hit them return ``None``. Everything here signals data the engine refuses to
derive wallets from.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base exception for ledger errors."""


class InvalidTransactionError(LedgerError):
    """A transaction is missing required fields or carries invalid values."""

    def __init__(self, message: str, *, txn_id: str | None = None) -> None:
        self.txn_id = txn_id
        self.message = message
        prefix = f"Transaction {txn_id}: " if txn_id else ""
        super().__init__(f"{prefix}{message}")


class InconsistentStateError(LedgerError):
    """Transaction history cannot be applied to the derived wallet set."""


class WalletNotFoundError(InconsistentStateError):
    """A Sell targets a (price, strategy) pair that has no wallet."""

    def __init__(self, price: float, strategy: str, *, txn_id: str | None = None) -> None:
        self.price = price
        self.strategy = strategy
        self.txn_id = txn_id
        super().__init__(f"No {strategy} wallet at buy price {price:.4f} (sell {txn_id or '?'})")


class OversellError(InconsistentStateError):
    """A Sell quantity exceeds the remaining shares of its wallet."""

    def __init__(
        self,
        quantity: float,
        remaining: float,
        *,
        price: float,
        strategy: str,
        txn_id: str | None = None,
    ) -> None:
        self.quantity = quantity
        self.remaining = remaining
        self.price = price
        self.strategy = strategy
        self.txn_id = txn_id
        super().__init__(
            f"Sell of {quantity:.5f} shares exceeds {remaining:.5f} remaining in "
            f"{strategy} wallet at {price:.4f} (sell {txn_id or '?'})"
        )


class SecurityNotFoundError(LedgerError):
    """No security matches the requested symbol or id."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Security not found: {key}")
