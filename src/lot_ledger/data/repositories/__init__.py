"""Repository classes for data access."""

from lot_ledger.data.repositories.securities import SecurityRepository
from lot_ledger.data.repositories.transactions import TransactionRepository
from lot_ledger.data.repositories.wallets import WalletRepository

__all__ = [
    "SecurityRepository",
    "TransactionRepository",
    "WalletRepository",
]
