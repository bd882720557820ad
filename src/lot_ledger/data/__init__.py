"""Data layer for persistent ledger storage."""

from lot_ledger.data.database import DatabaseManager
from lot_ledger.data.export import export_ledger
from lot_ledger.data.importer import ImportResult, import_ledger
from lot_ledger.data.ledger import load_all_ledgers, load_security_ledger, rebuild_and_store
from lot_ledger.data.models import Base, SecurityRecord, TransactionRecord, WalletRecord
from lot_ledger.data.repositories import (
    SecurityRepository,
    TransactionRepository,
    WalletRepository,
)
from lot_ledger.data.schemas import LedgerExport, LedgerFile, PriceFile

__all__ = [
    "Base",
    "DatabaseManager",
    "ImportResult",
    "LedgerExport",
    "LedgerFile",
    "PriceFile",
    "SecurityRecord",
    "SecurityRepository",
    "TransactionRecord",
    "TransactionRepository",
    "WalletRecord",
    "WalletRepository",
    "export_ledger",
    "import_ledger",
    "load_all_ledgers",
    "load_security_ledger",
    "rebuild_and_store",
]
