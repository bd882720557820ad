"""
lot-ledger.

Lot accounting and P/L engine for swing/hold investment tracking.
"""

__version__ = "0.1.0"

# Configure structlog once at import time (quiet by default).
from lot_ledger.logging import configure_structlog

configure_structlog()

from lot_ledger.portfolio import Security, Transaction, Wallet, rebuild_security  # noqa: E402

__all__ = [
    "Security",
    "Transaction",
    "Wallet",
    "__version__",
    "rebuild_security",
]
