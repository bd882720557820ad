"""
Centralized path defaults for lot-ledger.

All paths are expressed relative to the current working directory. Every path default can be
overridden via CLI options or `LOT_LEDGER_DB_PATH`.
"""

from pathlib import Path

DEFAULT_DATA_DIR = Path("data")
DEFAULT_DB_PATH = DEFAULT_DATA_DIR / "ledger.db"
DEFAULT_EXPORTS_DIR = DEFAULT_DATA_DIR / "exports"

__all__ = [
    "DEFAULT_DATA_DIR",
    "DEFAULT_DB_PATH",
    "DEFAULT_EXPORTS_DIR",
]
