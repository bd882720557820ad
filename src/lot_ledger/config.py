"""Runtime configuration for lot-ledger."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from lot_ledger.constants import DEFAULT_SWING_HOLD_RATIO
from lot_ledger.paths import DEFAULT_DB_PATH


@dataclass(frozen=True)
class LedgerConfig:
    """Configuration shared by the CLI and the storage layer."""

    db_path: Path = DEFAULT_DB_PATH
    default_swing_hold_ratio: float = DEFAULT_SWING_HOLD_RATIO
    default_commission: float = 0.0

    @classmethod
    def from_env(cls) -> LedgerConfig:
        """Load configuration from environment variables.

        Optional:
            LOT_LEDGER_DB_PATH: SQLite database file (default: data/ledger.db)
            LOT_LEDGER_DEFAULT_SWING_HOLD_RATIO: Percent of each Buy sent to Swing for new
                securities (default: 50)
            LOT_LEDGER_DEFAULT_COMMISSION: Commission percent for new securities (default: 0)

        Raises:
            ValueError: If a numeric variable cannot be parsed or is out of range.
        """
        ratio = _float_env("LOT_LEDGER_DEFAULT_SWING_HOLD_RATIO", DEFAULT_SWING_HOLD_RATIO)
        if not 0 <= ratio <= 100:
            raise ValueError(
                f"LOT_LEDGER_DEFAULT_SWING_HOLD_RATIO must be between 0 and 100 (got {ratio})"
            )

        commission = _float_env("LOT_LEDGER_DEFAULT_COMMISSION", 0.0)
        if commission < 0:
            raise ValueError(f"LOT_LEDGER_DEFAULT_COMMISSION must be >= 0 (got {commission})")

        db_path = os.environ.get("LOT_LEDGER_DB_PATH")
        return cls(
            db_path=Path(db_path) if db_path else DEFAULT_DB_PATH,
            default_swing_hold_ratio=ratio,
            default_commission=commission,
        )


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number (got {raw!r})") from None
