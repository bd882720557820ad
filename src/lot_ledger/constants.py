"""Centralized policy constants for lot-ledger.

Every precision, epsilon, boundary and fixed ordering used by the engine and the reporting
layer lives here so that the two never diverge.
"""

from __future__ import annotations

# =============================================================================
# Display Precision
# =============================================================================

# Decimal places used when shares, currency and percentages are displayed or persisted.
#
# Used by:
# - precision.py: round_shares(), round_currency(), round_percent()
# - formatting.py: format_shares(), format_currency(), format_percent()
# - data/repositories.py: wallet persistence
SHARE_PRECISION: int = 5
CURRENCY_PRECISION: int = 2
PERCENT_PRECISION: int = 2

# Target prices are kept at a finer precision than currency. Rounding a commission-adjusted
# target to 2 decimals shifts realized P/L by about a cent per lot.
#
# Used by:
# - pricing.py: calculate_target_price()
# - data/repositories.py: wallet persistence
TARGET_PRICE_PRECISION: int = 4

# =============================================================================
# Epsilon Thresholds
# =============================================================================

# "Effectively zero" thresholds, two orders of magnitude below display precision:
# epsilon = 1 / 10^(precision + 2).
#
# Used by:
# - precision.py: is_zero_shares(), is_zero_currency(), is_zero_percent()
SHARE_EPSILON: float = 1 / 10 ** (SHARE_PRECISION + 2)
CURRENCY_EPSILON: float = 1 / 10 ** (CURRENCY_PRECISION + 2)
PERCENT_EPSILON: float = 1 / 10 ** (PERCENT_PRECISION + 2)

# =============================================================================
# Wallet Identity
# =============================================================================

# Buy prices are rounded to this many decimals to form the (price, strategy) wallet key.
# Two prices closer than 0.0001 land in the same wallet. Keys are compared in the units each
# Buy or Sell was recorded in, so a later stock split never changes which wallet an entry hits.
#
# Used by:
# - portfolio/_models.py: wallet_key()
# - portfolio/wallets.py: wallet lookup for Buys and Sells
WALLET_PRICE_KEY_PRECISION: int = 4

# A Sell whose wallet price does not round to an existing key still matches the nearest wallet
# of its strategy within half a key step (absorbs float error from split rescaling).
WALLET_PRICE_MATCH_TOLERANCE: float = 0.5 / 10**WALLET_PRICE_KEY_PRECISION

# =============================================================================
# Buy Allocation
# =============================================================================

# Percent of a ratio-split Buy allocated to Swing when a security has no usable ratio.
#
# Used by:
# - portfolio/_allocation.py: allocate_buy()
# - config.py: LedgerConfig.default_swing_hold_ratio
DEFAULT_SWING_HOLD_RATIO: float = 50.0

# =============================================================================
# Signal Colour Boundaries
# =============================================================================

# Days since the last buy: yellow from 25 days, red from 31 days (both inclusive).
#
# Used by:
# - pricing.py: get_days_since_color()
DAYS_SINCE_YELLOW_THRESHOLD: int = 25
DAYS_SINCE_RED_THRESHOLD: int = 31

# Percent to target: green at or above 0%, yellow at or above -1% (both inclusive).
#
# Used by:
# - pricing.py: get_pct_to_target_color()
PCT_TO_TARGET_GREEN_THRESHOLD: float = 0.0
PCT_TO_TARGET_YELLOW_THRESHOLD: float = -1.0

# =============================================================================
# Pullback Window
# =============================================================================

# Number of most recent daily closes considered by the 5-day pullback.
#
# Used by:
# - pricing.py: calculate_5d_pullback()
PULLBACK_WINDOW_DAYS: int = 5

# =============================================================================
# Group Orders
# =============================================================================

# Canonical presentation order for grouped roll-ups. Every group appears, even when empty.
#
# Used by:
# - analysis/groups.py: GROUP_ORDERS
REGION_ORDER: tuple[str, ...] = ("APAC", "EU", "Intl", "US")
MARKET_CATEGORY_ORDER: tuple[str, ...] = (
    "APAC_Index",
    "China_Index",
    "Crypto",
    "Emerging_Index",
    "Europe_Index",
    "International_Index",
    "Metals",
    "Oil",
    "Opportunity",
    "US_Index",
)
RISK_GROWTH_PROFILE_ORDER: tuple[str, ...] = ("Hare", "Tortoise")
