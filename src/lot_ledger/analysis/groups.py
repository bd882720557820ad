"""Grouping dimensions for portfolio roll-ups.

Groups are always presented in a fixed canonical order (not alphabetical, not by first
appearance) so that overview tables keep a stable layout.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from lot_ledger.constants import MARKET_CATEGORY_ORDER, REGION_ORDER, RISK_GROWTH_PROFILE_ORDER

if TYPE_CHECKING:
    from lot_ledger.portfolio import Security


class GroupBy(str, Enum):
    """Security attribute used to group roll-ups."""

    REGION = "region"
    MARKET_CATEGORY = "market_category"
    RISK_GROWTH_PROFILE = "risk_growth_profile"


GROUP_ORDERS: dict[GroupBy, tuple[str, ...]] = {
    GroupBy.REGION: REGION_ORDER,
    GroupBy.MARKET_CATEGORY: MARKET_CATEGORY_ORDER,
    GroupBy.RISK_GROWTH_PROFILE: RISK_GROWTH_PROFILE_ORDER,
}

# CLI-friendly aliases (case-insensitive).
GROUP_BY_ALIASES: dict[str, GroupBy] = {
    "region": GroupBy.REGION,
    "category": GroupBy.MARKET_CATEGORY,
    "market-category": GroupBy.MARKET_CATEGORY,
    "market_category": GroupBy.MARKET_CATEGORY,
    "risk": GroupBy.RISK_GROWTH_PROFILE,
    "risk-growth-profile": GroupBy.RISK_GROWTH_PROFILE,
    "risk_growth_profile": GroupBy.RISK_GROWTH_PROFILE,
}


def normalize_group_by(value: str) -> GroupBy | None:
    """Resolve user input to a GroupBy, or None if unknown."""
    return GROUP_BY_ALIASES.get(value.strip().lower())


def group_key(security: Security, group_by: GroupBy) -> str | None:
    """Return the security's value for a grouping dimension."""
    return getattr(security, group_by.value)


def format_group_name(name: str, group_by: GroupBy) -> str:
    """Display name for a group (market categories use spaces, e.g. ``US Index``)."""
    if group_by is GroupBy.MARKET_CATEGORY:
        return name.replace("_", " ")
    return name
