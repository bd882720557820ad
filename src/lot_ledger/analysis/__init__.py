"""Portfolio roll-ups, group metrics and per-security signals."""

from lot_ledger.analysis.groups import GROUP_ORDERS, GroupBy, format_group_name, normalize_group_by
from lot_ledger.analysis.metrics import (
    GroupMetrics,
    SecurityOverview,
    calculate_grouped_metrics,
    calculate_portfolio_totals,
    calculate_roic,
    calculate_security_overview,
)
from lot_ledger.analysis.signals import SecuritySignals, calculate_security_signals

__all__ = [
    "GROUP_ORDERS",
    "GroupBy",
    "GroupMetrics",
    "SecurityOverview",
    "SecuritySignals",
    "calculate_grouped_metrics",
    "calculate_portfolio_totals",
    "calculate_roic",
    "calculate_security_overview",
    "calculate_security_signals",
    "format_group_name",
    "normalize_group_by",
]
