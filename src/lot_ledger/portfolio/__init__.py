"""Lot accounting: wallets, cash flow, stock splits and P&L."""

from lot_ledger.portfolio._allocation import allocate_buy, swing_fraction, with_allocation
from lot_ledger.portfolio._models import (
    BuyAllocation,
    CashFlowState,
    Security,
    StrategyType,
    Transaction,
    TransactionAction,
    TxnType,
    Wallet,
    sort_transactions,
    wallet_key,
)
from lot_ledger.portfolio.cashflow import (
    CashFlowReplay,
    CashFlowStep,
    apply_transaction,
    replay_cash_flow,
    should_highlight_cash_balance,
)
from lot_ledger.portfolio.pnl import PnLCalculator, PnLSummary
from lot_ledger.portfolio.rebuild import SecurityLedger, rebuild_security
from lot_ledger.portfolio.splits import (
    AdjustedTransaction,
    cumulative_split_factor,
    derive_effective_transactions,
    extract_stock_splits,
    split_adjusted_test_price,
)
from lot_ledger.portfolio.validation import validate_transaction, validate_transactions
from lot_ledger.portfolio.wallets import SellResult, WalletBuildResult, build_wallets

__all__ = [
    "AdjustedTransaction",
    "BuyAllocation",
    "CashFlowReplay",
    "CashFlowState",
    "CashFlowStep",
    "PnLCalculator",
    "PnLSummary",
    "Security",
    "SecurityLedger",
    "SellResult",
    "StrategyType",
    "Transaction",
    "TransactionAction",
    "TxnType",
    "Wallet",
    "WalletBuildResult",
    "allocate_buy",
    "apply_transaction",
    "build_wallets",
    "cumulative_split_factor",
    "derive_effective_transactions",
    "extract_stock_splits",
    "rebuild_security",
    "replay_cash_flow",
    "should_highlight_cash_balance",
    "sort_transactions",
    "split_adjusted_test_price",
    "swing_fraction",
    "validate_transaction",
    "validate_transactions",
    "wallet_key",
    "with_allocation",
]
