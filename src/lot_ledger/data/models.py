"""SQLAlchemy ORM models for ledger storage."""

from __future__ import annotations

from datetime import UTC, date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class SecurityRecord(Base):
    """A tracked security with its strategy configuration and cached cash flow."""

    __tablename__ = "securities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    symbol: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    stock_type: Mapped[str | None] = mapped_column(String(20), nullable=True)  # Stock/ETF/Crypto
    region: Mapped[str | None] = mapped_column(String(20), nullable=True)
    market_category: Mapped[str | None] = mapped_column(String(40), nullable=True)
    risk_growth_profile: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Strategy configuration (percents)
    swing_hold_ratio: Mapped[float | None] = mapped_column(Float, nullable=True)
    pdp: Mapped[float | None] = mapped_column(Float, nullable=True)
    plr: Mapped[float | None] = mapped_column(Float, nullable=True)
    stp: Mapped[float | None] = mapped_column(Float, nullable=True)
    htp: Mapped[float | None] = mapped_column(Float, nullable=True)
    commission: Mapped[float | None] = mapped_column(Float, nullable=True)
    budget: Mapped[float | None] = mapped_column(Float, nullable=True)
    test_price: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Derived caches, rewritten on every rebuild
    split_adjustment_factor: Mapped[float] = mapped_column(Float, default=1.0, nullable=False)
    total_out_of_pocket: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    current_cash_balance: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
    )


class TransactionRecord(Base):
    """A stored transaction. Its id also fixes the order of same-date entries."""

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    security_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("securities.id", ondelete="CASCADE"), nullable=False
    )
    txn_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    action: Mapped[str] = mapped_column(String(16), nullable=False)  # Buy/Sell/Div/SLP/StockSplit
    signal: Mapped[str | None] = mapped_column(String(20), nullable=True)
    txn_type: Mapped[str | None] = mapped_column(String(10), nullable=True)  # Swing/Hold/Split

    price: Mapped[float | None] = mapped_column(Float, nullable=True)
    investment: Mapped[float | None] = mapped_column(Float, nullable=True)
    quantity: Mapped[float | None] = mapped_column(Float, nullable=True)
    swing_shares: Mapped[float | None] = mapped_column(Float, nullable=True)
    hold_shares: Mapped[float | None] = mapped_column(Float, nullable=True)
    amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    wallet_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    split_ratio: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Entry-time LBD for Buys; realized P/L for Sells (written on rebuild)
    lbd: Mapped[float | None] = mapped_column(Float, nullable=True)
    txn_profit: Mapped[float | None] = mapped_column(Float, nullable=True)
    txn_profit_percent: Mapped[float | None] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    __table_args__ = (Index("idx_transactions_security_date", "security_id", "date"),)


class WalletRecord(Base):
    """Persisted copy of a derived wallet (rounded to storage precision)."""

    __tablename__ = "wallets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    security_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("securities.id", ondelete="CASCADE"), nullable=False
    )
    strategy: Mapped[str] = mapped_column(String(10), nullable=False)  # Swing/Hold
    buy_price: Mapped[float] = mapped_column(Float, nullable=False)
    target_price: Mapped[float] = mapped_column(Float, nullable=False)
    total_investment: Mapped[float] = mapped_column(Float, nullable=False)
    total_shares: Mapped[float] = mapped_column(Float, nullable=False)
    remaining_shares: Mapped[float] = mapped_column(Float, nullable=False)
    shares_sold: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    sell_txn_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    realized_pl: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    realized_pl_percent: Mapped[float | None] = mapped_column(Float, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
    )

    __table_args__ = (
        UniqueConstraint("security_id", "strategy", "buy_price", name="uq_wallet_price_strategy"),
        Index("idx_wallets_security", "security_id"),
    )
