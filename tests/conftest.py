"""
Shared test fixtures.

PHILOSOPHY: Use REAL objects wherever possible. Only mock at system boundaries.
- Real engine dataclasses (not dicts pretending to be transactions)
- Real SQLite in-memory for repository tests
"""

from __future__ import annotations

import itertools
from datetime import date
from typing import TYPE_CHECKING, Any

import pytest

from lot_ledger.portfolio import Security, Transaction, TransactionAction, TxnType

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable

    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession


# ============================================================================
# Database Fixtures (REAL in-memory SQLite, not mocks)
# ============================================================================
@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create real async SQLite engine for testing."""
    from sqlalchemy.ext.asyncio import create_async_engine

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create real database session with the ledger schema."""
    from sqlalchemy.ext.asyncio import AsyncSession

    from lot_ledger.data.models import Base

    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSession(db_engine, expire_on_commit=False) as session:
        yield session


# ============================================================================
# Domain Object Builders (create REAL objects, not dicts)
# ============================================================================
@pytest.fixture
def make_security() -> Callable[..., Security]:
    """Factory for Security with a 50/50 ratio, 5% PDP, 10% STP and 20% HTP."""

    def _make(symbol: str = "TEST", **overrides: Any) -> Security:
        defaults: dict[str, Any] = {
            "swing_hold_ratio": 50.0,
            "pdp": 5.0,
            "stp": 10.0,
            "htp": 20.0,
            "commission": 0.0,
        }
        defaults.update(overrides)
        return Security(symbol=symbol, **defaults)

    return _make


@pytest.fixture
def make_txn() -> Callable[..., Transaction]:
    """Factory for Transaction with sequential ids."""
    ids = itertools.count(1)

    def _make(action: TransactionAction, on: date, **fields: Any) -> Transaction:
        fields.setdefault("id", str(next(ids)))
        return Transaction(action=action, date=on, **fields)

    return _make


@pytest.fixture
def buy(make_txn: Callable[..., Transaction]) -> Callable[..., Transaction]:
    def _buy(
        on: date,
        price: float,
        investment: float | None = None,
        *,
        txn_type: TxnType = TxnType.SPLIT,
        **fields: Any,
    ) -> Transaction:
        return make_txn(
            TransactionAction.BUY,
            on,
            price=price,
            investment=investment,
            txn_type=txn_type,
            **fields,
        )

    return _buy


@pytest.fixture
def sell(make_txn: Callable[..., Transaction]) -> Callable[..., Transaction]:
    def _sell(
        on: date,
        price: float,
        quantity: float,
        *,
        wallet_price: float,
        strategy: TxnType = TxnType.SWING,
        **fields: Any,
    ) -> Transaction:
        return make_txn(
            TransactionAction.SELL,
            on,
            price=price,
            quantity=quantity,
            wallet_price=wallet_price,
            txn_type=strategy,
            **fields,
        )

    return _sell


@pytest.fixture
def split(make_txn: Callable[..., Transaction]) -> Callable[..., Transaction]:
    def _split(on: date, ratio: float) -> Transaction:
        return make_txn(TransactionAction.STOCK_SPLIT, on, split_ratio=ratio)

    return _split
