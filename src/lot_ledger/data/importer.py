"""Bulk import of securities and transaction history from a JSON file."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from lot_ledger.data._converters import security_record_to_domain, transaction_to_record
from lot_ledger.data.ledger import rebuild_and_store
from lot_ledger.data.models import SecurityRecord
from lot_ledger.data.repositories import (
    SecurityRepository,
    TransactionRepository,
    WalletRepository,
)
from lot_ledger.exceptions import LedgerError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from lot_ledger.data.schemas import LedgerFile, SecurityIn

logger = structlog.get_logger()


@dataclass(frozen=True)
class ImportResult:
    imported: list[str]
    skipped: list[str]


async def import_ledger(
    session: AsyncSession, ledger_file: LedgerFile, *, replace: bool = False
) -> ImportResult:
    """
    Import securities and their transactions, rebuilding each one.

    Each security is its own unit of work: it is inserted, flushed and rebuilt, and only a
    successful rebuild commits. A security whose history fails to rebuild leaves nothing behind.

    Args:
        session: Open session.
        ledger_file: Parsed import file.
        replace: Delete and re-create securities that already exist (with their history)
            instead of skipping them.

    Raises:
        LedgerError: If a security's history is invalid (earlier securities stay committed).
    """
    repo = SecurityRepository(session)
    imported: list[str] = []
    skipped: list[str] = []

    for security_in in ledger_file.securities:
        existing = await repo.get_by_symbol(security_in.symbol)
        if existing is not None:
            if not replace:
                logger.info("Skipping existing security", symbol=security_in.symbol)
                skipped.append(security_in.symbol)
                continue
            await TransactionRepository(session).delete_for_security(existing.id)
            await WalletRepository(session).delete_for_security(existing.id)
            await repo.delete(existing)

        try:
            await _import_security(session, security_in)
        except LedgerError:
            await session.rollback()
            raise
        imported.append(security_in.symbol)

    logger.info("Imported ledger", imported=len(imported), skipped=len(skipped))
    return ImportResult(imported=imported, skipped=skipped)


async def _import_security(session: AsyncSession, security_in: SecurityIn) -> None:
    record = await SecurityRepository(session).add(security_in_to_record(security_in))
    security = security_record_to_domain(record)

    txn_repo = TransactionRepository(session)
    for txn_in in security_in.transactions:
        await txn_repo.add(
            transaction_to_record(txn_in.to_domain(), record.id, security), flush=False
        )
    await session.flush()

    await rebuild_and_store(session, record)


def security_in_to_record(security_in: SecurityIn) -> SecurityRecord:
    return SecurityRecord(
        symbol=security_in.symbol,
        name=security_in.name,
        stock_type=security_in.stock_type,
        region=security_in.region,
        market_category=security_in.market_category,
        risk_growth_profile=security_in.risk_growth_profile,
        swing_hold_ratio=security_in.swing_hold_ratio,
        pdp=security_in.pdp,
        plr=security_in.plr,
        stp=security_in.stp,
        htp=security_in.htp,
        commission=security_in.commission,
        budget=security_in.budget,
        test_price=security_in.test_price,
        is_hidden=security_in.is_hidden,
        is_archived=security_in.is_archived,
    )
