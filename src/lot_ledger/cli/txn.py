"""Typer CLI commands for entering and listing transactions.

Every mutating command stores the transaction and then rebuilds the security's wallets and
cash-flow caches from its full history in the same unit of work. If the rebuild fails, nothing
is written.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import TYPE_CHECKING, Annotated

import typer
from rich.table import Table

from lot_ledger.cli.utils import DbOption, console, exit_ledger_error, resolve_db_path, run_async
from lot_ledger.exceptions import LedgerError
from lot_ledger.formatting import format_currency, format_shares, format_signed_currency
from lot_ledger.portfolio import (  # noqa: TC001 - Required at runtime for Typer introspection
    StrategyType,
    Transaction,
    TransactionAction,
    TxnType,
)

if TYPE_CHECKING:
    from pathlib import Path

    from lot_ledger.portfolio import SecurityLedger

app = typer.Typer(help="Transaction entry commands.")

DateOption = Annotated[
    datetime | None,
    typer.Option(
        "--date", help="Transaction date (YYYY-MM-DD, default: today).", formats=["%Y-%m-%d"]
    ),
]


def _txn_date(value: datetime | None) -> date:
    return value.date() if value is not None else date.today()


def _store_and_rebuild(
    path: Path,
    symbol: str,
    txn: Transaction,
    *,
    test_price_ratio: float | None = None,
) -> tuple[SecurityLedger, str]:
    """Insert one transaction, rebuild the security and commit both together.

    Returns the rebuilt ledger and the new transaction's id.
    """
    from lot_ledger.cli.db import open_db_session
    from lot_ledger.data import SecurityRepository, TransactionRepository, rebuild_and_store
    from lot_ledger.data._converters import security_record_to_domain, transaction_to_record
    from lot_ledger.portfolio import split_adjusted_test_price

    async def _store() -> tuple[SecurityLedger, str]:
        async with open_db_session(path) as session:
            record = await SecurityRepository(session).require(symbol)
            security = security_record_to_domain(record)
            txn_record = await TransactionRepository(session).add(
                transaction_to_record(txn, record.id, security)
            )
            if test_price_ratio is not None:
                record.test_price = split_adjusted_test_price(record.test_price, test_price_ratio)
            return await rebuild_and_store(session, record), str(txn_record.id)

    try:
        return run_async(_store())
    except LedgerError as e:
        exit_ledger_error(e)


def _print_cash_flow(ledger: SecurityLedger) -> None:
    console.print(
        f"  OOP {format_currency(ledger.cash_flow.total_out_of_pocket)}"
        f"  Cash {format_currency(ledger.cash_flow.current_cash_balance)}"
        f"  Active wallets {len(ledger.active_wallets)}"
    )


@app.command("buy")
def txn_buy(
    symbol: Annotated[str, typer.Argument(help="Ticker symbol.")],
    price: Annotated[float, typer.Option("--price", "-p", help="Buy price per share.")],
    investment: Annotated[
        float | None, typer.Option("--investment", "-i", help="Amount invested.")
    ] = None,
    quantity: Annotated[
        float | None, typer.Option("--quantity", "-q", help="Shares bought (if no investment).")
    ] = None,
    txn_type: Annotated[
        TxnType,
        typer.Option(
            "--type",
            "-t",
            help="Swing, Hold, or Split by the security's ratio.",
            case_sensitive=False,
        ),
    ] = TxnType.SPLIT,
    signal: Annotated[str | None, typer.Option("--signal", help="Entry signal label.")] = None,
    txn_date: DateOption = None,
    db_path: DbOption = None,
) -> None:
    """Record a Buy."""
    if investment is None and quantity is None:
        console.print("[red]Error:[/red] Provide --investment or --quantity")
        raise typer.Exit(1)

    txn = Transaction(
        action=TransactionAction.BUY,
        date=_txn_date(txn_date),
        price=price,
        investment=investment,
        quantity=quantity,
        txn_type=txn_type,
        signal=signal,
    )
    ledger, _ = _store_and_rebuild(resolve_db_path(db_path), symbol, txn)
    console.print(f"[green]✓[/green] Bought {ledger.security.symbol} at {price:g}")
    _print_cash_flow(ledger)


@app.command("sell")
def txn_sell(
    symbol: Annotated[str, typer.Argument(help="Ticker symbol.")],
    price: Annotated[float, typer.Option("--price", "-p", help="Sell price per share.")],
    quantity: Annotated[float, typer.Option("--quantity", "-q", help="Shares sold.")],
    strategy: Annotated[
        StrategyType,
        typer.Option(
            "--strategy", "-s", help="Wallet strategy (Swing or Hold).", case_sensitive=False
        ),
    ],
    wallet_price: Annotated[
        float, typer.Option("--wallet-price", "-w", help="Buy price of the wallet to sell from.")
    ],
    amount: Annotated[
        float | None,
        typer.Option("--amount", help="Net proceeds, if different from price * quantity."),
    ] = None,
    signal: Annotated[str | None, typer.Option("--signal", help="Exit signal label.")] = None,
    txn_date: DateOption = None,
    db_path: DbOption = None,
) -> None:
    """Record a Sell against one wallet."""
    txn = Transaction(
        action=TransactionAction.SELL,
        date=_txn_date(txn_date),
        price=price,
        quantity=quantity,
        amount=amount,
        txn_type=TxnType(strategy.value),
        wallet_price=wallet_price,
        signal=signal,
    )
    ledger, txn_id = _store_and_rebuild(resolve_db_path(db_path), symbol, txn)

    sell = next((s for s in ledger.sells if s.transaction.id == txn_id), None)
    console.print(f"[green]✓[/green] Sold {format_shares(quantity)} {ledger.security.symbol}")
    if sell is not None:
        console.print(f"  Realized P/L {format_signed_currency(sell.realized_pl)}")
    _print_cash_flow(ledger)


@app.command("income")
def txn_income(
    symbol: Annotated[str, typer.Argument(help="Ticker symbol.")],
    amount: Annotated[float, typer.Option("--amount", "-a", help="Amount received.")],
    slp: Annotated[
        bool, typer.Option("--slp", help="Record as stock-lending payment instead of dividend.")
    ] = False,
    txn_date: DateOption = None,
    db_path: DbOption = None,
) -> None:
    """Record a dividend or stock-lending payment."""
    action = TransactionAction.SLP if slp else TransactionAction.DIVIDEND
    txn = Transaction(action=action, date=_txn_date(txn_date), amount=amount)
    ledger, _ = _store_and_rebuild(resolve_db_path(db_path), symbol, txn)
    console.print(f"[green]✓[/green] Recorded {action.value} for {ledger.security.symbol}")
    _print_cash_flow(ledger)


@app.command("split")
def txn_split(
    symbol: Annotated[str, typer.Argument(help="Ticker symbol.")],
    ratio: Annotated[float, typer.Option("--ratio", "-r", help="Split ratio, e.g. 2 for 2:1.")],
    txn_date: DateOption = None,
    db_path: DbOption = None,
) -> None:
    """Record a stock split; earlier prices and shares are re-expressed in post-split units."""
    txn = Transaction(
        action=TransactionAction.STOCK_SPLIT, date=_txn_date(txn_date), split_ratio=ratio
    )
    ledger, _ = _store_and_rebuild(
        resolve_db_path(db_path), symbol, txn, test_price_ratio=ratio if ratio > 0 else None
    )
    console.print(
        f"[green]✓[/green] Recorded {ratio:g}:1 split for {ledger.security.symbol} "
        f"(cumulative factor {ledger.split_factor:g})"
    )


@app.command("delete")
def txn_delete(
    txn_id: Annotated[int, typer.Argument(help="Transaction id (see `ledger txn list`).")],
    db_path: DbOption = None,
) -> None:
    """Delete a transaction and rebuild its security."""
    from lot_ledger.cli.db import open_db_session
    from lot_ledger.data import (
        SecurityRepository,
        TransactionRepository,
        rebuild_and_store,
    )
    from lot_ledger.portfolio import split_adjusted_test_price

    path = resolve_db_path(db_path)

    async def _delete() -> SecurityLedger | None:
        async with open_db_session(path) as session:
            txn_repo = TransactionRepository(session)
            txn_record = await txn_repo.get(txn_id)
            if txn_record is None:
                return None
            record = await SecurityRepository(session).get(txn_record.security_id)
            if record is None:
                return None
            if (
                txn_record.action == TransactionAction.STOCK_SPLIT.value
                and txn_record.split_ratio
            ):
                record.test_price = split_adjusted_test_price(
                    record.test_price, 1 / txn_record.split_ratio
                )
            await txn_repo.delete(txn_record)
            return await rebuild_and_store(session, record)

    try:
        ledger = run_async(_delete())
    except LedgerError as e:
        exit_ledger_error(e)

    if ledger is None:
        console.print(f"[red]Error:[/red] Transaction {txn_id} not found")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Deleted transaction {txn_id} from {ledger.security.symbol}")
    _print_cash_flow(ledger)


@app.command("list")
def txn_list(
    symbol: Annotated[str, typer.Argument(help="Ticker symbol.")],
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    db_path: DbOption = None,
) -> None:
    """List a security's stored transactions in ledger order."""
    from lot_ledger.cli.db import open_db_session
    from lot_ledger.data import SecurityRepository, TransactionRecord, TransactionRepository

    path = resolve_db_path(db_path)

    async def _list() -> list[TransactionRecord]:
        async with open_db_session(path) as session:
            record = await SecurityRepository(session).require(symbol)
            return list(await TransactionRepository(session).list_for_security(record.id))

    try:
        records = run_async(_list())
    except LedgerError as e:
        exit_ledger_error(e)

    if output_json:
        rows = [
            {
                "id": r.id,
                "date": r.txn_date.isoformat(),
                "action": r.action,
                "txn_type": r.txn_type,
                "price": r.price,
                "investment": r.investment,
                "quantity": r.quantity,
                "amount": r.amount,
                "wallet_price": r.wallet_price,
                "split_ratio": r.split_ratio,
                "lbd": r.lbd,
                "txn_profit": r.txn_profit,
                "txn_profit_percent": r.txn_profit_percent,
            }
            for r in records
        ]
        console.print_json(json.dumps(rows))
        return

    if not records:
        console.print(f"[yellow]No transactions for {symbol.upper()}[/yellow]")
        return

    table = Table(title=f"{symbol.upper()} Transactions")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Date")
    table.add_column("Action", style="cyan")
    table.add_column("Type")
    table.add_column("Price", justify="right")
    table.add_column("Qty", justify="right")
    table.add_column("Amount", justify="right")
    table.add_column("Wallet", justify="right")
    table.add_column("LBD", justify="right")
    table.add_column("P/L", justify="right")

    for r in records:
        if r.action == TransactionAction.STOCK_SPLIT.value:
            amount = f"{r.split_ratio:g}:1" if r.split_ratio else "-"
        elif r.action == TransactionAction.BUY.value:
            amount = format_currency(r.investment)
        else:
            amount = format_currency(r.amount)
        table.add_row(
            str(r.id),
            r.txn_date.isoformat(),
            r.action,
            r.txn_type or "-",
            format_currency(r.price),
            format_shares(r.quantity),
            amount,
            format_currency(r.wallet_price),
            format_currency(r.lbd),
            format_signed_currency(r.txn_profit),
        )

    console.print(table)
