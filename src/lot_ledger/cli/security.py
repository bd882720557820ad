"""Typer CLI commands for managing tracked securities."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Annotated

import typer
from rich.table import Table

from lot_ledger.cli.utils import (
    DbOption,
    console,
    exit_ledger_error,
    load_config,
    resolve_db_path,
    run_async,
)
from lot_ledger.exceptions import LedgerError
from lot_ledger.formatting import format_currency, format_percent, format_shares

if TYPE_CHECKING:
    from pathlib import Path

app = typer.Typer(help="Security management commands.")


@app.command("add")
def security_add(
    symbol: Annotated[str, typer.Argument(help="Ticker symbol, e.g. AAPL.")],
    name: Annotated[str | None, typer.Option("--name", help="Display name.")] = None,
    stock_type: Annotated[
        str | None, typer.Option("--type", help="Stock, ETF or Crypto.")
    ] = None,
    region: Annotated[str | None, typer.Option("--region", help="APAC, EU, Intl or US.")] = None,
    market_category: Annotated[
        str | None, typer.Option("--category", help="Market category, e.g. US_Index.")
    ] = None,
    risk_growth_profile: Annotated[
        str | None, typer.Option("--profile", help="Hare or Tortoise.")
    ] = None,
    swing_hold_ratio: Annotated[
        float | None,
        typer.Option("--ratio", help="Percent of each Buy sent to Swing (0-100).", min=0, max=100),
    ] = None,
    pdp: Annotated[float | None, typer.Option("--pdp", help="Price drop percent.")] = None,
    plr: Annotated[float | None, typer.Option("--plr", help="Legacy profit multiple.")] = None,
    stp: Annotated[float | None, typer.Option("--stp", help="Swing take-profit %.")] = None,
    htp: Annotated[float | None, typer.Option("--htp", help="Hold take-profit %.")] = None,
    commission: Annotated[
        float | None, typer.Option("--commission", help="Commission percent.", min=0)
    ] = None,
    budget: Annotated[float | None, typer.Option("--budget", help="Budget (max risk).")] = None,
    db_path: DbOption = None,
) -> None:
    """Add a security to track."""
    from lot_ledger.cli.db import open_db_session
    from lot_ledger.data import SecurityRecord, SecurityRepository

    config = load_config()
    path = resolve_db_path(db_path)
    symbol = symbol.strip().upper()

    async def _add() -> None:
        async with open_db_session(path) as session:
            repo = SecurityRepository(session)
            if await repo.get_by_symbol(symbol) is not None:
                console.print(f"[red]Error:[/red] Security {symbol} already exists")
                raise typer.Exit(1)
            await repo.add(
                SecurityRecord(
                    symbol=symbol,
                    name=name,
                    stock_type=stock_type,
                    region=region,
                    market_category=market_category,
                    risk_growth_profile=risk_growth_profile,
                    swing_hold_ratio=(
                        swing_hold_ratio
                        if swing_hold_ratio is not None
                        else config.default_swing_hold_ratio
                    ),
                    pdp=pdp,
                    plr=plr,
                    stp=stp,
                    htp=htp,
                    commission=commission if commission is not None else config.default_commission,
                    budget=budget,
                )
            )
            await repo.commit()

    run_async(_add())
    console.print(f"[green]✓[/green] Added {symbol}")


@app.command("list")
def security_list(
    include_archived: Annotated[
        bool, typer.Option("--all", "-a", help="Include archived securities.")
    ] = False,
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    db_path: DbOption = None,
) -> None:
    """List tracked securities with cached cash flow."""
    from lot_ledger.cli.db import open_db_session
    from lot_ledger.data import SecurityRecord, SecurityRepository

    path = resolve_db_path(db_path)

    async def _list() -> list[SecurityRecord]:
        async with open_db_session(path) as session:
            records = await SecurityRepository(session).list_all(
                include_archived=include_archived
            )
            return list(records)

    records = run_async(_list())

    if output_json:
        rows = [
            {
                "symbol": r.symbol,
                "name": r.name,
                "region": r.region,
                "market_category": r.market_category,
                "risk_growth_profile": r.risk_growth_profile,
                "budget": r.budget,
                "total_out_of_pocket": r.total_out_of_pocket,
                "current_cash_balance": r.current_cash_balance,
                "test_price": r.test_price,
                "is_hidden": r.is_hidden,
                "is_archived": r.is_archived,
            }
            for r in records
        ]
        console.print_json(json.dumps(rows))
        return

    if not records:
        console.print("[yellow]No securities found[/yellow]")
        return

    table = Table(title="Securities")
    table.add_column("Symbol", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Region")
    table.add_column("Category")
    table.add_column("Profile")
    table.add_column("Budget", justify="right")
    table.add_column("OOP", justify="right")
    table.add_column("Cash", justify="right")
    table.add_column("Flags", style="dim")

    for r in records:
        flags = []
        if r.is_hidden:
            flags.append("hidden")
        if r.is_archived:
            flags.append("archived")
        if r.test_price is not None:
            flags.append("test price")
        table.add_row(
            r.symbol,
            r.name or "-",
            r.region or "-",
            r.market_category or "-",
            r.risk_growth_profile or "-",
            format_currency(r.budget),
            format_currency(r.total_out_of_pocket),
            format_currency(r.current_cash_balance),
            ", ".join(flags),
        )

    console.print(table)


@app.command("show")
def security_show(
    symbol: Annotated[str, typer.Argument(help="Ticker symbol.")],
    db_path: DbOption = None,
) -> None:
    """Show a security's configuration and derived state."""
    from lot_ledger.cli.db import open_db_session
    from lot_ledger.data import SecurityRepository, load_security_ledger
    from lot_ledger.portfolio import SecurityLedger

    path = resolve_db_path(db_path)

    async def _show() -> SecurityLedger:
        async with open_db_session(path) as session:
            record = await SecurityRepository(session).require(symbol)
            return await load_security_ledger(session, record)

    try:
        ledger = run_async(_show())
    except LedgerError as e:
        exit_ledger_error(e)

    security = ledger.security
    table = Table(title=f"{security.symbol} {security.name or ''}".strip(), show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Type", security.stock_type or "-")
    table.add_row("Region", security.region or "-")
    table.add_row("Category", security.market_category or "-")
    table.add_row("Profile", security.risk_growth_profile or "-")
    table.add_row("Swing/Hold ratio", format_percent(security.swing_hold_ratio))
    table.add_row("PDP", format_percent(security.pdp))
    table.add_row("STP", format_percent(security.stp))
    table.add_row("HTP", format_percent(security.htp))
    table.add_row("Commission", format_percent(security.commission))
    table.add_row("Budget", format_currency(security.budget))
    table.add_row("Test price", format_currency(security.test_price))
    table.add_row("Split factor", f"{ledger.split_factor:g}")
    table.add_row("", "")
    table.add_row("Out of pocket", format_currency(ledger.cash_flow.total_out_of_pocket))
    table.add_row("Cash balance", format_currency(ledger.cash_flow.current_cash_balance))
    table.add_row("Tied up", format_currency(ledger.tied_up))
    table.add_row("Active wallets", str(len(ledger.active_wallets)))
    table.add_row(
        "Shares held", format_shares(sum(w.remaining_shares for w in ledger.active_wallets))
    )

    console.print(table)


@app.command("archive")
def security_archive(
    symbol: Annotated[str, typer.Argument(help="Ticker symbol.")],
    undo: Annotated[bool, typer.Option("--undo", help="Unarchive instead.")] = False,
    db_path: DbOption = None,
) -> None:
    """Archive a security (excluded from reports and group totals)."""
    _set_flag(symbol, "is_archived", not undo, resolve_db_path(db_path))
    console.print(f"[green]✓[/green] {symbol.upper()} {'unarchived' if undo else 'archived'}")


@app.command("hide")
def security_hide(
    symbol: Annotated[str, typer.Argument(help="Ticker symbol.")],
    undo: Annotated[bool, typer.Option("--undo", help="Unhide instead.")] = False,
    db_path: DbOption = None,
) -> None:
    """Hide a security (its budget no longer counts towards max risk)."""
    _set_flag(symbol, "is_hidden", not undo, resolve_db_path(db_path))
    console.print(f"[green]✓[/green] {symbol.upper()} {'unhidden' if undo else 'hidden'}")


@app.command("set-test-price")
def security_set_test_price(
    symbol: Annotated[str, typer.Argument(help="Ticker symbol.")],
    price: Annotated[
        float | None, typer.Argument(help="Test price; omit to clear.", min=0)
    ] = None,
    db_path: DbOption = None,
) -> None:
    """Set or clear the manual test price used when no fetched price is available."""
    from lot_ledger.cli.db import open_db_session
    from lot_ledger.data import SecurityRepository

    path = resolve_db_path(db_path)

    async def _set() -> None:
        async with open_db_session(path) as session:
            record = await SecurityRepository(session).require(symbol)
            record.test_price = price or None
            await session.commit()

    try:
        run_async(_set())
    except LedgerError as e:
        exit_ledger_error(e)

    if price:
        console.print(f"[green]✓[/green] {symbol.upper()} test price set to {price:g}")
    else:
        console.print(f"[green]✓[/green] {symbol.upper()} test price cleared")


def _set_flag(symbol: str, field: str, value: bool, path: Path) -> None:
    from lot_ledger.cli.db import open_db_session
    from lot_ledger.data import SecurityRepository

    async def _set() -> None:
        async with open_db_session(path) as session:
            record = await SecurityRepository(session).require(symbol)
            setattr(record, field, value)
            await session.commit()

    try:
        run_async(_set())
    except LedgerError as e:
        exit_ledger_error(e)
