"""Typer CLI commands for portfolio reports (overview, groups and signals)."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path  # noqa: TC003 - Required at runtime for Typer introspection
from typing import TYPE_CHECKING, Annotated

import typer
from rich.table import Table

from lot_ledger.cli.utils import (
    DbOption,
    console,
    exit_ledger_error,
    load_prices,
    resolve_db_path,
    run_async,
)
from lot_ledger.exceptions import LedgerError
from lot_ledger.formatting import (
    MISSING_VALUE,
    format_currency,
    format_percent,
    format_signed_currency,
)

if TYPE_CHECKING:
    from lot_ledger.portfolio import SecurityLedger
    from lot_ledger.pricing import SignalColor

app = typer.Typer(help="Portfolio reports.")

PricesOption = Annotated[
    Path | None,
    typer.Option(
        "--prices",
        help='JSON file with current prices: {"prices": {"SYMBOL": 123.45}}.',
    ),
]


def _load_ledgers(path: Path) -> list[SecurityLedger]:
    from lot_ledger.cli.db import open_db_session
    from lot_ledger.data import load_all_ledgers

    async def _load() -> list[SecurityLedger]:
        async with open_db_session(path) as session:
            return await load_all_ledgers(session)

    try:
        return run_async(_load())
    except LedgerError as e:
        exit_ledger_error(e)


def _colored(text: str, color: SignalColor) -> str:
    if color.value == "default":
        return text
    return f"[{color.value}]{text}[/{color.value}]"


@app.command("overview")
def report_overview(
    prices_path: PricesOption = None,
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    db_path: DbOption = None,
) -> None:
    """Per-security OOP, cash, tied-up capital, market value and ROIC."""
    from lot_ledger.analysis import calculate_portfolio_totals, calculate_security_overview

    prices = load_prices(prices_path).normalized()
    ledgers = _load_ledgers(resolve_db_path(db_path))
    overviews = [
        calculate_security_overview(ledger, prices.get(ledger.security.symbol))
        for ledger in ledgers
    ]
    totals = calculate_portfolio_totals(ledgers, prices)

    if output_json:
        console.print_json(
            json.dumps(
                {"securities": [asdict(o) for o in overviews], "totals": asdict(totals)}
            )
        )
        return

    if not overviews:
        console.print("[yellow]No securities found[/yellow]")
        return

    table = Table(title="Portfolio Overview")
    table.add_column("Symbol", style="cyan", no_wrap=True)
    table.add_column("Price", justify="right")
    table.add_column("OOP", justify="right")
    table.add_column("Cash", justify="right")
    table.add_column("Tied up", justify="right")
    table.add_column("Mkt value", justify="right")
    table.add_column("ROIC", justify="right")
    table.add_column("Realized", justify="right")
    table.add_column("Unrealized", justify="right")
    table.add_column("Budget left", justify="right")

    for o in overviews:
        table.add_row(
            o.symbol,
            format_currency(o.current_price),
            format_currency(o.total_out_of_pocket),
            format_currency(o.current_cash_balance),
            format_currency(o.tied_up),
            format_currency(o.market_value),
            format_percent(o.roic),
            format_signed_currency(o.realized_pl),
            format_signed_currency(o.unrealized_pl),
            format_currency(o.budget_available),
        )

    table.add_section()
    table.add_row(
        "[bold]Total[/bold]",
        "",
        format_currency(totals.oop),
        format_currency(totals.cash_balance),
        format_currency(totals.tied_up),
        format_currency(totals.market_value),
        format_percent(totals.roic),
        "",
        "",
        format_currency(totals.budget_available),
    )

    console.print(table)


@app.command("groups")
def report_groups(
    group_by: Annotated[
        str,
        typer.Option("--by", "-b", help="region, category or risk."),
    ] = "region",
    prices_path: PricesOption = None,
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    db_path: DbOption = None,
) -> None:
    """Roll securities up by region, market category or risk/growth profile."""
    from lot_ledger.analysis import calculate_grouped_metrics, normalize_group_by

    dimension = normalize_group_by(group_by)
    if dimension is None:
        console.print(
            f"[red]Error:[/red] Unknown grouping '{group_by}'. Expected region, category or risk."
        )
        raise typer.Exit(1)

    prices = load_prices(prices_path).normalized()
    ledgers = _load_ledgers(resolve_db_path(db_path))
    groups = calculate_grouped_metrics(ledgers, prices, dimension)

    if output_json:
        console.print_json(json.dumps([asdict(g) for g in groups]))
        return

    table = Table(title=f"Portfolio by {dimension.value.replace('_', ' ')}")
    table.add_column("Group", style="cyan")
    table.add_column("Securities", justify="right")
    table.add_column("Max risk", justify="right")
    table.add_column("OOP", justify="right")
    table.add_column("Cash", justify="right")
    table.add_column("Tied up", justify="right")
    table.add_column("Mkt value", justify="right")
    table.add_column("ROIC", justify="right")
    table.add_column("Used", justify="right")
    table.add_column("Available", justify="right")

    for g in groups:
        table.add_row(
            g.display_name,
            str(g.securities),
            format_currency(g.max_risk),
            format_currency(g.oop),
            format_currency(g.cash_balance),
            format_currency(g.tied_up),
            format_currency(g.market_value),
            format_percent(g.roic),
            format_currency(g.budget_used),
            format_currency(g.budget_available),
        )

    console.print(table)


@app.command("signals")
def report_signals(
    prices_path: PricesOption = None,
    use_test_prices: Annotated[
        bool,
        typer.Option(
            "--use-test-prices", help="Let test prices override fetched prices (marked with *)."
        ),
    ] = False,
    db_path: DbOption = None,
) -> None:
    """Entry and exit signals: days since last buy, pullbacks, Swing targets and HTP."""
    from lot_ledger.analysis import calculate_security_signals
    from lot_ledger.pricing import get_effective_price, merge_test_prices

    price_file = load_prices(prices_path)
    prices = price_file.normalized()
    closes = price_file.daily_closes()
    ledgers = [
        ledger
        for ledger in _load_ledgers(resolve_db_path(db_path))
        if not ledger.security.is_hidden
    ]

    overridden: set[str] = set()
    if use_test_prices:
        prices, overridden = merge_test_prices(
            prices, {ledger.security.symbol: ledger.security.test_price for ledger in ledgers}
        )

    if not ledgers:
        console.print("[yellow]No securities found[/yellow]")
        return

    table = Table(title="Signals")
    table.add_column("Symbol", style="cyan", no_wrap=True)
    table.add_column("Price", justify="right")
    table.add_column("Last buy")
    table.add_column("Days", justify="right")
    table.add_column("Pullback", justify="right")
    table.add_column("5D", justify="right")
    table.add_column("Swing TP", justify="right")
    table.add_column("HTP")
    table.add_column("Budget left", justify="right")

    for ledger in ledgers:
        symbol = ledger.security.symbol
        price = get_effective_price(prices.get(symbol), ledger.security.test_price)
        signals = calculate_security_signals(ledger, price, closes.get(symbol))

        price_text = format_currency(price)
        if symbol in overridden:
            price_text += "*"
        pullback_text = format_percent(signals.pullback_percent)
        if signals.pullback_triggered:
            pullback_text = f"[red]{pullback_text}[/red]"
        days = signals.days_since_last_buy
        days_text = MISSING_VALUE if days is None else str(days)

        table.add_row(
            symbol,
            price_text,
            signals.last_buy_date.isoformat() if signals.last_buy_date else MISSING_VALUE,
            _colored(days_text, signals.days_since_color),
            pullback_text,
            format_percent(signals.five_day_pullback),
            _colored(format_percent(signals.swing_pct_to_target), signals.swing_target_color),
            "[green]HTP[/green]" if signals.htp_triggered else MISSING_VALUE,
            format_currency(signals.budget_available),
        )

    console.print(table)
