"""Typer CLI commands for inspecting and rebuilding wallets."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Annotated

import typer
from rich.table import Table

from lot_ledger.cli.utils import DbOption, console, exit_ledger_error, resolve_db_path, run_async
from lot_ledger.constants import WALLET_PRICE_KEY_PRECISION
from lot_ledger.exceptions import LedgerError
from lot_ledger.formatting import (
    format_currency,
    format_percent,
    format_shares,
    format_signed_currency,
    format_wallet_price,
)

if TYPE_CHECKING:
    from lot_ledger.portfolio import SecurityLedger

app = typer.Typer(help="Wallet commands.")


@app.command("list")
def wallets_list(
    symbol: Annotated[str, typer.Argument(help="Ticker symbol.")],
    price: Annotated[
        float | None,
        typer.Option("--price", "-p", help="Current price (default: the security's test price)."),
    ] = None,
    include_closed: Annotated[
        bool, typer.Option("--all", "-a", help="Include fully sold wallets.")
    ] = False,
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    db_path: DbOption = None,
) -> None:
    """Show a security's wallets, rebuilt from its transaction history.

    Buy prices are shown at wallet-key precision; pass that value as ``txn sell --wallet-price``.
    """
    from lot_ledger.cli.db import open_db_session
    from lot_ledger.data import SecurityRepository, load_security_ledger
    from lot_ledger.portfolio import PnLCalculator
    from lot_ledger.pricing import (
        calculate_pct_to_target,
        calculate_target_percent,
        get_effective_price,
        get_pct_to_target_color,
    )

    path = resolve_db_path(db_path)

    async def _load() -> SecurityLedger:
        async with open_db_session(path) as session:
            record = await SecurityRepository(session).require(symbol)
            return await load_security_ledger(session, record)

    try:
        ledger = run_async(_load())
    except LedgerError as e:
        exit_ledger_error(e)

    current = get_effective_price(price, ledger.security.test_price)
    wallets = ledger.wallets if include_closed else ledger.active_wallets
    calculator = PnLCalculator()

    if output_json:
        rows = [
            {
                "strategy": w.strategy.value,
                "wallet_price": round(w.buy_price, WALLET_PRICE_KEY_PRECISION),
                "buy_price": w.buy_price,
                "target_price": w.target_price,
                "total_investment": w.total_investment,
                "total_shares": w.total_shares,
                "remaining_shares": w.remaining_shares,
                "shares_sold": w.shares_sold,
                "sell_txn_count": w.sell_txn_count,
                "realized_pl": w.realized_pl,
                "unrealized_pl": calculator.calculate_unrealized(w, current),
            }
            for w in wallets
        ]
        console.print_json(json.dumps(rows))
        return

    if not wallets:
        console.print(f"[yellow]No wallets for {ledger.security.symbol}[/yellow]")
        return

    table = Table(title=f"{ledger.security.symbol} Wallets")
    table.add_column("Strategy", style="cyan")
    table.add_column("Buy", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("TP %", justify="right")
    table.add_column("To TP", justify="right")
    table.add_column("Invested", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("Sold", justify="right")
    table.add_column("Sells", justify="right")
    table.add_column("Realized", justify="right")
    table.add_column("Unrealized", justify="right")

    for wallet in sorted(wallets, key=lambda w: (w.strategy.value, w.buy_price)):
        pct_to_target = calculate_pct_to_target(current, wallet.target_price)
        color = get_pct_to_target_color(pct_to_target).value
        to_target = format_percent(pct_to_target)
        if color != "default":
            to_target = f"[{color}]{to_target}[/{color}]"
        table.add_row(
            wallet.strategy.value,
            format_wallet_price(wallet.buy_price),
            format_wallet_price(wallet.target_price),
            format_percent(calculate_target_percent(wallet.target_price, wallet.buy_price)),
            to_target,
            format_currency(wallet.total_investment),
            format_shares(wallet.remaining_shares),
            format_shares(wallet.shares_sold),
            str(wallet.sell_txn_count),
            format_signed_currency(wallet.realized_pl),
            format_signed_currency(calculator.calculate_unrealized(wallet, current)),
        )

    console.print(table)

    summary = calculator.calculate_summary(ledger.wallets, ledger.sells, current)
    console.print(
        f"Realized {format_signed_currency(summary.realized_pl)} "
        f"(Swing {format_signed_currency(summary.realized_swing_pl)}, "
        f"Hold {format_signed_currency(summary.realized_hold_pl)})  "
        f"Unrealized {format_signed_currency(summary.unrealized_pl)}"
    )
    if summary.total_sells:
        console.print(f"Sells {summary.total_sells} across {len(ledger.wallets)} wallets")


@app.command("rebuild")
def wallets_rebuild(
    symbol: Annotated[
        str | None, typer.Argument(help="Ticker symbol (omit to rebuild every security).")
    ] = None,
    db_path: DbOption = None,
) -> None:
    """Recompute wallets and cash-flow caches from transaction history."""
    from lot_ledger.cli.db import open_db_session
    from lot_ledger.data import SecurityRepository, rebuild_and_store

    path = resolve_db_path(db_path)

    async def _rebuild() -> list[SecurityLedger]:
        async with open_db_session(path) as session:
            repo = SecurityRepository(session)
            if symbol is not None:
                records = [await repo.require(symbol)]
            else:
                records = list(await repo.list_all(include_archived=True))
            return [await rebuild_and_store(session, record) for record in records]

    try:
        ledgers = run_async(_rebuild())
    except LedgerError as e:
        exit_ledger_error(e)

    for ledger in ledgers:
        console.print(
            f"[green]✓[/green] {ledger.security.symbol}: {len(ledger.wallets)} wallets, "
            f"OOP {format_currency(ledger.cash_flow.total_out_of_pocket)}, "
            f"cash {format_currency(ledger.cash_flow.current_cash_balance)}"
        )
