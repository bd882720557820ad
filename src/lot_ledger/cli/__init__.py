"""
CLI application for lot-ledger.

Provides commands for recording transactions, inspecting wallets and reporting P/L.
"""

from __future__ import annotations

import typer
from dotenv import find_dotenv, load_dotenv

from lot_ledger.cli.data import app as data_app
from lot_ledger.cli.report import app as report_app
from lot_ledger.cli.security import app as security_app
from lot_ledger.cli.txn import app as txn_app
from lot_ledger.cli.utils import console
from lot_ledger.cli.wallets import app as wallets_app

app = typer.Typer(
    name="ledger",
    help="Lot ledger CLI - Swing/Hold wallets, cash flow and P/L for tracked securities.",
    add_completion=False,
)

app.add_typer(security_app, name="security")
app.add_typer(txn_app, name="txn")
app.add_typer(wallets_app, name="wallets")
app.add_typer(report_app, name="report")
app.add_typer(data_app, name="data")


@app.callback()
def main() -> None:
    """Lot ledger CLI."""
    load_dotenv(find_dotenv(usecwd=True))


@app.command()
def version() -> None:
    """Show version information."""
    from lot_ledger import __version__

    console.print(f"lot-ledger v{__version__}")
