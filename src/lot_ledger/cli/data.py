"""Typer CLI commands for database setup, JSON export and bulk import."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from lot_ledger.cli.utils import (
    DbOption,
    atomic_write_json,
    console,
    exit_ledger_error,
    load_json_model,
    resolve_db_path,
    run_async,
)
from lot_ledger.exceptions import LedgerError
from lot_ledger.paths import DEFAULT_EXPORTS_DIR

app = typer.Typer(help="Data management commands.")


@app.command("init")
def data_init(db_path: DbOption = None) -> None:
    """Initialize the database with required tables."""
    from lot_ledger.cli.db import open_db

    path = resolve_db_path(db_path)

    async def _init() -> None:
        async with open_db(path):
            pass

    run_async(_init())
    console.print(f"[green]✓[/green] Database initialized at {path}")


@app.command("export")
def data_export(
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="JSON file to write."),
    ] = DEFAULT_EXPORTS_DIR / "ledger.json",
    include_archived: Annotated[
        bool,
        typer.Option("--include-archived/--no-archived", help="Include archived securities."),
    ] = True,
    db_path: DbOption = None,
) -> None:
    """Export securities, transactions and wallets as JSON."""
    from lot_ledger.cli.db import open_db_session
    from lot_ledger.data import LedgerExport, export_ledger

    path = resolve_db_path(db_path)

    async def _export() -> LedgerExport:
        async with open_db_session(path) as session:
            return await export_ledger(session, include_archived=include_archived)

    exported = run_async(_export())
    atomic_write_json(output, exported.model_dump(mode="json", by_alias=True))
    console.print(
        f"[green]✓[/green] Exported {len(exported.securities)} securities to {output}"
    )


@app.command("import")
def data_import(
    source: Annotated[Path, typer.Argument(help="JSON file to import (same shape as export).")],
    replace: Annotated[
        bool,
        typer.Option("--replace", help="Replace securities that already exist."),
    ] = False,
    db_path: DbOption = None,
) -> None:
    """Import securities and transaction history, rebuilding each security."""
    from lot_ledger.cli.db import open_db_session
    from lot_ledger.data import ImportResult, LedgerFile, import_ledger

    ledger_file = load_json_model(path=source, kind="Ledger", model=LedgerFile)
    path = resolve_db_path(db_path)

    async def _import() -> ImportResult:
        async with open_db_session(path) as session:
            return await import_ledger(session, ledger_file, replace=replace)

    try:
        result = run_async(_import())
    except LedgerError as e:
        exit_ledger_error(e)

    console.print(f"[green]✓[/green] Imported {len(result.imported)} securities")
    if result.skipped:
        console.print(
            f"[yellow]Skipped {len(result.skipped)} existing:[/yellow] {', '.join(result.skipped)}"
        )
        console.print("[dim]Use --replace to overwrite them.[/dim]")
