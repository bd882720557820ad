"""Shared utilities for CLI commands (console output, JSON files, async helpers)."""

from __future__ import annotations

import asyncio
import json
import os
import uuid
from pathlib import Path  # noqa: TC003 - Required at runtime for Typer introspection
from typing import TYPE_CHECKING, Annotated, Any, NoReturn, TypeVar

import typer
from pydantic import BaseModel, ValidationError
from rich.console import Console

from lot_ledger.config import LedgerConfig
from lot_ledger.data.schemas import PriceFile

if TYPE_CHECKING:
    from collections.abc import Coroutine

    from lot_ledger.exceptions import LedgerError

console = Console()

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

DbOption = Annotated[
    Path | None,
    typer.Option("--db", "-d", help="Path to SQLite database file (default: LOT_LEDGER_DB_PATH)."),
]


def run_async(coro: Coroutine[object, object, T]) -> T:
    """Run a coroutine from a sync CLI command.

    Raises:
        typer.Exit: With code 130 on KeyboardInterrupt (standard SIGINT exit code).
    """
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        raise typer.Exit(130) from None


def load_config() -> LedgerConfig:
    """Load configuration from the environment, exiting with a message if it is invalid."""
    try:
        return LedgerConfig.from_env()
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None


def resolve_db_path(db_path: Path | None) -> Path:
    """Use the ``--db`` option when given, else ``LOT_LEDGER_DB_PATH`` or the default path."""
    if db_path is not None:
        return db_path
    return load_config().db_path


def exit_ledger_error(error: LedgerError) -> NoReturn:
    """Print a ledger error and exit with code 1."""
    console.print(f"[red]Error:[/red] {error}")
    raise typer.Exit(1) from None


def atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    """Write JSON atomically (temp file + fsync + rename)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(f"{path.suffix}.tmp.{uuid.uuid4().hex}")
    with tmp_path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.flush()
        os.fsync(f.fileno())
    tmp_path.replace(path)


def load_json_model(*, path: Path, kind: str, model: type[M]) -> M:
    """Load a JSON file and validate it against a pydantic model.

    Exits with an error message if the file is missing, is not valid JSON, or does not match
    the expected schema.
    """
    if not path.exists():
        console.print(f"[red]Error:[/red] {kind} file not found: {path}")
        raise typer.Exit(1)

    try:
        with path.open(encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError:
        console.print(f"[red]Error:[/red] {kind} file is not valid JSON: {path}")
        raise typer.Exit(1) from None

    try:
        return model.model_validate(raw)
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {kind} file has an unexpected schema: {path}")
        for err in e.errors():
            location = ".".join(str(part) for part in err["loc"])
            console.print(f"  [dim]{location}:[/dim] {err['msg']}")
        raise typer.Exit(1) from None


def load_prices(path: Path | None) -> PriceFile:
    """Load a prices file; no file means no fetched prices or closes."""
    if path is None:
        return PriceFile(prices={})
    return load_json_model(path=path, kind="Prices", model=PriceFile)
