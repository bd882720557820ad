from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from lot_ledger.cli import app

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from click.testing import Result

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "LOT_LEDGER_DB_PATH",
        "LOT_LEDGER_DEFAULT_SWING_HOLD_RATIO",
        "LOT_LEDGER_DEFAULT_COMMISSION",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "ledger.db"


@pytest.fixture
def invoke(db_path: Path) -> Callable[..., Result]:
    """Run a CLI command against the test database."""

    def _invoke(*args: str) -> Result:
        return runner.invoke(app, [*args, "--db", str(db_path)])

    return _invoke


@pytest.fixture
def with_security(invoke: Callable[..., Result]) -> str:
    """A US security with a 50/50 ratio, 5% PDP, 10% STP, 20% HTP and a 2000 budget."""
    result = invoke(
        "security",
        "add",
        "aaa",
        "--region",
        "US",
        "--ratio",
        "50",
        "--pdp",
        "5",
        "--stp",
        "10",
        "--htp",
        "20",
        "--budget",
        "2000",
    )
    assert result.exit_code == 0, result.output
    return "AAA"
