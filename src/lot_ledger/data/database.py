"""SQLite storage for the ledger.

One database file holds every security, its stored transactions and the
derived wallet cache. A CLI command opens one ``DatabaseManager``, creates
the tables if they are missing and works through a single session.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from lot_ledger.data.models import Base
from lot_ledger.paths import DEFAULT_DB_PATH

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

_SQLITE_PRAGMAS = (
    # Deleting a security removes its transactions and wallets through ON DELETE CASCADE
    "PRAGMA foreign_keys=ON",
    "PRAGMA journal_mode=WAL",
)


def _apply_sqlite_pragmas(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    for pragma in _SQLITE_PRAGMAS:
        cursor.execute(pragma)
    cursor.close()


class DatabaseManager:
    """
    Owns the async engine and session factory for one ledger file.

    The engine is created lazily so that constructing a manager never touches
    the filesystem. Use it as an async context manager to dispose of the
    engine when the command finishes.
    """

    def __init__(
        self,
        db_path: str | Path = DEFAULT_DB_PATH,
        echo: bool = False,
    ) -> None:
        """
        Args:
            db_path: Ledger database file; its parent directory is created on first use
            echo: Log every SQL statement (debugging only)
        """
        self._db_path = Path(db_path)
        self._echo = echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def db_path(self) -> Path:
        return self._db_path

    @property
    def engine(self) -> AsyncEngine:
        """The aiosqlite engine, with foreign keys enforced on every connection."""
        if self._engine is None:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._engine = create_async_engine(
                f"sqlite+aiosqlite:///{self._db_path}",
                echo=self._echo,
                connect_args={"check_same_thread": False},
            )
            event.listen(self._engine.sync_engine, "connect", _apply_sqlite_pragmas)
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """
        Factory for ledger sessions.

        A session is one unit of work. A command changes the stored
        history of one security and commits that change in the same
        transaction as the rebuilt wallets and cash-flow cache. A failed
        rebuild rolls the whole session back, so the stored history and its
        derived cache never disagree. Objects stay readable after commit for
        rendering the result.
        """
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_factory

    async def create_tables(self) -> None:
        """Create any ledger table that does not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Dispose of the engine; a later access to ``engine`` opens a fresh one."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None

    async def __aenter__(self) -> DatabaseManager:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()
