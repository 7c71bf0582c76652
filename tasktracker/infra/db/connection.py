# tasktracker/infra/db/connection.py
from __future__ import annotations

import contextlib
from typing import Any, AsyncIterator, Optional, Sequence

import aiosqlite


def _casefold(value: Any) -> Any:
    return value.casefold() if isinstance(value, str) else value


class Database:
    """
    Async SQLite helper:
    - opens a new connection per operation, so concurrent coroutines never
      share a cursor
    - rows come back as aiosqlite.Row
    - WAL journal is switched on once by init(); foreign keys on every connection
    - casefold(text) is available in SQL (Unicode-aware, unlike lower()/LIKE)
    - each write commits on its own, one statement = one transaction
    """

    def __init__(self, path: str, timeout: float = 5.0) -> None:
        self._path = path
        self._timeout = timeout

    @contextlib.asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        async with aiosqlite.connect(self._path, timeout=self._timeout) as db:
            db.row_factory = aiosqlite.Row
            await db.execute("PRAGMA foreign_keys=ON;")
            await db.create_function("casefold", 1, _casefold, deterministic=True)
            yield db

    async def init(self) -> None:
        async with self._connect() as db:
            await db.execute("PRAGMA journal_mode=WAL;")
            await db.commit()

    async def executescript(self, sql: str) -> None:
        async with self._connect() as db:
            await db.executescript(sql)
            await db.commit()

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run one write statement; returns the number of affected rows."""
        async with self._connect() as db:
            cur = await db.execute(sql, params)
            await db.commit()
            return cur.rowcount

    async def insert(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run one INSERT; returns the new rowid."""
        async with self._connect() as db:
            cur = await db.execute(sql, params)
            await db.commit()
            return int(cur.lastrowid)

    async def fetchone(self, sql: str, params: Sequence[Any] = ()) -> Optional[aiosqlite.Row]:
        async with self._connect() as db:
            cur = await db.execute(sql, params)
            return await cur.fetchone()

    async def fetchall(self, sql: str, params: Sequence[Any] = ()) -> list[aiosqlite.Row]:
        async with self._connect() as db:
            cur = await db.execute(sql, params)
            return list(await cur.fetchall())
