"""sqlite drivers: open a connection, run one statement, report affected rows.

`SqliteDriver` blocks on `sqlite3`; `AsyncSqliteDriver` awaits `aiosqlite`.
Database errors are not caught here.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict

import aiosqlite

from sqladapter.schema import ValueKind, value_kind
from sqladapter.statements import Statement

logger = logging.getLogger(__name__)


def sqlite_value(value: Any) -> Any:
    """Convert a value sqlite3 cannot bind natively.

    Decimals are bound as text so no precision is lost; timestamps as ISO 8601
    text instead of going through the deprecated default adapter.
    """
    kind = value_kind(type(value))
    if kind is ValueKind.DECIMAL:
        return str(value)
    if kind is ValueKind.TIMESTAMP:
        return value.isoformat()
    return value


def sqlite_bindings(statement: Statement) -> Dict[str, Any]:
    return {name: sqlite_value(value) for name, value in statement.bindings().items()}


class SqliteDriver:
    def __init__(self, database: str) -> None:
        self.database = database

    def connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.database)

    def execute(self, conn: sqlite3.Connection, statement: Statement) -> int:
        """Run `statement`, commit, and return the cursor's rowcount (-1 for DDL)."""
        logger.debug("execute: %s", statement.sql)
        cur = conn.cursor()
        try:
            cur.execute(statement.sql, sqlite_bindings(statement))
            conn.commit()
            logger.debug("affected rows: %d", cur.rowcount)
            return cur.rowcount
        finally:
            cur.close()


class AsyncSqliteDriver:
    def __init__(self, database: str) -> None:
        self.database = database

    async def connect(self) -> aiosqlite.Connection:
        return await aiosqlite.connect(self.database)

    async def execute(self, conn: aiosqlite.Connection, statement: Statement) -> int:
        logger.debug("execute: %s", statement.sql)
        async with conn.execute(statement.sql, sqlite_bindings(statement)) as cur:
            count = cur.rowcount
        await conn.commit()
        logger.debug("affected rows: %d", count)
        return count
