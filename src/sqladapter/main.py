"""Create, drop, insert into and delete from tables derived from record classes.

Purpose: map a record class to a table (see `sqladapter.schema`), render the
statement (see `sqladapter.statements`) and run it on a fresh sqlite
connection. The database location is explicit, or read from env var
`SQLADAPTER_DB`, or falls back to `<repo-root>/db/sqladapter.db`.
"""
from __future__ import annotations

import logging
import os
from contextlib import closing
from pathlib import Path
from typing import Any, Optional

from sqladapter.driver import AsyncSqliteDriver, SqliteDriver
from sqladapter.schema import infer_schema
from sqladapter.statements import Statement, build_create, build_delete, build_drop, build_insert

logger = logging.getLogger(__name__)

DB_ENV_VAR = "SQLADAPTER_DB"


def resolve_database(database: Optional[str] = None) -> str:
    """Return the sqlite database to open.

    Behavior:
    - An explicit `database` is used as given (":memory:" included).
    - Otherwise env var `SQLADAPTER_DB` (expanded) if set.
    - Otherwise repository root `/db/sqladapter.db`.
    The parent directory of a file path is created if needed.
    """
    if database:
        return database
    env_path = os.getenv(DB_ENV_VAR)
    if env_path:
        db_path = Path(env_path).expanduser().resolve()
    else:
        repo_root = Path(__file__).resolve().parents[2]
        db_path = repo_root / "db" / "sqladapter.db"
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return str(db_path)


class SqlAdapter:
    """Blocking adapter. Every call opens one connection, runs one statement
    and closes the connection again, whether or not the statement succeeded.

    Operations return True iff the database reports at least one affected row.
    """

    def __init__(self, database: Optional[str] = None, driver: Any = None) -> None:
        self.driver = driver if driver is not None else SqliteDriver(resolve_database(database))

    def create_table(self, record_type: Any) -> bool:
        return self._run(build_create(infer_schema(record_type)))

    def drop_table(self, record_type: Any) -> bool:
        return self._run(build_drop(infer_schema(record_type)))

    def insert_row(self, item: Any) -> bool:
        return self._run(build_insert(infer_schema(item)))

    def delete_row(self, item: Any) -> bool:
        table = infer_schema(item)
        statement = build_delete(table)
        if statement is None:
            logger.warning("%s has no key columns, delete skipped", table.name)
            return False
        return self._run(statement)

    def _run(self, statement: Statement) -> bool:
        with closing(self.driver.connect()) as conn:
            return self.driver.execute(conn, statement) > 0


class AsyncSqlAdapter:
    """`SqlAdapter` with coroutine operations, backed by aiosqlite."""

    def __init__(self, database: Optional[str] = None, driver: Any = None) -> None:
        self.driver = driver if driver is not None else AsyncSqliteDriver(resolve_database(database))

    async def create_table(self, record_type: Any) -> bool:
        return await self._run(build_create(infer_schema(record_type)))

    async def drop_table(self, record_type: Any) -> bool:
        return await self._run(build_drop(infer_schema(record_type)))

    async def insert_row(self, item: Any) -> bool:
        return await self._run(build_insert(infer_schema(item)))

    async def delete_row(self, item: Any) -> bool:
        table = infer_schema(item)
        statement = build_delete(table)
        if statement is None:
            logger.warning("%s has no key columns, delete skipped", table.name)
            return False
        return await self._run(statement)

    async def _run(self, statement: Statement) -> bool:
        conn = await self.driver.connect()
        try:
            return await self.driver.execute(conn, statement) > 0
        finally:
            await conn.close()
