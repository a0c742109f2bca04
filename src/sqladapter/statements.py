"""Render CREATE / DROP / INSERT / DELETE statements for a `Table`.

Statements use `@name` placeholders. Builders are pure: they read the table
and return text plus ordered parameters, nothing is executed here.
"""
from __future__ import annotations

from typing import Any, Dict, NamedTuple, Optional, Sequence, Tuple

from sqladapter.schema import Table


class Statement(NamedTuple):
    sql: str
    parameters: Sequence[Tuple[str, Any]] = ()

    def bindings(self) -> Dict[str, Any]:
        """Parameters keyed by name without the `@` prefix (sqlite3 named style)."""
        return {name[1:]: value for name, value in self.parameters}


def build_create(table: Table) -> Statement:
    """CREATE TABLE with one `<name> <type>` pair per column.

    Key columns are not emitted as a PRIMARY KEY constraint.
    """
    columns = ", ".join(f"{c.name} {c.type_name}" for c in table)
    return Statement(f"CREATE TABLE {table.name} ({columns})", [])


def build_drop(table: Table) -> Statement:
    return Statement(f"DROP TABLE {table.name}", [])


def build_insert(table: Table) -> Statement:
    cols = ", ".join(c.name for c in table)
    placeholders = ", ".join(c.parameter_name for c in table)
    params = [(c.parameter_name, c.value) for c in table]
    return Statement(f"INSERT INTO {table.name} ({cols}) VALUES ({placeholders})", params)


def build_delete(table: Table) -> Optional[Statement]:
    """DELETE matching every key column.

    Returns None when the table has no key columns; an unconditional DELETE
    would empty the table.
    """
    keys = table.key_columns
    if not keys:
        return None
    condition = " AND ".join(f"{c.name} = {c.parameter_name}" for c in keys)
    params = [(c.parameter_name, c.value) for c in keys]
    return Statement(f"DELETE FROM {table.name} WHERE {condition}", params)
