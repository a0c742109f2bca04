# Tests for statement rendering. No database involved.
from __future__ import annotations

from dataclasses import dataclass

from sqladapter.schema import column, infer_schema
from sqladapter.statements import Statement, build_create, build_delete, build_drop, build_insert


@dataclass
class Book:
    IsbnCode: str = ""
    Title: str = ""


@dataclass
class Pair:
    A: int = column(key=True, default=0)
    Label: str = ""
    B: str = column(key=True, type_name="char(4)", default="")


def test_create_book():
    stmt = build_create(infer_schema(Book))
    assert stmt.sql == "CREATE TABLE Book (IsbnCode nvarchar(MAX), Title nvarchar(MAX))"
    assert list(stmt.parameters) == []


def test_create_has_no_primary_key_clause():
    stmt = build_create(infer_schema(Pair))
    assert stmt.sql == "CREATE TABLE Pair (A int, Label nvarchar(MAX), B char(4))"
    assert "PRIMARY KEY" not in stmt.sql


def test_drop():
    stmt = build_drop(infer_schema(Book))
    assert stmt == Statement("DROP TABLE Book", [])


def test_insert_binds_every_column_in_order():
    stmt = build_insert(infer_schema(Book("4774180947", "LINQ")))
    assert stmt.sql == "INSERT INTO Book (IsbnCode, Title) VALUES (@IsbnCode, @Title)"
    assert stmt.parameters == [("@IsbnCode", "4774180947"), ("@Title", "LINQ")]


def test_insert_includes_key_columns():
    stmt = build_insert(infer_schema(Pair(1, "x", "ab")))
    assert [name for name, _ in stmt.parameters] == ["@A", "@Label", "@B"]


def test_delete_uses_key_columns_only():
    stmt = build_delete(infer_schema(Pair(1, "x", "ab")))
    assert stmt.sql == "DELETE FROM Pair WHERE A = @A AND B = @B"
    assert stmt.parameters == [("@A", 1), ("@B", "ab")]


def test_delete_without_keys_is_noop():
    assert build_delete(infer_schema(Book("1", "t"))) is None


def test_bindings_strip_prefix():
    stmt = build_insert(infer_schema(Book("1", "t")))
    assert stmt.bindings() == {"IsbnCode": "1", "Title": "t"}
    assert build_drop(infer_schema(Book)).bindings() == {}
