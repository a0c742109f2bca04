"""Infer table schemas from record classes.

A record is any class whose fields can be enumerated in declaration order:
dataclasses (markers passed through `column(...)`) or plain annotated classes
(markers passed through `typing.Annotated[T, Key(), ColumnType("...")]`).
Inference reads type metadata only and never touches a database.
"""
from __future__ import annotations

import dataclasses
import datetime
import decimal
import enum
import inspect
import sys
import types
import typing
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, NamedTuple, NewType, Optional, Tuple, Union

KEY_METADATA = "sqladapter.key"
COLUMN_TYPE_METADATA = "sqladapter.column_type"

Int8 = NewType("Int8", int)
Int16 = NewType("Int16", int)
Int32 = NewType("Int32", int)
Int64 = NewType("Int64", int)


class Key:
    """`Annotated` marker: the field is a key column."""

    def __repr__(self) -> str:
        return "Key()"


@dataclass(frozen=True)
class ColumnType:
    """`Annotated` marker: use `name` verbatim as the column's SQL type."""

    name: str


def column(*, key: bool = False, type_name: Optional[str] = None, **kwargs: Any) -> Any:
    """Declare a dataclass field carrying key / column-type markers.

    Remaining keyword arguments go to `dataclasses.field`, e.g.::

        @dataclass
        class Writing:
            BookCode: str = column(key=True, type_name="char(10)", default="")
    """
    metadata: Dict[str, Any] = dict(kwargs.pop("metadata", None) or {})
    if key:
        metadata[KEY_METADATA] = True
    if type_name:
        metadata[COLUMN_TYPE_METADATA] = type_name
    return field(metadata=metadata, **kwargs)


class ValueKind(enum.Enum):
    BOOLEAN = "boolean"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    DECIMAL = "decimal"
    DOUBLE = "double"
    TEXT = "text"
    TIMESTAMP = "timestamp"


SQL_TYPE_NAMES: Mapping[ValueKind, str] = MappingProxyType({
    ValueKind.BOOLEAN: "bit",
    ValueKind.INT8: "tinyint",
    ValueKind.INT16: "smallint",
    ValueKind.INT32: "int",
    ValueKind.INT64: "bigint",
    ValueKind.DECIMAL: "decimal",
    ValueKind.DOUBLE: "float",
    ValueKind.TEXT: "nvarchar(MAX)",
    ValueKind.TIMESTAMP: "datetime",
})

_PYTHON_KINDS: Mapping[Any, ValueKind] = MappingProxyType({
    bool: ValueKind.BOOLEAN,
    Int8: ValueKind.INT8,
    Int16: ValueKind.INT16,
    Int32: ValueKind.INT32,
    int: ValueKind.INT32,
    Int64: ValueKind.INT64,
    decimal.Decimal: ValueKind.DECIMAL,
    float: ValueKind.DOUBLE,
    str: ValueKind.TEXT,
    datetime.datetime: ValueKind.TIMESTAMP,
})


def unwrap_optional(tp: Any) -> Any:
    """Return `X` for `Optional[X]` / `X | None`, otherwise `tp` unchanged."""
    if typing.get_origin(tp) in (Union, types.UnionType):
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def value_kind(tp: Any) -> Optional[ValueKind]:
    try:
        return _PYTHON_KINDS.get(unwrap_optional(tp))
    except TypeError:
        # unhashable annotation objects
        return None


def sql_type_name(tp: Any) -> str:
    """Map a Python type to its SQL type keyword.

    Types outside the fixed table fall back to their own name, e.g. `bytes`
    becomes "bytes". String annotations that could not be resolved are used
    as they are.
    """
    kind = value_kind(tp)
    if kind is not None:
        return SQL_TYPE_NAMES[kind]
    tp = unwrap_optional(tp)
    if isinstance(tp, str):
        return tp
    return getattr(tp, "__name__", None) or str(tp)


class FieldInfo(NamedTuple):
    name: str
    value_type: Any
    key: bool
    type_name: Optional[str]


def _resolve_annotation(hint: Any, globalns: Dict[str, Any], localns: Dict[str, Any]) -> Any:
    if not isinstance(hint, str):
        return type(None) if hint is None else hint
    try:
        resolved = eval(hint, globalns, localns)
    except (NameError, AttributeError, SyntaxError, TypeError):
        # unresolvable forward reference: keep the text for this field only
        return hint
    return type(None) if resolved is None else resolved


def _class_annotations(cls: type) -> Dict[str, Any]:
    """Annotations of `cls` and its bases, base classes first.

    Each annotation is resolved on its own against the module of the class
    that declares it, so one bad field does not affect the others.
    """
    hints: Dict[str, Any] = {}
    for base in reversed(cls.__mro__):
        if base is object:
            continue
        module = sys.modules.get(base.__module__)
        globalns = dict(getattr(module, "__dict__", {}))
        localns = dict(vars(base))
        localns.setdefault(base.__name__, base)
        for name, hint in inspect.get_annotations(base).items():
            hints[name] = _resolve_annotation(hint, globalns, localns)
    return hints


def _split_annotated(hint: Any) -> Tuple[Any, bool, Optional[str]]:
    if typing.get_origin(hint) is not typing.Annotated:
        return hint, False, None
    key = False
    type_name = None
    for marker in hint.__metadata__:
        if marker is Key or isinstance(marker, Key):
            key = True
        elif isinstance(marker, ColumnType):
            type_name = marker.name
    return typing.get_args(hint)[0], key, type_name


def describe_fields(cls: type) -> List[FieldInfo]:
    """Enumerate the record fields of `cls` in declaration order."""
    hints = _class_annotations(cls)
    fields: List[FieldInfo] = []
    if dataclasses.is_dataclass(cls):
        for f in dataclasses.fields(cls):
            value_type, key, type_name = _split_annotated(hints.get(f.name, f.type))
            key = key or bool(f.metadata.get(KEY_METADATA))
            type_name = f.metadata.get(COLUMN_TYPE_METADATA) or type_name
            fields.append(FieldInfo(f.name, value_type, key, type_name))
        return fields

    for name, hint in hints.items():
        if name.startswith("_") or typing.get_origin(hint) is typing.ClassVar:
            continue
        value_type, key, type_name = _split_annotated(hint)
        fields.append(FieldInfo(name, value_type, key, type_name))
    return fields


def select_keys(type_name: str, fields: List[FieldInfo]) -> List[str]:
    """Names of the key fields.

    Explicitly marked fields win; without any, fields named `id` or
    `<type_name>id` (case-insensitive) are keys.
    """
    marked = [f.name for f in fields if f.key]
    if marked:
        return marked
    implicit = {"id", type_name.lower() + "id"}
    return [f.name for f in fields if f.name.lower() in implicit]


@dataclass(frozen=True)
class Column:
    name: str
    type_name: str
    is_key: bool = False
    value: Any = None
    value_type: Any = None

    @property
    def parameter_name(self) -> str:
        return "@" + self.name


@dataclass(frozen=True)
class Table:
    name: str
    columns: Tuple[Column, ...] = ()

    def __iter__(self) -> Iterator[Column]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    @property
    def key_columns(self) -> Tuple[Column, ...]:
        return tuple(c for c in self.columns if c.is_key)


def infer_schema(source: Any) -> Table:
    """Build a `Table` from a record class or a record instance.

    Given a class, column values are None. Given an instance, each column
    carries the instance's current attribute value.
    """
    if isinstance(source, type):
        cls, item = source, None
    else:
        cls, item = type(source), source

    fields = describe_fields(cls)
    keys = set(select_keys(cls.__name__, fields))
    columns = tuple(
        Column(
            name=f.name,
            type_name=f.type_name or sql_type_name(f.value_type),
            is_key=f.name in keys,
            value=None if item is None else getattr(item, f.name, None),
            value_type=f.value_type,
        )
        for f in fields
    )
    return Table(name=cls.__name__, columns=columns)
