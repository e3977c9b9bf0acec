"""Relational view of a document database: schema, tables and columns."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from docbridge.models.values import ValueKind, normalize_value, value_kind

ROW_ID_COLUMN = "_id"


class ColumnType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    MAP = "map"
    LIST = "list"
    ROW_ID = "row_id"
    OTHER = "other"
    UNKNOWN = "unknown"

    @property
    def is_nested(self) -> bool:
        return self in (ColumnType.MAP, ColumnType.LIST)

    @classmethod
    def from_value(cls, value: Any) -> "ColumnType":
        return _KIND_TO_TYPE[value_kind(normalize_value(value))]


_KIND_TO_TYPE = {
    ValueKind.NULL: ColumnType.UNKNOWN,
    ValueKind.BOOLEAN: ColumnType.BOOLEAN,
    ValueKind.INTEGER: ColumnType.INTEGER,
    ValueKind.FLOAT: ColumnType.FLOAT,
    ValueKind.STRING: ColumnType.STRING,
    ValueKind.BYTES: ColumnType.OTHER,
    ValueKind.TIMESTAMP: ColumnType.DATE,
    ValueKind.MAP: ColumnType.MAP,
    ValueKind.LIST: ColumnType.LIST,
}


@dataclass(eq=False)
class Column:
    """A column of a document table. ``name`` may be a dotted or indexed path."""

    name: str
    type: ColumnType = ColumnType.UNKNOWN
    index: int = 0
    table: "Table | None" = field(default=None, repr=False)

    @property
    def nullable(self) -> bool:
        return True

    @property
    def is_row_id(self) -> bool:
        return self.type == ColumnType.ROW_ID

    def observe(self, value: Any) -> None:
        """Resolve a still-unknown type from the first non-null value seen."""
        if self.type != ColumnType.UNKNOWN or value is None:
            return
        self.type = ColumnType.from_value(value)


class Table:
    def __init__(
        self,
        name: str,
        columns: Iterable[Column] = (),
        *,
        schema: "Schema | None" = None,
        explicit: bool = False,
    ) -> None:
        self.name = name
        self.schema = schema
        # Explicit tables were defined from a caller-supplied column list.
        self.explicit = explicit
        self._columns: list[Column] = []
        for column in columns:
            self._attach(column)

    def __repr__(self) -> str:
        return f"Table(name={self.name!r}, columns={self.column_names!r})"

    @property
    def columns(self) -> list[Column]:
        return list(self._columns)

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self._columns]

    @property
    def column_count(self) -> int:
        return len(self._columns)

    def get_column(self, name: str) -> Column | None:
        for column in self._columns:
            if column.name == name:
                return column
        return None

    def add_column(self, name: str, column_type: ColumnType = ColumnType.UNKNOWN) -> Column:
        existing = self.get_column(name)
        if existing is not None:
            return existing
        if name == ROW_ID_COLUMN:
            column_type = ColumnType.ROW_ID
        return self._attach(Column(name=name, type=column_type))

    def replace_columns(self, columns: Iterable[Column]) -> None:
        """Swap in a freshly inferred column list.

        Columns present before keep their relative order; new ones are appended.
        """
        incoming = {column.name: column for column in columns}
        ordered = [incoming.pop(column.name) for column in self._columns if column.name in incoming]
        ordered.extend(incoming.values())
        self._columns = []
        for column in ordered:
            self._attach(column)

    def _attach(self, column: Column) -> Column:
        column.index = len(self._columns)
        column.table = self
        self._columns.append(column)
        return column


class Schema:
    """Registry of tables, one per collection."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._tables: dict[str, Table] = {}

    def __repr__(self) -> str:
        return f"Schema(name={self.name!r}, tables={self.table_names!r})"

    @property
    def tables(self) -> list[Table]:
        return list(self._tables.values())

    @property
    def table_names(self) -> list[str]:
        return list(self._tables)

    @property
    def table_count(self) -> int:
        return len(self._tables)

    def get_table(self, name: str) -> Table | None:
        return self._tables.get(name)

    def add_table(self, table: Table) -> Table:
        table.schema = self
        self._tables[table.name] = table
        return table

    def remove_table(self, name: str) -> Table | None:
        table = self._tables.pop(name, None)
        if table is not None:
            table.schema = None
        return table


__all__ = ["Column", "ColumnType", "ROW_ID_COLUMN", "Schema", "Table"]
