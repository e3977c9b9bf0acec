from __future__ import annotations

from typing import Any, Mapping, Sequence

from docbridge.errors import QueryError
from docbridge.models.query import SelectItem
from docbridge.models.rows import Row
from docbridge.models.schema import Column, ColumnType, Table
from docbridge.models.values import normalize_value
from docbridge.schema.paths import parse_path, resolve_path


def coerce_value(value: Any, column_type: ColumnType) -> Any:
    """Align lossless numeric drift with the column's inferred type."""
    if column_type == ColumnType.FLOAT and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if column_type == ColumnType.INTEGER and isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class ResultMaterializer:
    """Turns native documents into rows aligned with a query's select items."""

    def __init__(self, table: Table) -> None:
        self._table = table

    def materialize(self, document: Mapping[str, Any], select_items: Sequence[SelectItem]) -> Row:
        values = []
        for item in select_items:
            if item.is_aggregate:
                raise QueryError(f"{item.label} cannot be read from a single document")
            values.append(self.extract(document, item.column))
        return Row(select_items, values)

    def materialize_aggregates(self, result: Mapping[str, Any], select_items: Sequence[SelectItem]) -> Row:
        """Read aggregate values from a native aggregation result keyed by item label."""
        return Row(select_items, [result.get(item.label) for item in select_items])

    def record(self, document: Mapping[str, Any], column_names: Sequence[str]) -> dict[str, Any]:
        return {name: self.extract(document, name) for name in column_names}

    def extract(self, document: Mapping[str, Any], column_name: str) -> Any:
        value = normalize_value(resolve_path(document, parse_path(column_name)))
        column = self._column(column_name)
        column.observe(value)
        return coerce_value(value, column.type)

    def _column(self, column_name: str) -> Column:
        column = self._table.get_column(column_name)
        if column is None:
            raise QueryError(f"Column {column_name!r} not present in table {self._table.name!r}")
        return column


__all__ = ["ResultMaterializer", "coerce_value"]
