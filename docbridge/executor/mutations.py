"""Mutation statements executed one at a time against the native store."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence

from docbridge.connectors.base import DocumentStore
from docbridge.errors import MutationError, TranslationError, UnsupportedFilterError
from docbridge.models.query import FilterItem
from docbridge.models.schema import ROW_ID_COLUMN, Column, ColumnType, Schema, Table
from docbridge.models.values import normalize_value
from docbridge.planner.classifier import require_columns
from docbridge.planner.translator import NativeQueryTranslator
from docbridge.schema.paths import assign_path, parse_path


@dataclass(slots=True)
class MutationResult:
    created_tables: list[str] = field(default_factory=list)
    dropped_tables: list[str] = field(default_factory=list)
    inserted: int = 0
    updated: int = 0
    deleted: int = 0


class MutationContext:
    """Handle passed to a mutation script; every call is executed immediately.

    There is no atomicity across statements: a failing statement leaves the
    earlier ones applied.
    """

    def __init__(
        self,
        store: DocumentStore,
        schema: Schema,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._schema = schema
        self._logger = logger or logging.getLogger(__name__)
        self.result = MutationResult()

    def create_table(self, name: str, columns: Sequence[str] = ()) -> Table:
        """Register an empty table. Nothing is written until the first insert."""
        if self._schema.get_table(name) is not None:
            raise MutationError(f"Table {name!r} already exists in schema {self._schema.name!r}")
        table = Table(name, [Column(name=ROW_ID_COLUMN, type=ColumnType.ROW_ID)])
        for column_name in columns:
            parse_path(column_name)
            table.add_column(column_name)
        self._schema.add_table(table)
        self.result.created_tables.append(name)
        return table

    def insert_into(self, table: Table | str, values: Mapping[str, Any]) -> Any:
        target = self._require_table(table)
        document: dict[str, Any] = {}
        for name, value in values.items():
            column = target.get_column(name) or target.add_column(name)
            column.observe(normalize_value(value))
            assign_path(document, name, value)
        inserted_id = self._store.insert(target.name, document)
        self.result.inserted += 1
        return inserted_id

    def update(
        self,
        table: Table | str,
        values: Mapping[str, Any],
        where: FilterItem | None = None,
    ) -> int:
        target = self._require_table(table)
        require_columns(target, values.keys())
        assignments = {parse_path(name).native_path: value for name, value in values.items()}
        updated = self._store.update(target.name, self._native_filter(target, where, "update"), assignments)
        self.result.updated += updated
        return updated

    def delete_from(self, table: Table | str, where: FilterItem | None = None) -> int:
        target = self._require_table(table)
        deleted = self._store.delete(target.name, self._native_filter(target, where, "delete"))
        self.result.deleted += deleted
        return deleted

    def drop_table(self, table: Table | str) -> None:
        """Drop the collection; dropping an absent table is not an error."""
        name = table.name if isinstance(table, Table) else table
        self._store.drop_collection(name)
        if self._schema.remove_table(name) is not None:
            self._logger.info("Dropped table %s from schema %s", name, self._schema.name)
        self.result.dropped_tables.append(name)

    def _require_table(self, table: Table | str) -> Table:
        name = table.name if isinstance(table, Table) else table
        found = self._schema.get_table(name)
        if found is None:
            raise MutationError(f"Table {name!r} does not exist in schema {self._schema.name!r}")
        return found

    def _native_filter(self, table: Table, where: FilterItem | None, statement: str) -> dict[str, Any]:
        if where is None:
            return {}
        require_columns(table, where.columns())
        try:
            return NativeQueryTranslator(table).translate_filter(where)
        except TranslationError as exc:
            # rows removed natively cannot be re-checked in memory afterwards
            raise UnsupportedFilterError(f"Cannot {statement} from {table.name!r}: {exc}") from exc


MutationScript = Callable[[MutationContext], Any]


__all__ = ["MutationContext", "MutationResult", "MutationScript"]
