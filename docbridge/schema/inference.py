"""Derives table definitions from sampled documents."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Sequence

from docbridge.connectors.base import DocumentStore
from docbridge.models.schema import ROW_ID_COLUMN, Column, ColumnType, Schema, Table
from docbridge.schema.paths import parse_path

DEFAULT_SAMPLE_SIZE = 1000


class SchemaInferrer:
    def __init__(
        self,
        store: DocumentStore,
        *,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        logger: logging.Logger | None = None,
    ) -> None:
        if sample_size < 1:
            raise ValueError("sample_size must be at least 1")
        self._store = store
        self._sample_size = sample_size
        self._logger = logger or logging.getLogger(__name__)

    def infer_table(self, collection: str, column_paths: Sequence[str] | None = None) -> Table:
        """Build a table from explicit column paths, or by sampling the collection.

        Explicit columns start untyped and are resolved from the first value read.
        """
        if column_paths is not None:
            columns = []
            for path in column_paths:
                parse_path(path)
                column_type = ColumnType.ROW_ID if path == ROW_ID_COLUMN else ColumnType.UNKNOWN
                columns.append(Column(name=path, type=column_type))
            return Table(collection, columns, explicit=True)

        documents = self._store.sample(collection, self._sample_size)
        if not documents:
            self._logger.debug("Collection %s is empty; inferring row id column only", collection)
        return Table(collection, self.infer_columns(documents, collection=collection))

    def infer_columns(self, documents: Iterable[Mapping[str, Any]], *, collection: str = "") -> list[Column]:
        observed: dict[str, ColumnType] = {ROW_ID_COLUMN: ColumnType.ROW_ID}
        for document in documents:
            for key, value in document.items():
                if key == ROW_ID_COLUMN:
                    continue
                current = observed.setdefault(key, ColumnType.UNKNOWN)
                if value is None:
                    continue
                value_type = ColumnType.from_value(value)
                if current == ColumnType.UNKNOWN:
                    observed[key] = value_type
                elif current != value_type:
                    self._logger.debug(
                        "Field %s.%s seen as %s and %s; keeping first observed type",
                        collection,
                        key,
                        current.value,
                        value_type.value,
                    )

        return [
            Column(name=name, type=ColumnType.OTHER if column_type == ColumnType.UNKNOWN else column_type)
            for name, column_type in observed.items()
        ]

    def build_schema(
        self,
        name: str,
        table_definitions: Mapping[str, Sequence[str]] | None = None,
    ) -> Schema:
        schema = Schema(name)
        definitions = dict(table_definitions or {})
        for collection in self._store.collection_names():
            schema.add_table(self.infer_table(collection, definitions.pop(collection, None)))
        for collection, column_paths in definitions.items():
            schema.add_table(self.infer_table(collection, column_paths))
        return schema

    def refresh(self, schema: Schema) -> Schema:
        """Re-infer every table; tables whose collection holds no documents are dropped."""
        collections = set(self._store.collection_names())

        for table in schema.tables:
            if table.name not in collections or self._store.count(table.name) == 0:
                self._logger.info("Removing table %s from schema %s: no documents", table.name, schema.name)
                schema.remove_table(table.name)

        for collection in sorted(collections):
            existing = schema.get_table(collection)
            if existing is not None and existing.explicit:
                continue
            fresh = self.infer_table(collection)
            if fresh.column_count == 1 and self._store.count(collection) == 0:
                continue
            if existing is None:
                schema.add_table(fresh)
            else:
                existing.replace_columns(fresh.columns)
        return schema


__all__ = ["DEFAULT_SAMPLE_SIZE", "SchemaInferrer"]
