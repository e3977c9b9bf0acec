from __future__ import annotations

from typing import Any, Iterator

import pytest
from pymongo.errors import AutoReconnect

from docbridge.connectors import DocumentStore
from docbridge.errors import DocBridgeError
from docbridge.executor import DocumentDataSet, InMemoryDataSet, PostProcessingExecutor, ResultMaterializer
from docbridge.models import Column, ColumnType, Query, Row, SelectItem, Table, TranslationPlan


class _RecordingCursor:
    def __init__(self, documents: list[dict[str, Any]]) -> None:
        self._documents = iter(documents)
        self.close_calls = 0

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return self

    def __next__(self) -> dict[str, Any]:
        return next(self._documents)

    def close(self) -> None:
        self.close_calls += 1


def _table() -> Table:
    return Table("people", [Column("_id", ColumnType.ROW_ID), Column("name", ColumnType.STRING), Column("age")])


def _document_data_set(cursor: _RecordingCursor) -> DocumentDataSet:
    table = _table()
    return DocumentDataSet(
        (SelectItem("name"), SelectItem("age")),
        TranslationPlan(collection=table.name),
        cursor=cursor,
        materializer=ResultMaterializer(table),
    )


def test_document_data_set_streams_and_closes_on_exhaustion() -> None:
    cursor = _RecordingCursor([{"name": "Jane", "age": 31}, {"name": "John"}])
    data_set = _document_data_set(cursor)

    assert data_set.to_dicts() == [{"name": "Jane", "age": 31}, {"name": "John", "age": None}]
    assert data_set.closed
    assert cursor.close_calls == 1

    data_set.close()
    assert cursor.close_calls == 1


def test_closed_data_set_cannot_be_iterated() -> None:
    cursor = _RecordingCursor([{"name": "Jane"}])

    with _document_data_set(cursor) as data_set:
        pass

    assert cursor.close_calls == 1
    with pytest.raises(DocBridgeError):
        data_set.to_rows()


def test_materializer_resolves_unknown_column_types() -> None:
    table = _table()
    materializer = ResultMaterializer(table)

    row = materializer.materialize({"name": "Jane", "age": 31}, (SelectItem("age"),))

    assert row == Row((SelectItem("age"),), [31])
    assert table.get_column("age").type == ColumnType.INTEGER


def test_in_memory_data_set_to_arrow() -> None:
    items = (SelectItem("name"), SelectItem("age", alias="years"))
    plan = TranslationPlan(collection="people", filter_pushdown=False)
    data_set = InMemoryDataSet(items, plan, [Row(items, ["Jane", 31]), Row(items, ["John", None])])

    table = data_set.to_arrow()

    assert len(data_set) == 2
    assert data_set.is_post_processed
    assert table.column_names == ["name", "years"]
    assert table.to_pydict() == {"name": ["Jane", "John"], "years": [31, None]}


class _FailingCursor(_RecordingCursor):
    """Yields its documents, then loses the connection."""

    def __next__(self) -> dict[str, Any]:
        try:
            return super().__next__()
        except StopIteration:
            raise AutoReconnect("connection lost") from None


class _SingleCursorStore(DocumentStore):
    name = "single-cursor"

    def __init__(self, cursor: _RecordingCursor) -> None:
        self.cursor = cursor

    def find(self, collection: str, **kwargs: Any) -> _RecordingCursor:
        return self.cursor


def test_post_processing_closes_cursor_when_reading_fails() -> None:
    cursor = _FailingCursor([{"name": "Jane", "age": 31}])
    executor = PostProcessingExecutor(_SingleCursorStore(cursor))
    plan = TranslationPlan(collection="people", filter_pushdown=False)

    with pytest.raises(AutoReconnect):
        executor.execute(Query(table="people", select_items=(SelectItem("name"),)), _table(), plan)

    assert cursor.close_calls == 1
