from __future__ import annotations

import logging

import mongomock
import pytest

from docbridge.connectors import MongoDocumentStore
from docbridge.models import ColumnType
from docbridge.schema import SchemaInferrer


def _store(collections: dict[str, list[dict]]) -> MongoDocumentStore:
    database = mongomock.MongoClient().db
    for name, documents in collections.items():
        if documents:
            database[name].insert_many(documents)
        else:
            database.create_collection(name)
    return MongoDocumentStore(database)


def test_infer_table_orders_row_id_first_then_first_seen() -> None:
    store = _store({"people": [{"b": 1, "a": "x"}, {"a": "y", "c": None}]})

    table = SchemaInferrer(store).infer_table("people")

    assert table.column_names == ["_id", "b", "a", "c"]
    assert [column.type for column in table.columns] == [
        ColumnType.ROW_ID,
        ColumnType.INTEGER,
        ColumnType.STRING,
        ColumnType.OTHER,
    ]
    assert [column.index for column in table.columns] == [0, 1, 2, 3]
    assert all(column.nullable for column in table.columns)
    assert table.get_column("_id").is_row_id


def test_infer_table_first_observed_type_wins(caplog: pytest.LogCaptureFixture) -> None:
    store = _store({"readings": [{"value": None}, {"value": 1}, {"value": "high"}]})
    caplog.set_level(logging.DEBUG)

    table = SchemaInferrer(store).infer_table("readings")

    assert table.get_column("value").type == ColumnType.INTEGER
    assert "keeping first observed type" in caplog.text


def test_infer_table_respects_sample_size() -> None:
    store = _store({"events": [{"a": 1}, {"b": 2}]})

    table = SchemaInferrer(store, sample_size=1).infer_table("events")

    assert table.column_names == ["_id", "a"]


def test_sample_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        SchemaInferrer(_store({}), sample_size=0)


def test_empty_collection_has_only_row_id_column() -> None:
    store = _store({"empty": []})

    schema = SchemaInferrer(store).build_schema("db")

    assert schema.table_names == ["empty"]
    assert schema.get_table("empty").column_names == ["_id"]


def test_explicit_columns_start_unknown_and_resolve_on_read() -> None:
    store = _store({"people": [{"name": {"first": "John"}}]})
    inferrer = SchemaInferrer(store)

    schema = inferrer.build_schema(
        "db",
        {"people": ["name.first", "addresses[0].city"], "planned": ["title"]},
    )

    people = schema.get_table("people")
    assert people.explicit
    assert people.column_names == ["name.first", "addresses[0].city"]
    assert people.get_column("name.first").type == ColumnType.UNKNOWN

    people.get_column("name.first").observe("John")
    assert people.get_column("name.first").type == ColumnType.STRING

    # tables may be declared before their collection exists
    assert schema.get_table("planned").column_names == ["title"]


def test_refresh_appends_new_columns_and_keeps_order() -> None:
    database = mongomock.MongoClient().db
    database.people.insert_one({"name": "Jane", "age": 30})
    store = MongoDocumentStore(database)
    inferrer = SchemaInferrer(store)
    schema = inferrer.build_schema("db")

    database.people.insert_one({"zip": "2100", "name": "John"})
    inferrer.refresh(schema)

    assert schema.get_table("people").column_names == ["_id", "name", "age", "zip"]


def test_refresh_removes_tables_without_documents(caplog: pytest.LogCaptureFixture) -> None:
    database = mongomock.MongoClient().db
    database.people.insert_one({"name": "Jane"})
    database.orders.insert_one({"total": 10})
    store = MongoDocumentStore(database)
    inferrer = SchemaInferrer(store)
    schema = inferrer.build_schema("db")
    caplog.set_level(logging.INFO)

    database.people.delete_many({})
    database.drop_collection("orders")
    inferrer.refresh(schema)

    assert schema.table_count == 0
    assert "Removing table people" in caplog.text


def test_refresh_discovers_new_collections() -> None:
    database = mongomock.MongoClient().db
    store = MongoDocumentStore(database)
    inferrer = SchemaInferrer(store)
    schema = inferrer.build_schema("db")
    assert schema.table_count == 0

    database.people.insert_one({"name": "Jane"})
    inferrer.refresh(schema)

    assert schema.table_names == ["people"]
    assert schema.get_table("people").schema is schema
