from __future__ import annotations

import mongomock
import pytest

from docbridge import (
    DocBridgeSettings,
    DocumentDataContext,
    MongoDocumentStore,
    MutationContext,
    MutationError,
    Operator,
    Predicate,
    Query,
    SelectItem,
    UnsupportedFilterError,
    and_,
)
from docbridge.models import ColumnType


def _context() -> tuple[DocumentDataContext, mongomock.Database]:
    database = mongomock.MongoClient().db
    return DocumentDataContext(MongoDocumentStore(database), settings=DocBridgeSettings()), database


def _count(context: DocumentDataContext, table: str, where=None) -> int:
    return context.execute(Query(table, (SelectItem.count_all(),), where=where)).to_rows()[0][0]


def _populate(mutations: MutationContext) -> None:
    table = mutations.create_table("things", ["foo", "bar"])
    mutations.insert_into(table, {"foo": 1, "bar": "hello"})
    mutations.insert_into(table, {"foo": 2, "bar": "world"})
    mutations.insert_into("things", {"foo": 3, "bar": "hi", "baz": "extra"})
    mutations.insert_into("things", {"foo": 4, "bar": "bye"})


def test_create_insert_count_delete_drop_refresh() -> None:
    context, _ = _context()

    result = context.execute_update(_populate)

    assert result.created_tables == ["things"]
    assert result.inserted == 4
    table = context.get_table("things")
    assert table.column_names == ["_id", "foo", "bar", "baz"]
    assert table.get_column("_id").type == ColumnType.ROW_ID
    assert table.get_column("foo").type == ColumnType.INTEGER
    assert table.get_column("baz").type == ColumnType.STRING
    assert _count(context, "things") == 4
    assert _count(context, "things", Predicate("foo", Operator.GREATER_THAN, 2)) == 2

    result = context.execute_update(
        lambda mutations: mutations.delete_from(
            "things",
            and_(Predicate("foo", Operator.GREATER_THAN, 2), Predicate("baz", Operator.IS_NOT_NULL)),
        )
    )

    assert result.deleted == 1
    assert _count(context, "things") == 3

    context.execute_update(lambda mutations: mutations.drop_table("things"))
    assert context.default_schema.table_count == 0

    context.refresh_schemas()
    assert context.default_schema.table_count == 0


def test_drop_table_twice_is_not_an_error() -> None:
    context, _ = _context()
    context.execute_update(_populate)

    first = context.execute_update(lambda mutations: mutations.drop_table("things"))
    assert context.default_schema.table_count == 0
    second = context.execute_update(lambda mutations: mutations.drop_table("things"))
    assert context.default_schema.table_count == 0

    assert first.dropped_tables == second.dropped_tables == ["things"]


def test_update_sets_values_natively() -> None:
    context, _ = _context()
    context.execute_update(_populate)

    result = context.execute_update(
        lambda mutations: mutations.update("things", {"bar": "updated"}, Predicate("foo", Operator.LESS_THAN, 3))
    )

    assert result.updated == 2
    rows = context.execute(
        Query("things", (SelectItem("bar"),), where=Predicate("bar", Operator.EQUALS, "updated"))
    ).to_object_arrays()
    assert rows == [["updated"], ["updated"]]


def test_insert_nested_paths_builds_documents() -> None:
    context, database = _context()

    def _script(mutations: MutationContext) -> None:
        mutations.create_table("people")
        mutations.insert_into("people", {"name.first": "Jane", "name.last": "Doe"})

    context.execute_update(_script)

    assert database.people.find_one({}, {"_id": 0}) == {"name": {"first": "Jane", "last": "Doe"}}
    rows = context.execute(Query("people", (SelectItem("name.last"),))).to_object_arrays()
    assert rows == [["Doe"]]


def test_delete_by_row_id() -> None:
    context, _ = _context()
    inserted = []

    def _script(mutations: MutationContext) -> None:
        mutations.create_table("people")
        inserted.append(mutations.insert_into("people", {"name": "Jane"}))
        inserted.append(mutations.insert_into("people", {"name": "John"}))

    context.execute_update(_script)
    result = context.execute_update(
        lambda mutations: mutations.delete_from("people", Predicate("_id", Operator.EQUALS, str(inserted[0])))
    )

    assert result.deleted == 1
    assert context.execute(Query("people", (SelectItem("name"),))).to_object_arrays() == [["John"]]


def test_untranslatable_delete_filter_is_fatal() -> None:
    context, _ = _context()
    context.execute_update(_populate)

    with pytest.raises(UnsupportedFilterError):
        context.execute_update(
            lambda mutations: mutations.delete_from("things", Predicate("bar", Operator.LIKE, "h_"))
        )

    assert _count(context, "things") == 4


def test_failed_statement_keeps_earlier_statements() -> None:
    context, _ = _context()
    context.execute_update(_populate)

    def _script(mutations: MutationContext) -> None:
        mutations.insert_into("things", {"foo": 5})
        mutations.update("things", {"bar": "x"}, Predicate("bar", Operator.LIKE, "h_"))

    with pytest.raises(UnsupportedFilterError):
        context.execute_update(_script)

    assert _count(context, "things") == 5


def test_invalid_statements_raise_mutation_errors() -> None:
    context, _ = _context()
    context.execute_update(_populate)

    with pytest.raises(MutationError):
        context.execute_update(lambda mutations: mutations.create_table("things"))
    with pytest.raises(MutationError):
        context.execute_update(lambda mutations: mutations.insert_into("missing", {"a": 1}))


def test_delete_does_not_match_inside_arrays() -> None:
    context, database = _context()

    def _script(mutations: MutationContext) -> None:
        mutations.create_table("things", ["tags"])
        mutations.insert_into("things", {"tags": "a"})
        mutations.insert_into("things", {"tags": ["a", "b"]})

    context.execute_update(_script)
    assert context.get_table("things").get_column("tags").type == ColumnType.STRING

    result = context.execute_update(
        lambda mutations: mutations.delete_from("things", Predicate("tags", Operator.EQUALS, "a"))
    )

    assert result.deleted == 1
    assert list(database.things.find({}, {"_id": 0})) == [{"tags": ["a", "b"]}]
