from __future__ import annotations

import pytest

from docbridge.errors import QueryError
from docbridge.models import (
    Column,
    ColumnType,
    ExecutionPath,
    FunctionType,
    Operator,
    OrderByItem,
    Predicate,
    PushdownLevel,
    Query,
    SelectItem,
    Table,
    and_,
)
from docbridge.planner import QueryClassifier, required_columns, resolve_query


def _table() -> Table:
    return Table(
        "people",
        [
            Column("_id", ColumnType.ROW_ID),
            Column("name", ColumnType.STRING),
            Column("age", ColumnType.INTEGER),
            Column("address", ColumnType.MAP),
        ],
    )


def _classify(query: Query, *, pushdown_enabled: bool = True):
    table = _table()
    return QueryClassifier(pushdown_enabled=pushdown_enabled).classify(resolve_query(query, table), table)


def test_fully_translatable_query_runs_natively() -> None:
    plan = _classify(
        Query(
            "people",
            (SelectItem("name"),),
            where=Predicate("age", Operator.GREATER_THAN, 30),
            order_by=(OrderByItem("age", ascending=False),),
            first_row=3,
            max_rows=10,
        )
    )

    assert plan.execution_path == ExecutionPath.NATIVE
    assert plan.pushdown_level == PushdownLevel.FULL
    assert not plan.is_post_processed
    assert plan.native_filter == {"age": {"$not": {"$type": "array"}, "$gt": 30}}
    assert plan.native_projection == {"age": 1, "name": 1}
    assert plan.native_sort == [("age", -1)]
    assert plan.native_skip == 2
    assert plan.native_limit == 10
    assert plan.reasons == []


def test_untranslatable_conjunct_forces_post_processing_with_prefilter() -> None:
    plan = _classify(
        Query(
            "people",
            (SelectItem("name"),),
            where=and_(Predicate("age", Operator.GREATER_THAN, 3), Predicate("name", Operator.LIKE, "J_n")),
            max_rows=5,
        )
    )

    assert plan.execution_path == ExecutionPath.POST_PROCESSED
    assert plan.pushdown_level == PushdownLevel.PARTIAL
    assert not plan.filter_pushdown
    assert not plan.paging_pushdown
    assert plan.native_filter == {"age": {"$not": {"$type": "array"}, "$gt": 3}}
    assert plan.native_limit is None
    assert any("'_'" in reason for reason in plan.reasons)


def test_count_all_with_translatable_filter_is_native_count() -> None:
    plan = _classify(
        Query("people", (SelectItem.count_all(),), where=Predicate("name", Operator.EQUALS, "bar"))
    )

    assert plan.execution_path == ExecutionPath.NATIVE_COUNT
    assert plan.native_filter == {"name": {"$not": {"$type": "array"}, "$eq": "bar"}}


def test_count_all_with_untranslatable_filter_is_post_processed() -> None:
    plan = _classify(
        Query("people", (SelectItem.count_all(),), where=Predicate("name", Operator.LIKE, "b_r"))
    )

    assert plan.execution_path == ExecutionPath.POST_PROCESSED


def test_other_aggregates_are_post_processed() -> None:
    plan = _classify(
        Query(
            "people",
            (SelectItem("age", FunctionType.SUM),),
            where=Predicate("name", Operator.EQUALS, "bar"),
        )
    )

    assert plan.is_post_processed
    assert plan.filter_pushdown
    assert plan.native_filter == {"name": {"$not": {"$type": "array"}, "$eq": "bar"}}
    assert any("aggregates" in reason for reason in plan.reasons)


def test_sort_on_nested_column_is_post_processed() -> None:
    plan = _classify(Query("people", (SelectItem("name"),), order_by=(OrderByItem("address"),), max_rows=1))

    assert plan.is_post_processed
    assert plan.filter_pushdown
    assert not plan.sort_pushdown
    assert not plan.paging_pushdown


def test_zero_max_rows_is_applied_in_memory() -> None:
    plan = _classify(Query("people", (SelectItem("name"),), max_rows=0))

    assert plan.is_post_processed
    assert plan.pushdown_level == PushdownLevel.NONE


def test_disabled_pushdown_post_processes_everything() -> None:
    plan = _classify(
        Query("people", (SelectItem("name"),), where=Predicate("age", Operator.EQUALS, 1)),
        pushdown_enabled=False,
    )

    assert plan.execution_path == ExecutionPath.POST_PROCESSED
    assert plan.pushdown_level == PushdownLevel.NONE
    assert plan.native_filter == {}
    assert plan.reasons == ["push-down disabled"]


def test_resolve_query_expands_wildcard_in_table_order() -> None:
    resolved = resolve_query(Query("people"), _table())

    assert [item.column for item in resolved.select_items] == ["_id", "name", "age", "address"]


def test_resolve_query_rejects_unknown_columns_and_mixed_aggregates() -> None:
    with pytest.raises(QueryError):
        resolve_query(Query("people", (SelectItem("salary"),)), _table())
    with pytest.raises(QueryError):
        resolve_query(Query("people", (SelectItem("name"), SelectItem.count_all())), _table())
    with pytest.raises(QueryError):
        resolve_query(
            Query("people", (SelectItem("name"),), where=Predicate("salary", Operator.IS_NULL)),
            _table(),
        )


def test_required_columns_in_first_reference_order() -> None:
    query = Query(
        "people",
        (SelectItem("name"), SelectItem("age", alias="years")),
        where=and_(Predicate("address", Operator.IS_NOT_NULL), Predicate("name", Operator.EQUALS, "x")),
        order_by=(OrderByItem("_id"),),
    )

    assert required_columns(query) == ["name", "age", "address", "_id"]


def test_query_validates_paging() -> None:
    with pytest.raises(QueryError):
        Query("people", first_row=0)
    with pytest.raises(QueryError):
        Query("people", max_rows=-1)
    assert Query("people", first_row=2).skip == 1
