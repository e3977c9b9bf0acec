"""In-memory relational evaluation over materialised records.

Records map column names to normalised values. Comparison and ordering follow
the store's rules so a post-processed result matches a pushed-down one.
"""

from __future__ import annotations

import datetime
import re
from functools import lru_cache
from typing import Any, Callable, Mapping, Sequence, TypeVar

from docbridge.errors import QueryError
from docbridge.models.query import (
    CompoundFilter,
    FilterItem,
    FunctionType,
    LogicalOperator,
    Operator,
    OrderByItem,
    Predicate,
    SelectItem,
)
from docbridge.models.values import normalize_value
from docbridge.planner.translator import like_to_regex

T = TypeVar("T")

# Cross-type sort order used by the store: null, numbers, strings, documents,
# arrays, binary data, booleans, dates.
_NULL_RANK = 0
_NUMBER_RANK = 1


def type_rank(value: Any) -> int:
    if value is None:
        return _NULL_RANK
    if isinstance(value, bool):
        return 6
    if isinstance(value, (int, float)):
        return _NUMBER_RANK
    if isinstance(value, str):
        return 2
    if isinstance(value, dict):
        return 3
    if isinstance(value, list):
        return 4
    if isinstance(value, bytes):
        return 5
    if isinstance(value, (datetime.datetime, datetime.date)):
        return 7
    return 8


def sort_key(value: Any) -> tuple[int, Any]:
    rank = type_rank(value)
    if value is None:
        return rank, 0
    if isinstance(value, (dict, list)):
        return rank, repr(value)
    if isinstance(value, datetime.datetime):
        return rank, value.replace(tzinfo=None)
    if isinstance(value, datetime.date):
        return rank, datetime.datetime(value.year, value.month, value.day)
    return rank, value


def values_equal(left: Any, right: Any) -> bool:
    if left is None or right is None:
        return left is None and right is None
    if type_rank(left) != type_rank(right):
        return False
    return left == right


def compare(left: Any, right: Any) -> int | None:
    """Three-way comparison, or ``None`` when the values are not comparable."""
    if left is None or right is None:
        return None
    rank = type_rank(left)
    if rank != type_rank(right) or rank in (3, 4, 8):
        return None
    left_key, right_key = sort_key(left)[1], sort_key(right)[1]
    if left_key < right_key:
        return -1
    if left_key > right_key:
        return 1
    return 0


@lru_cache(maxsize=256)
def _like_regex(pattern: str) -> re.Pattern[str]:
    return re.compile(like_to_regex(pattern, native=False), re.DOTALL)


def evaluate_filter(item: FilterItem, record: Mapping[str, Any]) -> bool:
    if isinstance(item, CompoundFilter):
        results = (evaluate_filter(child, record) for child in item.items)
        return all(results) if item.operator == LogicalOperator.AND else any(results)
    return evaluate_predicate(item, record)


def evaluate_predicate(predicate: Predicate, record: Mapping[str, Any]) -> bool:
    value = record.get(predicate.column)
    operator = predicate.operator
    operand = normalize_value(predicate.operand)

    if operator == Operator.IS_NULL:
        return value is None
    if operator == Operator.IS_NOT_NULL:
        return value is not None
    if operator == Operator.EQUALS:
        return values_equal(value, operand)
    if operator == Operator.NOT_EQUALS:
        return value is not None and not values_equal(value, operand)
    if operator == Operator.IN:
        return any(values_equal(value, candidate) for candidate in operand)
    if operator == Operator.LIKE:
        if not isinstance(value, str):
            return False
        if not isinstance(operand, str):
            raise QueryError(f"LIKE pattern for {predicate.column!r} must be a string")
        return _like_regex(operand).search(value) is not None

    outcome = compare(value, operand)
    if outcome is None:
        return False
    if operator == Operator.GREATER_THAN:
        return outcome > 0
    if operator == Operator.GREATER_OR_EQUAL:
        return outcome >= 0
    if operator == Operator.LESS_THAN:
        return outcome < 0
    if operator == Operator.LESS_OR_EQUAL:
        return outcome <= 0
    raise QueryError(f"Unsupported operator {operator!r}")


def sort_records(records: Sequence[Mapping[str, Any]], order_by: Sequence[OrderByItem]) -> list[Mapping[str, Any]]:
    ordered = list(records)
    # stable sorts applied from the least significant key
    for item in reversed(order_by):
        ordered.sort(key=lambda record: sort_key(record.get(item.column)), reverse=not item.ascending)
    return ordered


def apply_paging(rows: Sequence[T], skip: int, max_rows: int | None) -> list[T]:
    end = None if max_rows is None else skip + max_rows
    return list(rows[skip:end])


def aggregate(select_items: Sequence[SelectItem], records: Sequence[Mapping[str, Any]]) -> list[Any]:
    return [_aggregate_item(item, records) for item in select_items]


def _aggregate_item(item: SelectItem, records: Sequence[Mapping[str, Any]]) -> Any:
    if item.is_count_all:
        return len(records)

    values = [record.get(item.column) for record in records]
    present = [value for value in values if value is not None]
    if item.function == FunctionType.COUNT:
        return len(present)
    if not present:
        return None
    if item.function in (FunctionType.SUM, FunctionType.AVG):
        numbers = _require_numbers(item, present)
        total = sum(numbers)
        return total if item.function == FunctionType.SUM else total / len(numbers)
    chooser: Callable[..., Any] = min if item.function == FunctionType.MIN else max
    return chooser(present, key=sort_key)


def _require_numbers(item: SelectItem, values: list[Any]) -> list[int | float]:
    for value in values:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise QueryError(
                f"{item.label} requires numeric values, found {type(value).__name__} in {item.column!r}"
            )
    return values


__all__ = [
    "aggregate",
    "apply_paging",
    "compare",
    "evaluate_filter",
    "evaluate_predicate",
    "sort_key",
    "sort_records",
    "type_rank",
    "values_equal",
]
