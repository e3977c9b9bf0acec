"""Translation of push-down-eligible query clauses into native MongoDB documents."""

from __future__ import annotations

import re
from typing import Any, Iterable, Sequence

from bson import ObjectId

from docbridge.errors import TranslationError
from docbridge.models.query import CompoundFilter, FilterItem, LogicalOperator, Operator, OrderByItem, Predicate
from docbridge.models.schema import ROW_ID_COLUMN, Column, ColumnType, Table
from docbridge.schema.paths import ColumnPath, IndexStep, parse_path

# Mongo "s" option matches Python re.DOTALL
REGEX_OPTIONS = "s"

_COMPARISON_OPERATORS = {
    Operator.GREATER_THAN: "$gt",
    Operator.GREATER_OR_EQUAL: "$gte",
    Operator.LESS_THAN: "$lt",
    Operator.LESS_OR_EQUAL: "$lte",
}
_NULL_CHECKS = (Operator.IS_NULL, Operator.IS_NOT_NULL)


def like_to_regex(pattern: Any, *, native: bool = True) -> str:
    """Convert a LIKE pattern into a regular expression.

    Native patterns may only use ``%``: ``X%`` anchors a prefix, ``%X`` a suffix,
    ``%X%`` matches a substring and ``%X%Y%`` ordered substrings.
    """
    if not isinstance(pattern, str):
        raise TranslationError(f"LIKE pattern must be a string, got {type(pattern).__name__}")
    if native and "_" in pattern:
        raise TranslationError(f"LIKE pattern {pattern!r} uses '_' which has no native anchor form")

    def _escape(segment: str) -> str:
        if native:
            return re.escape(segment)
        return ".".join(re.escape(part) for part in segment.split("_"))

    body = ".*".join(_escape(segment) for segment in pattern.split("%") if segment)
    prefix = "" if pattern.startswith("%") else "^"
    suffix = "" if pattern.endswith("%") else "$"
    return f"{prefix}{body}{suffix}"



def native_operands(column: Column | None, value: Any) -> list[Any]:
    """Native forms a relational operand may take.

    Row ids given as 24-hex text match both the ObjectId and the same text stored
    verbatim, since both materialise to that text.
    """
    if _is_row_id(column) and isinstance(value, str) and ObjectId.is_valid(value):
        return [ObjectId(value), value]
    return [value]


def _is_row_id(column: Column | None) -> bool:
    return column is not None and column.name == ROW_ID_COLUMN


def _not_array() -> dict[str, Any]:
    return {"$not": {"$type": "array"}}


def _conjoin(conditions: list[dict[str, Any]]) -> dict[str, Any]:
    if len(conditions) == 1:
        return conditions[0]
    return {"$and": conditions}


class NativeQueryTranslator:
    """Emits native filters matching exactly the rows in-memory evaluation keeps.

    Native matching descends into arrays where relational path resolution yields
    null, so translated paths carry explicit array-type guards. Column types are
    not trusted for this: they come from a sample or from the first value read.
    """

    def __init__(self, table: Table) -> None:
        self._table = table

    def translate_filter(self, item: FilterItem) -> dict[str, Any]:
        if isinstance(item, Predicate):
            return self.translate_predicate(item)
        children = [self.translate_filter(child) for child in item.items]
        if len(children) == 1:
            return children[0]
        key = "$and" if item.operator == LogicalOperator.AND else "$or"
        return {key: children}

    def translate_prefilter(self, item: FilterItem) -> dict[str, Any]:
        """Best-effort superset filter: the translatable conjuncts of a top-level AND."""
        if not isinstance(item, CompoundFilter) or item.operator != LogicalOperator.AND:
            try:
                return self.translate_filter(item)
            except TranslationError:
                return {}
        translated = []
        for child in item.items:
            try:
                translated.append(self.translate_filter(child))
            except TranslationError:
                continue
        if not translated:
            return {}
        return _conjoin(translated)

    def translate_predicate(self, predicate: Predicate) -> dict[str, Any]:
        column = self._table.get_column(predicate.column)
        path = parse_path(predicate.column)
        guards = self._step_guards(path)
        operator = predicate.operator

        if operator in _NULL_CHECKS:
            is_null = self._null_filter(path, column, guards)
            return is_null if operator == Operator.IS_NULL else {"$nor": [is_null]}

        if column is not None and column.type.is_nested:
            raise TranslationError(
                f"Column {predicate.column!r} is a {column.type.value}; "
                f"{operator.value} would use native array/document matching"
            )
        condition = self._condition(predicate, column)
        field = path.native_path
        if _is_row_id(column):
            matched = {field: condition}
        elif operator == Operator.NOT_EQUALS:
            # an array never equals a scalar
            matched = {"$or": [{field: {"$type": "array"}}, {field: condition}]}
        else:
            matched = {field: {**_not_array(), **condition}}
        return _conjoin([_guard(prefix, must_be_array) for prefix, must_be_array in guards] + [matched])

    def _condition(self, predicate: Predicate, column: Column | None) -> dict[str, Any]:
        operator = predicate.operator
        operand = predicate.operand

        if operator == Operator.EQUALS:
            forms = native_operands(column, operand)
            return {"$eq": forms[0]} if len(forms) == 1 else {"$in": forms}
        if operator == Operator.NOT_EQUALS:
            return {"$nin": [*native_operands(column, operand), None]}
        if operator == Operator.IN:
            return {"$in": [form for value in operand for form in native_operands(column, value)]}
        if operator in _COMPARISON_OPERATORS:
            if operand is None:
                raise TranslationError(f"Comparison of {predicate.column!r} with NULL")
            if len(native_operands(column, operand)) > 1:
                raise TranslationError(f"Range comparison of row id {predicate.column!r} spans ObjectId and text")
            return {_COMPARISON_OPERATORS[operator]: operand}
        if operator == Operator.LIKE:
            if _is_row_id(column):
                raise TranslationError(f"LIKE on row id {predicate.column!r} only matches its text form")
            return {"$regex": like_to_regex(operand), "$options": REGEX_OPTIONS}
        raise TranslationError(f"Operator {operator.value} has no native form")

    def _null_filter(
        self,
        path: ColumnPath,
        column: Column | None,
        guards: list[tuple[str, bool]],
    ) -> dict[str, Any]:
        value_is_null: list[dict[str, Any]] = [{path.native_path: None}]
        if not _is_row_id(column):
            # natively an array holding null matches null
            value_is_null.append({path.native_path: _not_array()})
        if not guards:
            return _conjoin(value_is_null)
        # a path cut short by an unexpected array or non-array resolves to null
        unreachable = [_guard(prefix, not must_be_array) for prefix, must_be_array in guards]
        return {"$or": [*unreachable, _conjoin(value_is_null)]}

    def _step_guards(self, path: ColumnPath) -> list[tuple[str, bool]]:
        """``(native prefix, must be an array)`` for every step below the root."""
        guards = []
        for position in range(1, len(path.steps)):
            prefix = path.prefix(position)
            if isinstance(path.steps[position], IndexStep):
                guards.append((prefix.native_path, True))
                continue
            column = self._table.get_column(prefix.raw)
            if column is not None and column.type == ColumnType.LIST:
                raise TranslationError(
                    f"Path {path.raw!r} steps by field name into list {prefix.raw!r}, "
                    "which matches any element natively"
                )
            guards.append((prefix.native_path, False))
        return guards

    def translate_projection(self, column_names: Iterable[str]) -> dict[str, int]:
        paths = sorted({parse_path(name).projection_path for name in column_names})
        kept: list[str] = []
        for path in paths:
            # a parent path already projects its children and overlapping paths are rejected natively
            if any(path.startswith(f"{parent}.") for parent in kept):
                continue
            kept.append(path)
        return {path: 1 for path in kept}

    def translate_sort(self, order_by: Sequence[OrderByItem]) -> list[tuple[str, int]]:
        native_sort = []
        for item in order_by:
            path = parse_path(item.column)
            column = self._table.get_column(item.column)
            if not path.is_simple:
                raise TranslationError(f"Sort column {item.column!r} is not a top-level field")
            if column is not None and column.type.is_nested:
                raise TranslationError(f"Sort column {item.column!r} is a nested {column.type.value}")
            native_sort.append((path.native_path, 1 if item.ascending else -1))
        return native_sort


def _guard(prefix: str, must_be_array: bool) -> dict[str, Any]:
    return {prefix: {"$type": "array"}} if must_be_array else {prefix: _not_array()}


__all__ = ["NativeQueryTranslator", "REGEX_OPTIONS", "like_to_regex", "native_operands"]
