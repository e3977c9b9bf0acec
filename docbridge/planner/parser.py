"""SQL text front-end: maps single-table SELECT statements onto :class:`Query`."""

from __future__ import annotations

from typing import Any

import sqlglot
from sqlglot import exp

from docbridge.errors import PathSyntaxError, QueryParsingError
from docbridge.models.query import (
    FilterItem,
    FunctionType,
    Operator,
    OrderByItem,
    Predicate,
    Query,
    SelectItem,
    and_,
    or_,
)
from docbridge.schema.paths import parse_path

_COMPARISONS: dict[type[exp.Expression], Operator] = {
    exp.EQ: Operator.EQUALS,
    exp.NEQ: Operator.NOT_EQUALS,
    exp.GT: Operator.GREATER_THAN,
    exp.GTE: Operator.GREATER_OR_EQUAL,
    exp.LT: Operator.LESS_THAN,
    exp.LTE: Operator.LESS_OR_EQUAL,
}
# operand order flipped: 5 < x  ->  x > 5
_MIRRORED = {
    Operator.EQUALS: Operator.EQUALS,
    Operator.NOT_EQUALS: Operator.NOT_EQUALS,
    Operator.GREATER_THAN: Operator.LESS_THAN,
    Operator.GREATER_OR_EQUAL: Operator.LESS_OR_EQUAL,
    Operator.LESS_THAN: Operator.GREATER_THAN,
    Operator.LESS_OR_EQUAL: Operator.GREATER_OR_EQUAL,
}
_AGGREGATES: dict[type[exp.Expression], FunctionType] = {
    exp.Count: FunctionType.COUNT,
    exp.Sum: FunctionType.SUM,
    exp.Min: FunctionType.MIN,
    exp.Max: FunctionType.MAX,
    exp.Avg: FunctionType.AVG,
}
_PATH_EXPRESSIONS = (exp.Column, exp.Dot, exp.Bracket)


class QueryParser:
    def __init__(self, *, dialect: str | None = None) -> None:
        self._dialect = dialect

    def parse(self, sql: str) -> Query:
        try:
            expression = sqlglot.parse_one(sql, read=self._dialect)
        except (sqlglot.errors.ParseError, sqlglot.errors.TokenError) as exc:
            raise QueryParsingError(str(exc)) from exc

        if not isinstance(expression, exp.Select):
            raise QueryParsingError("Only SELECT statements are supported.")
        for unsupported in ("joins", "group", "having", "with"):
            if expression.args.get(unsupported):
                raise QueryParsingError(f"{unsupported.upper()} clauses are not supported.")

        from_clause = expression.args.get("from") or expression.args.get("from_")
        if from_clause is None or not isinstance(from_clause.this, exp.Table):
            raise QueryParsingError("Query must select FROM a single collection.")
        table = from_clause.this
        qualifiers = {table.name}
        if table.alias:
            qualifiers.add(table.alias)

        select_items = tuple(self._select_item(item, qualifiers) for item in expression.expressions)

        where = expression.args.get("where")
        order = expression.args.get("order")
        offset = _extract_int(expression.args.get("offset"))
        return Query(
            table=table.name,
            select_items=select_items,
            where=self._filter(where.this, qualifiers) if isinstance(where, exp.Where) else None,
            order_by=tuple(
                OrderByItem(
                    column=self._path(ordered.this, qualifiers),
                    ascending=not ordered.args.get("desc"),
                )
                for ordered in (order.expressions if isinstance(order, exp.Order) else [])
            ),
            first_row=offset + 1 if offset else None,
            max_rows=_extract_int(expression.args.get("limit")),
        )

    def _select_item(self, node: exp.Expression, qualifiers: set[str]) -> SelectItem:
        alias = None
        if isinstance(node, exp.Alias):
            alias = node.alias
            node = node.this

        if isinstance(node, exp.Star):
            if alias:
                raise QueryParsingError("'*' cannot be aliased.")
            return SelectItem.wildcard()

        function = _AGGREGATES.get(type(node))
        if function is not None:
            argument = node.this
            if function == FunctionType.COUNT and (argument is None or isinstance(argument, exp.Star)):
                return SelectItem.count_all(alias=alias)
            return SelectItem(column=self._path(argument, qualifiers), function=function, alias=alias)

        return SelectItem(column=self._path(node, qualifiers), alias=alias)

    def _filter(self, node: exp.Expression, qualifiers: set[str]) -> FilterItem:
        if isinstance(node, exp.Paren):
            return self._filter(node.this, qualifiers)
        if isinstance(node, exp.And):
            return and_(self._filter(node.left, qualifiers), self._filter(node.right, qualifiers))
        if isinstance(node, exp.Or):
            return or_(self._filter(node.left, qualifiers), self._filter(node.right, qualifiers))

        operator = _COMPARISONS.get(type(node))
        if operator is not None:
            left, right = node.left, node.right
            if isinstance(left, _PATH_EXPRESSIONS) and not isinstance(right, _PATH_EXPRESSIONS):
                return Predicate(self._path(left, qualifiers), operator, _literal(right))
            if isinstance(right, _PATH_EXPRESSIONS) and not isinstance(left, _PATH_EXPRESSIONS):
                return Predicate(self._path(right, qualifiers), _MIRRORED[operator], _literal(left))
            raise QueryParsingError(f"Comparison {node.sql()!r} must compare one column with a literal.")

        if isinstance(node, exp.In):
            if node.args.get("query") is not None:
                raise QueryParsingError("IN sub-queries are not supported.")
            return Predicate(
                self._path(node.this, qualifiers),
                Operator.IN,
                tuple(_literal(value) for value in node.expressions),
            )
        if isinstance(node, exp.Like):
            return Predicate(self._path(node.this, qualifiers), Operator.LIKE, _literal(node.expression))
        if isinstance(node, exp.Is) and isinstance(node.expression, exp.Null):
            return Predicate(self._path(node.this, qualifiers), Operator.IS_NULL)
        if isinstance(node, exp.Not) and isinstance(node.this, exp.Is) and isinstance(node.this.expression, exp.Null):
            return Predicate(self._path(node.this.this, qualifiers), Operator.IS_NOT_NULL)

        raise QueryParsingError(f"Unsupported condition {node.sql()!r}.")

    def _path(self, node: exp.Expression | None, qualifiers: set[str]) -> str:
        if not isinstance(node, _PATH_EXPRESSIONS):
            rendered = node.sql() if node is not None else "<missing>"
            raise QueryParsingError(f"Expected a column reference, got {rendered!r}.")
        path = node.sql(dialect=self._dialect).replace('"', "").replace("`", "")
        head, _, rest = path.partition(".")
        if rest and head in qualifiers:
            path = rest
        try:
            parse_path(path)
        except PathSyntaxError as exc:
            raise QueryParsingError(str(exc)) from exc
        return path


def _literal(node: exp.Expression) -> Any:
    if isinstance(node, exp.Paren):
        return _literal(node.this)
    if isinstance(node, exp.Null):
        return None
    if isinstance(node, exp.Boolean):
        return bool(node.this)
    if isinstance(node, exp.Neg):
        value = _literal(node.this)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise QueryParsingError(f"Cannot negate {node.this.sql()!r}.")
        return -value
    if isinstance(node, exp.Literal):
        if node.is_string:
            return node.this
        if node.is_int:
            return int(node.this)
        return float(node.this)
    raise QueryParsingError(f"Expected a literal value, got {node.sql()!r}.")


def _extract_int(limit_or_offset: exp.Expression | None) -> int | None:
    if limit_or_offset is None:
        return None

    node = limit_or_offset
    if isinstance(node, (exp.Limit, exp.Offset)):
        node = node.expression

    if isinstance(node, exp.Literal) and node.is_int:
        return int(node.this)
    raise QueryParsingError(f"LIMIT/OFFSET must be an integer literal, got {node.sql()!r}.")


__all__ = ["QueryParser"]
