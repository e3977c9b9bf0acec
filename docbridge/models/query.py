"""Abstract single-table query model consumed by the planner."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional, Sequence, Tuple, Union

from docbridge.errors import QueryError

WILDCARD = "*"


class Operator(str, Enum):
    EQUALS = "="
    NOT_EQUALS = "<>"
    GREATER_THAN = ">"
    GREATER_OR_EQUAL = ">="
    LESS_THAN = "<"
    LESS_OR_EQUAL = "<="
    IN = "IN"
    LIKE = "LIKE"
    IS_NULL = "IS NULL"
    IS_NOT_NULL = "IS NOT NULL"


class LogicalOperator(str, Enum):
    AND = "AND"
    OR = "OR"


class FunctionType(str, Enum):
    COUNT = "COUNT"
    SUM = "SUM"
    MIN = "MIN"
    MAX = "MAX"
    AVG = "AVG"


class _Combinable:
    def __and__(self, other: "FilterItem") -> "CompoundFilter":
        return and_(self, other)  # type: ignore[arg-type]

    def __or__(self, other: "FilterItem") -> "CompoundFilter":
        return or_(self, other)  # type: ignore[arg-type]


@dataclass(frozen=True)
class Predicate(_Combinable):
    """A single ``column <operator> operand`` condition."""

    column: str
    operator: Operator
    operand: Any = None

    def __post_init__(self) -> None:
        operator = Operator(self.operator)
        object.__setattr__(self, "operator", operator)
        if operator == Operator.IN:
            if isinstance(self.operand, (str, bytes)) or not isinstance(self.operand, (list, tuple, set, frozenset)):
                raise QueryError(f"IN predicate on {self.column!r} requires a collection of values")
            object.__setattr__(self, "operand", tuple(self.operand))
        elif operator in (Operator.IS_NULL, Operator.IS_NOT_NULL) and self.operand is not None:
            raise QueryError(f"{operator.value} predicate on {self.column!r} takes no operand")

    def columns(self) -> Iterator[str]:
        yield self.column


@dataclass(frozen=True)
class CompoundFilter(_Combinable):
    """Conjunction or disjunction of filter items."""

    operator: LogicalOperator
    items: Tuple["FilterItem", ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "operator", LogicalOperator(self.operator))
        object.__setattr__(self, "items", tuple(self.items))
        if not self.items:
            raise QueryError(f"{self.operator.value} filter requires at least one item")

    def columns(self) -> Iterator[str]:
        for item in self.items:
            yield from item.columns()

    def predicates(self) -> Iterator[Predicate]:
        for item in self.items:
            if isinstance(item, Predicate):
                yield item
            else:
                yield from item.predicates()


FilterItem = Union[Predicate, CompoundFilter]


def _combine(operator: LogicalOperator, items: Sequence[FilterItem]) -> CompoundFilter:
    flattened: list[FilterItem] = []
    for item in items:
        if isinstance(item, CompoundFilter) and item.operator == operator:
            flattened.extend(item.items)
        else:
            flattened.append(item)
    return CompoundFilter(operator=operator, items=tuple(flattened))


def and_(*items: FilterItem) -> CompoundFilter:
    return _combine(LogicalOperator.AND, items)


def or_(*items: FilterItem) -> CompoundFilter:
    return _combine(LogicalOperator.OR, items)


@dataclass(frozen=True)
class SelectItem:
    """A column, an aggregate over a column, or ``COUNT(*)``."""

    column: Optional[str] = None
    function: Optional[FunctionType] = None
    alias: Optional[str] = None

    def __post_init__(self) -> None:
        if self.function is not None:
            object.__setattr__(self, "function", FunctionType(self.function))
        if self.column is None and self.function != FunctionType.COUNT:
            raise QueryError("Only COUNT may be selected without a column")
        if self.column == WILDCARD and self.function is not None:
            raise QueryError("Aggregate functions cannot be applied to '*'")

    @classmethod
    def count_all(cls, alias: Optional[str] = None) -> "SelectItem":
        return cls(column=None, function=FunctionType.COUNT, alias=alias)

    @classmethod
    def wildcard(cls) -> "SelectItem":
        return cls(column=WILDCARD)

    @property
    def is_wildcard(self) -> bool:
        return self.column == WILDCARD

    @property
    def is_count_all(self) -> bool:
        return self.function == FunctionType.COUNT and self.column is None

    @property
    def is_aggregate(self) -> bool:
        return self.function is not None

    @property
    def label(self) -> str:
        if self.alias:
            return self.alias
        if self.is_count_all:
            return "COUNT(*)"
        if self.function is not None:
            return f"{self.function.value}({self.column})"
        return str(self.column)


@dataclass(frozen=True)
class OrderByItem:
    column: str
    ascending: bool = True


@dataclass(frozen=True)
class Query:
    """Immutable description of a single-table query.

    ``first_row`` is 1-based, as in ``FIRST ROW 2`` skipping one row.
    """

    table: str
    select_items: Tuple[SelectItem, ...] = (SelectItem(column=WILDCARD),)
    where: Optional[FilterItem] = None
    order_by: Tuple[OrderByItem, ...] = ()
    first_row: Optional[int] = None
    max_rows: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "select_items", tuple(self.select_items))
        object.__setattr__(self, "order_by", tuple(self.order_by))
        if not self.select_items:
            raise QueryError("Query must select at least one item")
        if self.first_row is not None and self.first_row < 1:
            raise QueryError(f"first_row must be 1 or greater, got {self.first_row}")
        if self.max_rows is not None and self.max_rows < 0:
            raise QueryError(f"max_rows must not be negative, got {self.max_rows}")

    @property
    def skip(self) -> int:
        return self.first_row - 1 if self.first_row else 0

    @property
    def has_aggregates(self) -> bool:
        return any(item.is_aggregate for item in self.select_items)

    @property
    def has_paging(self) -> bool:
        return self.skip > 0 or self.max_rows is not None


__all__ = [
    "CompoundFilter",
    "FilterItem",
    "FunctionType",
    "LogicalOperator",
    "Operator",
    "OrderByItem",
    "Predicate",
    "Query",
    "SelectItem",
    "WILDCARD",
    "and_",
    "or_",
]
