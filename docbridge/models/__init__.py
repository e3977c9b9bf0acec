from docbridge.models.plans import ExecutionPath, PushdownLevel, TranslationPlan
from docbridge.models.query import (
    WILDCARD,
    CompoundFilter,
    FilterItem,
    FunctionType,
    LogicalOperator,
    Operator,
    OrderByItem,
    Predicate,
    Query,
    SelectItem,
    and_,
    or_,
)
from docbridge.models.rows import Row
from docbridge.models.schema import ROW_ID_COLUMN, Column, ColumnType, Schema, Table
from docbridge.models.values import ValueKind, normalize_value, value_kind

__all__ = [
    "Column",
    "ColumnType",
    "CompoundFilter",
    "ExecutionPath",
    "FilterItem",
    "FunctionType",
    "LogicalOperator",
    "Operator",
    "OrderByItem",
    "Predicate",
    "PushdownLevel",
    "Query",
    "ROW_ID_COLUMN",
    "Row",
    "Schema",
    "SelectItem",
    "Table",
    "TranslationPlan",
    "ValueKind",
    "WILDCARD",
    "and_",
    "normalize_value",
    "or_",
    "value_kind",
]
