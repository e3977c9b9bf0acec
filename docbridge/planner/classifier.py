"""Push-down decision procedure for single-table queries."""

from __future__ import annotations

import dataclasses
import logging
from typing import Iterable

from docbridge.errors import QueryError, TranslationError
from docbridge.models.plans import TranslationPlan
from docbridge.models.query import Query, SelectItem
from docbridge.models.schema import Table
from docbridge.planner.translator import NativeQueryTranslator


def resolve_query(query: Query, table: Table) -> Query:
    """Expand ``*`` into the table's columns and check every referenced column exists."""
    select_items: list[SelectItem] = []
    for item in query.select_items:
        if item.is_wildcard:
            select_items.extend(SelectItem(column=column.name) for column in table.columns)
        else:
            select_items.append(item)

    if not select_items:
        raise QueryError(f"Table {table.name!r} has no columns to select")
    if any(item.is_aggregate for item in select_items) and not all(item.is_aggregate for item in select_items):
        raise QueryError("Aggregate functions cannot be mixed with plain columns without GROUP BY")

    resolved = dataclasses.replace(query, select_items=tuple(select_items))
    require_columns(table, required_columns(resolved))
    return resolved


def required_columns(query: Query) -> list[str]:
    """Column names the query reads, in first-reference order."""
    names: list[str] = []
    candidates: list[str] = [item.column for item in query.select_items if item.column and not item.is_wildcard]
    if query.where is not None:
        candidates.extend(query.where.columns())
    candidates.extend(item.column for item in query.order_by)
    for name in candidates:
        if name not in names:
            names.append(name)
    return names


def require_columns(table: Table, names: Iterable[str]) -> None:
    missing = [name for name in names if table.get_column(name) is None]
    if missing:
        raise QueryError(f"Columns {missing!r} not present in table {table.name!r}")


class QueryClassifier:
    """Decides, clause by clause, what the store can evaluate natively."""

    def __init__(self, *, pushdown_enabled: bool = True, logger: logging.Logger | None = None) -> None:
        self._pushdown_enabled = pushdown_enabled
        self._logger = logger or logging.getLogger(__name__)

    def classify(self, query: Query, table: Table) -> TranslationPlan:
        translator = NativeQueryTranslator(table)
        plan = TranslationPlan(
            collection=table.name,
            native_projection=translator.translate_projection(required_columns(query)),
        )

        if not self._pushdown_enabled:
            plan.filter_pushdown = plan.sort_pushdown = plan.paging_pushdown = False
            plan.reasons.append("push-down disabled")
            return self._log(plan)

        if query.where is not None:
            try:
                plan.native_filter = translator.translate_filter(query.where)
            except TranslationError as exc:
                # the whole filter tree is re-evaluated in memory; only safe conjuncts pre-filter
                plan.filter_pushdown = False
                plan.reasons.append(str(exc))
                plan.native_filter = translator.translate_prefilter(query.where)

        if query.has_aggregates:
            plan.sort_pushdown = plan.paging_pushdown = False
            if plan.filter_pushdown and all(item.is_count_all for item in query.select_items):
                plan.native_count = True
            else:
                functions = sorted({item.label for item in query.select_items})
                plan.reasons.append(f"aggregates {functions} evaluated in memory")
            return self._log(plan)

        if not plan.filter_pushdown:
            plan.sort_pushdown = plan.paging_pushdown = False
            return self._log(plan)

        try:
            plan.native_sort = translator.translate_sort(query.order_by)
        except TranslationError as exc:
            plan.sort_pushdown = plan.paging_pushdown = False
            plan.reasons.append(str(exc))
            return self._log(plan)

        if query.max_rows == 0:
            # a native limit of 0 means "no limit"
            plan.paging_pushdown = False
            plan.reasons.append("max_rows of 0 applied in memory")
            return self._log(plan)

        plan.native_skip = query.skip
        plan.native_limit = query.max_rows
        return self._log(plan)

    def _log(self, plan: TranslationPlan) -> TranslationPlan:
        self._logger.debug(
            "Classified query on %s as %s (reasons=%s)",
            plan.collection,
            plan.execution_path.value,
            plan.reasons,
        )
        return plan


__all__ = ["QueryClassifier", "require_columns", "required_columns", "resolve_query"]
