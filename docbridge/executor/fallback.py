from __future__ import annotations

import logging

from docbridge.connectors.base import DocumentStore
from docbridge.executor.dataset import InMemoryDataSet
from docbridge.executor.evaluator import aggregate, apply_paging, evaluate_filter, sort_records
from docbridge.executor.materializer import ResultMaterializer
from docbridge.models.plans import TranslationPlan
from docbridge.models.query import Query
from docbridge.models.rows import Row
from docbridge.models.schema import Table
from docbridge.planner.classifier import required_columns


class PostProcessingExecutor:
    """Runs a widened native query and finishes the query in memory."""

    def __init__(self, store: DocumentStore, *, logger: logging.Logger | None = None) -> None:
        self._store = store
        self._logger = logger or logging.getLogger(__name__)

    def execute(self, query: Query, table: Table, plan: TranslationPlan) -> InMemoryDataSet:
        materializer = ResultMaterializer(table)
        columns = required_columns(query)

        cursor = self._store.find(
            table.name,
            filter=plan.native_filter,
            projection=plan.native_projection,
        )
        try:
            records = [materializer.record(document, columns) for document in cursor]
        finally:
            cursor.close()
        candidates = len(records)

        if query.where is not None and not plan.filter_pushdown:
            records = [record for record in records if evaluate_filter(query.where, record)]

        if query.has_aggregates:
            rows = [Row(query.select_items, aggregate(query.select_items, records))]
        else:
            records = sort_records(records, query.order_by)
            rows = [
                Row(query.select_items, [record[item.column] for item in query.select_items])
                for record in records
            ]
        rows = apply_paging(rows, query.skip, query.max_rows)

        self._logger.info(
            "Post-processed query on %s: %d candidate documents, %d rows (reasons=%s)",
            table.name,
            candidates,
            len(rows),
            plan.reasons,
        )
        return InMemoryDataSet(query.select_items, plan, rows)


__all__ = ["PostProcessingExecutor"]
